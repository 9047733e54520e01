"""Staffing metrics and forecasting built on resolved rosters."""

from staffplan.staffing.aggregator import SUB_TEAM_PREP_HOURS, StaffingAggregator
from staffplan.staffing.forecast import (
    MonthlyPlan,
    MonthlyPlanInputs,
    MonthlyVolumeForecast,
    average_job_duration,
    daily_routes_needed,
    plan_month,
)

__all__ = [
    "SUB_TEAM_PREP_HOURS",
    "StaffingAggregator",
    # Forecasting
    "MonthlyPlan",
    "MonthlyPlanInputs",
    "MonthlyVolumeForecast",
    "average_job_duration",
    "daily_routes_needed",
    "plan_month",
]
