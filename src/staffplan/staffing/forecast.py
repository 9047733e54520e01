"""Monthly staffing plan and new-job forecasting.

This module turns a month's sales pipeline inputs into the techs needed per
day, spreads projected jobs over the days of a month, and estimates the
average job duration from recent daily stats.
"""

import calendar
import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from staffplan.domain.models import SATURDAY, SUNDAY, DailyStats, day_index
from staffplan.domain.policies import NewJobForecast

# Relative job volume by day type.
SATURDAY_WEIGHT = 0.5
SUNDAY_WEIGHT = 0.25

DEFAULT_DAYS_IN_MONTH = 22
DEFAULT_JOB_DURATION_HOURS = 4.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up."""
    return math.floor(value + 0.5)


@dataclass
class MonthlyPlanInputs:
    """Pipeline and labor inputs for planning one month.

    Attributes:
        leads_target: Target number of leads for the month.
        leads_percent_goal: Fraction of the lead target expected.
        booking_rate: Fraction of leads that become sales opportunities.
        insurance_closing_rate: Closing rate on insurance opportunities.
        cash_closing_rate: Closing rate on cash opportunities.
        average_days_onsite: Days a job stays active.
        hours_per_appointment: Labor hours per active job visit.
        average_drive_time_hours: Average daily drive time per tech.
        overtime_hours_per_tech_per_day: Planned overtime per tech per day.
        team_members_off_per_day: Expected absences per day.
        days_in_month: Working days in the month.
    """

    leads_target: float = 0.0
    leads_percent_goal: float = 0.0
    booking_rate: float = 0.0
    insurance_closing_rate: float = 0.0
    cash_closing_rate: float = 0.0
    average_days_onsite: float = 0.0
    hours_per_appointment: float = 0.0
    average_drive_time_hours: float = 0.0
    overtime_hours_per_tech_per_day: float = 0.0
    team_members_off_per_day: int = 0
    days_in_month: int = DEFAULT_DAYS_IN_MONTH


@dataclass
class MonthlyPlan:
    """Derived staffing plan for one month."""

    actual_leads: int
    sales_ops: int
    projected_jobs: int
    active_jobs_per_day: float
    hours_needed_per_day: float
    effective_work_hours: float
    techs_needed: int
    staffing_need: int
    current_staffing: int
    staffing_delta: int


def plan_month(inputs: MonthlyPlanInputs, current_staffing: int = 0) -> MonthlyPlan:
    """Compute the staffing plan for a month.

    Args:
        inputs: The month's pipeline and labor inputs.
        current_staffing: Route-running techs currently on the roster.

    Returns:
        MonthlyPlan. Techs needed is 0 when effective hours are not positive.
    """
    actual_leads = round_half_up(inputs.leads_percent_goal * inputs.leads_target)
    sales_ops = round_half_up(actual_leads * inputs.booking_rate)
    projected_jobs = round_half_up(
        sales_ops * inputs.insurance_closing_rate
        + sales_ops * inputs.cash_closing_rate
    )
    days = inputs.days_in_month or DEFAULT_DAYS_IN_MONTH
    active_jobs_per_day = projected_jobs / days * inputs.average_days_onsite
    hours_needed_per_day = active_jobs_per_day * inputs.hours_per_appointment

    effective_work_hours = (
        8 - (inputs.average_drive_time_hours or 0)
        + (inputs.overtime_hours_per_tech_per_day or 0)
    )
    techs_needed = 0
    if effective_work_hours > 0:
        techs_needed = math.ceil(hours_needed_per_day / effective_work_hours)

    staffing_need = techs_needed + (inputs.team_members_off_per_day or 0)
    return MonthlyPlan(
        actual_leads=actual_leads,
        sales_ops=sales_ops,
        projected_jobs=projected_jobs,
        active_jobs_per_day=active_jobs_per_day,
        hours_needed_per_day=hours_needed_per_day,
        effective_work_hours=effective_work_hours,
        techs_needed=techs_needed,
        staffing_need=staffing_need,
        current_staffing=current_staffing,
        staffing_delta=current_staffing - staffing_need,
    )


def _day_weight(d: date) -> float:
    index = day_index(d)
    if index == SATURDAY:
        return SATURDAY_WEIGHT
    if index == SUNDAY:
        return SUNDAY_WEIGHT
    return 1.0


def month_dates(year: int, month: int) -> list[date]:
    """All dates of a month."""
    days_in_month = calendar.monthrange(year, month)[1]
    return [date(year, month, day) for day in range(1, days_in_month + 1)]


@dataclass
class MonthlyVolumeForecast(NewJobForecast):
    """Spreads a month's projected jobs over its days.

    Saturdays carry half and Sundays a quarter of a weekday's volume.
    Dates outside the forecast month get no jobs.

    Attributes:
        year: Forecast year.
        month: Forecast month (1-12).
        projected_jobs: Jobs projected for the whole month.
    """

    year: int
    month: int
    projected_jobs: float

    @property
    def weekday_jobs(self) -> float:
        if self.projected_jobs <= 0:
            return 0.0
        total_weight = sum(_day_weight(d) for d in month_dates(self.year, self.month))
        return self.projected_jobs / total_weight

    def new_jobs_for(self, d: date) -> float:
        if d.year != self.year or d.month != self.month:
            return 0.0
        return self.weekday_jobs * _day_weight(d)


def daily_routes_needed(
    year: int,
    month: int,
    base_hours_needed: float,
    hours_per_route: float,
) -> list[float]:
    """Routes needed on each day of a month.

    Args:
        year: Calendar year.
        month: Calendar month (1-12).
        base_hours_needed: Labor hours needed on a weekday.
        hours_per_route: Productive hours per route.

    Returns:
        One value per day; all zeros when hours_per_route is not positive.
    """
    routes = []
    for d in month_dates(year, month):
        hours_needed = base_hours_needed * _day_weight(d)
        routes.append(hours_needed / hours_per_route if hours_per_route > 0 else 0.0)
    return routes


def average_job_duration(
    recent_stats: Optional[Iterable[DailyStats]],
    job_type: str = "install",
    fallback: float = DEFAULT_JOB_DURATION_HOURS,
) -> float:
    """Average tech hours per job of a type across recent days.

    Args:
        recent_stats: Daily stats for the lookback window.
        job_type: Job type key in the per-type breakdowns.
        fallback: Value used when no jobs of the type were recorded.
    """
    total_hours = 0.0
    total_jobs = 0
    for stats in recent_stats or []:
        total_hours += stats.job_type_tech_hours.get(job_type, 0) or 0
        total_jobs += stats.job_type_counts.get(job_type, 0) or 0
    if total_jobs <= 0:
        return fallback
    return total_hours / total_jobs
