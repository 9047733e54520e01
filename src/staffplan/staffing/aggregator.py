"""Staffing metrics derived from a resolved roster.

The formulas here feed operator dashboards and printed reports, so they are
kept exactly as the operations team defined them:

- hours_per_tech = 8 - average drive time + overtime per tech
- hours_available = techs_on_route * hours_per_tech
- dt_hours_available = demo_techs_working * hours_per_tech
- sub_teams = demo_techs_working // 2
- labor totals include 1.5 prep hours per booked subcontractor team
- potential_new_jobs = floor(max(0, surplus) / average job duration)
- inefficient_demo_hours = max(0, dt_hours_available - internal demo need)

Every metric is clamped to be non-negative except base_work_surplus, which
is intentionally signed.
"""

import logging
import math
from datetime import date
from typing import Iterable, Optional

from staffplan.domain.models import (
    DailyStats,
    ResolvedDayEntry,
    Role,
    RosterDay,
    StaffingConfig,
    StaffingMetrics,
)
from staffplan.domain.policies import DayOfWeekForecast, NewJobForecast

logger = logging.getLogger(__name__)

# Prep time added per subcontractor team, in hours.
SUB_TEAM_PREP_HOURS = 1.5


class StaffingAggregator:
    """Aggregates a resolved roster into operational staffing metrics.

    Example:
        >>> aggregator = StaffingAggregator()
        >>> metrics = aggregator.aggregate(d, roster_day.entries, config, stats)
        >>> metrics.potential_new_jobs
        3
    """

    def __init__(
        self,
        forecast: Optional[NewJobForecast] = None,
        second_shift_zone: str = "2nd Shift",
    ):
        """Initialize aggregator.

        Args:
            forecast: New-job forecast used for the available hours goal.
            second_shift_zone: Zone whose lead runs a route.
        """
        self.forecast = forecast or DayOfWeekForecast()
        self.second_shift_zone = second_shift_zone

    def is_route_eligible(
        self,
        entry: ResolvedDayEntry,
        second_shift_lead_ids: frozenset[str] = frozenset(),
    ) -> bool:
        """Check whether an entry's person runs a route when working.

        Route runners are MIT techs not in training, plus the designated
        second-shift lead.
        """
        person = entry.person
        if entry.person_id in second_shift_lead_ids:
            return True
        if entry.role is Role.MIT_TECH:
            return person is None or not person.in_training
        if entry.role is Role.SECOND_SHIFT_LEAD:
            return True
        if entry.role is Role.MIT_LEAD and person is not None:
            return person.is_zone_lead and person.zone == self.second_shift_zone
        return False

    def count_techs_on_route(
        self,
        entries: Iterable[ResolvedDayEntry],
        second_shift_lead_ids: frozenset[str] = frozenset(),
    ) -> int:
        return sum(
            1
            for e in entries
            if e.is_working and self.is_route_eligible(e, second_shift_lead_ids)
        )

    def count_demo_techs_working(self, entries: Iterable[ResolvedDayEntry]) -> int:
        return sum(1 for e in entries if e.role is Role.DEMO_TECH and e.is_working)

    def aggregate(
        self,
        d: date,
        entries: Iterable[ResolvedDayEntry],
        config: Optional[StaffingConfig] = None,
        stats: Optional[DailyStats] = None,
        second_shift_lead_ids: Iterable[str] = (),
    ) -> StaffingMetrics:
        """Compute staffing metrics for one date.

        Args:
            d: The date the entries were resolved for.
            entries: Resolved roster entries for the date.
            config: Monthly numeric configuration; missing means zeros.
            stats: Already-recorded job and labor figures; missing means zeros.
            second_shift_lead_ids: Extra IDs to treat as the second-shift lead.

        Returns:
            StaffingMetrics for the date.
        """
        entries = list(entries)
        config = config or StaffingConfig()
        stats = stats or DailyStats()
        lead_ids = frozenset(second_shift_lead_ids)

        hours_per_tech = config.hours_per_tech
        techs_on_route = self.count_techs_on_route(entries, lead_ids)
        demo_techs_working = self.count_demo_techs_working(entries)
        sub_teams = demo_techs_working // 2

        hours_available = techs_on_route * hours_per_tech
        dt_hours_available = demo_techs_working * hours_per_tech

        prep_hours = max(0, stats.sub_team_count or 0) * SUB_TEAM_PREP_HOURS
        total_labor_hours = max(0.0, (stats.total_labor_hours or 0) + prep_hours)
        total_tech_hours = max(0.0, (stats.total_tech_hours or 0) + prep_hours)
        dt_hours = max(0.0, stats.dt_labor_hours or 0)

        base_work_surplus = hours_available - total_labor_hours

        job_duration = config.average_job_duration_hours or 0
        potential_new_jobs = 0
        if base_work_surplus > 0 and job_duration > 0:
            potential_new_jobs = math.floor(base_work_surplus / job_duration)

        sub_hours_handled = max(0.0, stats.subcontractor_demo_hours)
        internal_demo_hours_needed = max(0.0, dt_hours - sub_hours_handled)
        inefficient_demo_hours = max(0.0, dt_hours_available - internal_demo_hours_needed)

        forecasted_new_jobs = max(0.0, self.forecast.new_jobs_for(d) or 0)
        available_hours_goal = (
            total_labor_hours + dt_hours + forecasted_new_jobs * max(0, job_duration)
        )

        metrics = StaffingMetrics(
            schedule_date=d,
            hours_per_tech=hours_per_tech,
            techs_on_route=techs_on_route,
            demo_techs_working=demo_techs_working,
            sub_teams=sub_teams,
            hours_available=hours_available,
            dt_hours_available=dt_hours_available,
            prep_hours=prep_hours,
            total_labor_hours=total_labor_hours,
            total_tech_hours=total_tech_hours,
            dt_hours=dt_hours,
            base_work_surplus=base_work_surplus,
            potential_new_jobs=potential_new_jobs,
            sub_hours_handled=sub_hours_handled,
            internal_demo_hours_needed=internal_demo_hours_needed,
            inefficient_demo_hours=inefficient_demo_hours,
            forecasted_new_jobs=forecasted_new_jobs,
            available_hours_goal=available_hours_goal,
        )
        logger.debug("Staffing metrics for %s: %s", d.isoformat(), metrics.as_dict())
        return metrics

    def aggregate_day(
        self,
        roster_day: RosterDay,
        config: Optional[StaffingConfig] = None,
        stats: Optional[DailyStats] = None,
    ) -> StaffingMetrics:
        """Compute staffing metrics for an already-resolved RosterDay."""
        return self.aggregate(roster_day.schedule_date, roster_day.entries, config, stats)
