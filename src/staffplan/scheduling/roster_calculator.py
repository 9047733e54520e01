"""Whole-roster resolution for a date.

This module applies the ScheduleResolver to every person on the roster,
producing the sorted per-day view that calendars, dashboards and reports
consume, plus the per-month actual staffing series.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Mapping, Optional

from staffplan.domain.models import (
    MonthSchedule,
    Role,
    Roster,
    RosterDay,
    WorkStatus,
)
from staffplan.scheduling.resolver import ScheduleResolver

logger = logging.getLogger(__name__)


class RosterScheduleCalculator:
    """Resolves every person on the roster for a date.

    Calls are pure: neither the roster nor the month document is modified,
    so the calculator can be invoked once per calendar cell or widget.

    Example:
        >>> calculator = RosterScheduleCalculator()
        >>> day = calculator.resolve_day(date(2024, 1, 17), month_schedule, roster)
        >>> [(e.name, e.status.value) for e in day.entries]
    """

    def __init__(self, resolver: Optional[ScheduleResolver] = None):
        self.resolver = resolver or ScheduleResolver()

    def resolve_day(
        self,
        d: date,
        month_schedule: Optional[MonthSchedule],
        roster: Roster,
    ) -> RosterDay:
        """Resolve the whole roster on one date.

        Args:
            d: Target date.
            month_schedule: Override document for the date's month. None is
                treated as a document with no overrides and no notes.
            roster: Roster snapshot.

        Returns:
            RosterDay with the day's note and entries sorted by name.
        """
        if month_schedule is not None and not month_schedule.contains(d):
            logger.warning(
                "Month schedule %d-%02d does not cover %s; ignoring its overrides",
                month_schedule.year, month_schedule.month, d.isoformat(),
            )
            month_schedule = None

        notes = month_schedule.notes_for(d) if month_schedule else ""
        overrides = month_schedule.overrides_for(d) if month_schedule else {}

        entries = [
            self.resolver.resolve(person, d, overrides)
            for person in roster.people
        ]
        entries.sort(key=lambda e: (e.name.casefold(), e.person_id))

        return RosterDay(schedule_date=d, notes=notes, entries=entries)

    def resolve_range(
        self,
        start: date,
        end: date,
        schedules: Mapping[tuple[int, int], MonthSchedule],
        roster: Roster,
    ) -> list[RosterDay]:
        """Resolve every date from start to end (inclusive).

        Args:
            start: First date.
            end: Last date.
            schedules: Month documents keyed by (year, month); missing
                months have no overrides.
            roster: Roster snapshot.
        """
        days = []
        current = start
        while current <= end:
            month_schedule = schedules.get((current.year, current.month))
            days.append(self.resolve_day(current, month_schedule, roster))
            current += timedelta(days=1)
        return days

    def actual_staffing_for_month(
        self,
        year: int,
        month: int,
        month_schedule: Optional[MonthSchedule],
        roster: Roster,
    ) -> list[int]:
        """Count working MIT techs for each day of a month.

        A tech counts on a day when they are active, done training and
        resolve to working.

        Returns:
            One count per day of the month, index 0 being the 1st.
        """
        days_in_month = calendar.monthrange(year, month)[1]
        staffing = []

        for day in range(1, days_in_month + 1):
            current = date(year, month, day)
            overrides = month_schedule.overrides_for(current) if month_schedule else {}
            staffed = 0
            for tech in roster.active_on(current):
                if tech.role is not Role.MIT_TECH or not tech.is_done_training_on(current):
                    continue
                entry = self.resolver.resolve(tech, current, overrides)
                if entry.status is WorkStatus.WORKING:
                    staffed += 1
            staffing.append(staffed)

        return staffing
