"""Policy definitions for status resolution and forecasting.

This module contains the injectable strategies the resolver and the
staffing aggregator are built from: how week numbers are counted for
biweekly parity, what a person's baseline status is before any rule or
override, and how many new jobs are forecast for a day.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta

from staffplan.domain.models import (
    SATURDAY,
    SUNDAY,
    WEEKEND_DAYS,
    Provenance,
    WorkStatus,
    day_index,
)


class WeekNumberStrategy(ABC):
    """Abstract base class for week numbering used by biweekly rules."""

    @abstractmethod
    def week_number(self, d: date) -> int:
        """Get the week number of a date."""
        pass

    def parity(self, d: date) -> int:
        """Get the week parity (0 or 1) of a date."""
        return self.week_number(d) % 2


class ThursdayWeekNumber(WeekNumberStrategy):
    """ISO-like week number.

    The date is moved to the Thursday of its Monday-based week, then whole
    weeks are counted from January 1st of that Thursday's year. Results
    agree with ISO-8601 week numbers.
    """

    def week_number(self, d: date) -> int:
        # isoweekday: Monday=1 .. Sunday=7
        thursday = d + timedelta(days=4 - d.isoweekday())
        year_start = date(thursday.year, 1, 1)
        return math.ceil(((thursday - year_start).days + 1) / 7)


@dataclass
class EpochWeekNumber(WeekNumberStrategy):
    """Week count since a fixed Monday.

    Parity strictly alternates from one week to the next, including across
    years with 53 ISO weeks.

    Attributes:
        epoch: A Monday; its week is week 1.
    """

    epoch: date = date(2024, 1, 1)

    def week_number(self, d: date) -> int:
        monday = d - timedelta(days=d.weekday())
        epoch_monday = self.epoch - timedelta(days=self.epoch.weekday())
        return (monday - epoch_monday).days // 7 + 1


class DefaultStatusPolicy(ABC):
    """Abstract base class for baseline status before rules and overrides."""

    @abstractmethod
    def default_for(self, d: date) -> tuple[WorkStatus, str, Provenance]:
        """Get the baseline (status, hours, provenance) for a date."""
        pass


class WeekdayWeekendDefaultPolicy(DefaultStatusPolicy):
    """Working on weekdays, off on Saturday and Sunday."""

    def default_for(self, d: date) -> tuple[WorkStatus, str, Provenance]:
        if day_index(d) in WEEKEND_DAYS:
            return WorkStatus.OFF, "", Provenance.WEEKEND_DEFAULT
        return WorkStatus.WORKING, "", Provenance.WEEKDAY_DEFAULT


class NewJobForecast(ABC):
    """Abstract base class for forecasting new jobs booked on a day."""

    @abstractmethod
    def new_jobs_for(self, d: date) -> float:
        """Get the forecast number of new jobs for a date."""
        pass


@dataclass
class DayOfWeekForecast(NewJobForecast):
    """Fixed new-job forecast by day type.

    Default forecast:
    - Monday to Friday: 3 jobs
    - Saturday: 1 job
    - Sunday: 0 jobs
    """

    weekday_jobs: float = 3
    saturday_jobs: float = 1
    sunday_jobs: float = 0

    def new_jobs_for(self, d: date) -> float:
        index = day_index(d)
        if index == SATURDAY:
            return self.saturday_jobs
        if index == SUNDAY:
            return self.sunday_jobs
        return self.weekday_jobs
