"""Domain models and business rules for the staffing calendar."""

from staffplan.domain.models import (
    DailyOverride,
    DailyStats,
    DayOverrides,
    Frequency,
    MonthSchedule,
    Person,
    Provenance,
    RecurringRule,
    ResolvedDayEntry,
    Role,
    Roster,
    RosterDay,
    StaffingConfig,
    StaffingMetrics,
    SubcontractorJob,
    WorkStatus,
    day_index,
)
from staffplan.domain.policies import (
    DayOfWeekForecast,
    DefaultStatusPolicy,
    EpochWeekNumber,
    NewJobForecast,
    ThursdayWeekNumber,
    WeekdayWeekendDefaultPolicy,
    WeekNumberStrategy,
)

__all__ = [
    # Models
    "DailyOverride",
    "DailyStats",
    "DayOverrides",
    "Frequency",
    "MonthSchedule",
    "Person",
    "Provenance",
    "RecurringRule",
    "ResolvedDayEntry",
    "Role",
    "Roster",
    "RosterDay",
    "StaffingConfig",
    "StaffingMetrics",
    "SubcontractorJob",
    "WorkStatus",
    "day_index",
    # Policies
    "DayOfWeekForecast",
    "DefaultStatusPolicy",
    "EpochWeekNumber",
    "NewJobForecast",
    "ThursdayWeekNumber",
    "WeekdayWeekendDefaultPolicy",
    "WeekNumberStrategy",
]
