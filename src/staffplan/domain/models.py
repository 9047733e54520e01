"""Domain models for the staffing calendar.

This module contains the core data structures used throughout the system:
people and their recurring rules, month override documents, resolved
per-day entries, and the configuration and statistics consumed by the
staffing aggregator.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Optional

# Weekday indices follow the Sunday=0 .. Saturday=6 convention.
SUNDAY = 0
MONDAY = 1
TUESDAY = 2
WEDNESDAY = 3
THURSDAY = 4
FRIDAY = 5
SATURDAY = 6

WEEKEND_DAYS = frozenset({SUNDAY, SATURDAY})


def day_index(d: date) -> int:
    """Weekday index of a date with Sunday=0 and Saturday=6."""
    return (d.weekday() + 1) % 7


class WorkStatus(Enum):
    """Effective work status of a person on a day."""

    WORKING = "on"
    OFF = "off"
    SICK = "sick"
    VACATION = "vacation"
    NO_SHOW = "no-call-no-show"

    @classmethod
    def parse(cls, value: str) -> "WorkStatus":
        """Parse a stored status string.

        Accepts the stored values plus the aliases "working" and "no-show".

        Raises:
            ValueError: If the value is not a known status.
        """
        key = str(value).strip().lower()
        aliases = {"working": cls.WORKING, "no-show": cls.NO_SHOW}
        if key in aliases:
            return aliases[key]
        return cls(key)

    @property
    def label(self) -> str:
        """Human-readable label."""
        return {
            WorkStatus.WORKING: "Working",
            WorkStatus.OFF: "Off",
            WorkStatus.SICK: "Sick",
            WorkStatus.VACATION: "Vacation",
            WorkStatus.NO_SHOW: "No Call No Show",
        }[self]


class Provenance(Enum):
    """Which precedence tier produced a resolved status."""

    WEEKDAY_DEFAULT = "weekday-default"
    WEEKEND_DEFAULT = "weekend-default"
    RECURRING_RULE = "recurring-rule"
    SPECIFIC_OVERRIDE = "specific-override"


class Frequency(Enum):
    """Recurrence frequency of a rule."""

    EVERY_WEEK = "every-week"
    EVERY_OTHER_WEEK = "every-other-week"

    @classmethod
    def parse(cls, value: str) -> "Frequency":
        """Parse a frequency, accepting the short "every"/"every-other" forms."""
        key = str(value).strip().lower()
        short = {"every": cls.EVERY_WEEK, "every-other": cls.EVERY_OTHER_WEEK}
        if key in short:
            return short[key]
        return cls(key)


class Role(Enum):
    """Roles a person can hold on the roster."""

    MANAGER = "Manager"
    SUPERVISOR = "Supervisor"
    MIT_LEAD = "MIT Lead"
    SECOND_SHIFT_LEAD = "Second Shift Lead"
    MIT_TECH = "MIT Tech"
    DEMO_TECH = "Demo Tech"
    FLEET = "Fleet"
    FLEET_SAFETY = "Fleet Safety"
    WAREHOUSE = "Warehouse"
    AUDITOR = "Auditor"


@dataclass(frozen=True)
class RecurringRule:
    """A reusable dated pattern attached to a person.

    Attributes:
        days: Weekday indices (Sunday=0 .. Saturday=6) the rule covers.
        status: Status applied when the rule matches.
        hours: Optional free-text hours/notes applied with the status.
        frequency: Every week, or every other week.
        week_anchor: Parity anchor for every-other-week rules (1 = odd weeks,
            2 = even weeks).
        start_date: First date the rule applies (inclusive), if bounded.
        end_date: Last date the rule applies (inclusive), if bounded.
        priority: Evaluation order; lower values are tried first. Rules with
            equal priority keep their list order.
        id: Identifier of the stored rule, if any.
    """

    days: frozenset[int]
    status: WorkStatus
    hours: str = ""
    frequency: Frequency = Frequency.EVERY_WEEK
    week_anchor: int = 1
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    priority: int = 0
    id: Optional[str] = None

    def covers_date(self, d: date) -> bool:
        """Check the inclusive start/end bounds."""
        if self.start_date is not None and d < self.start_date:
            return False
        if self.end_date is not None and d > self.end_date:
            return False
        return True

    def covers_weekday(self, d: date) -> bool:
        """Check whether the date's weekday is in the rule's day set."""
        return day_index(d) in self.days

    def applies_in_week(self, week_number: int) -> bool:
        """Check the frequency/parity condition for a week number."""
        if self.frequency is Frequency.EVERY_OTHER_WEEK:
            return week_number % 2 == self.week_anchor % 2
        return True

    def applies_on(self, d: date, week_number: int) -> bool:
        """Check all three match conditions for a date."""
        return (
            self.covers_date(d)
            and self.covers_weekday(d)
            and self.applies_in_week(week_number)
        )


@dataclass
class Person:
    """A member of the roster.

    Attributes:
        id: Unique identifier.
        name: Display name.
        role: Roster role.
        zone: Name of the zone the person belongs to.
        is_zone_lead: True if the person leads their zone.
        hire_date: Date the person was hired.
        end_date: Date the person left; unset while employed.
        in_training: True while the person is still in training.
        training_end_date: Date training ends or ended.
        recurring_rules: Ordered recurring rules for this person.
    """

    id: str
    name: str
    role: Role = Role.MIT_TECH
    zone: str = ""
    is_zone_lead: bool = False
    hire_date: Optional[date] = None
    end_date: Optional[date] = None
    in_training: bool = False
    training_end_date: Optional[date] = None
    recurring_rules: list[RecurringRule] = field(default_factory=list)

    def is_active_on(self, d: date) -> bool:
        """A person is active while their end date is unset or after the date."""
        return self.end_date is None or self.end_date > d

    def is_done_training_on(self, d: date) -> bool:
        """Check whether the person has finished training by a date."""
        if not self.in_training:
            return True
        return self.training_end_date is not None and self.training_end_date <= d


@dataclass
class Roster:
    """Snapshot of everyone on the roster."""

    people: list[Person] = field(default_factory=list)
    second_shift_zone: str = "2nd Shift"

    def find(self, person_id: str) -> Optional[Person]:
        for person in self.people:
            if person.id == person_id:
                return person
        return None

    def active_on(self, d: date) -> list[Person]:
        return [p for p in self.people if p.is_active_on(d)]

    def is_second_shift_lead(self, person: Person) -> bool:
        """Check whether a person is the designated second-shift lead."""
        if person.role is Role.SECOND_SHIFT_LEAD:
            return True
        return (
            person.role is Role.MIT_LEAD
            and person.is_zone_lead
            and person.zone == self.second_shift_zone
        )


@dataclass(frozen=True)
class DailyOverride:
    """A manual exception for one person on one day."""

    person_id: str
    status: WorkStatus
    hours: str = ""


@dataclass
class DayOverrides:
    """Manual entries and the free-text note stored for one day."""

    notes: str = ""
    overrides: dict[str, DailyOverride] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.overrides and not self.notes


@dataclass
class MonthSchedule:
    """Override document for one (year, month).

    Only days with at least one override or a note have an entry; a missing
    day means no manual exceptions for anyone on that day.

    Attributes:
        year: Calendar year.
        month: Calendar month (1-12).
        days: Dict mapping day of month to that day's overrides.
    """

    year: int
    month: int
    days: dict[int, DayOverrides] = field(default_factory=dict)

    @classmethod
    def empty(cls, year: int, month: int) -> "MonthSchedule":
        """Create the document used when none is stored."""
        return cls(year=year, month=month)

    def contains(self, d: date) -> bool:
        """Check whether a date falls in this document's month."""
        return d.year == self.year and d.month == self.month

    def day_for(self, d: date) -> Optional[DayOverrides]:
        if not self.contains(d):
            return None
        return self.days.get(d.day)

    def notes_for(self, d: date) -> str:
        day = self.day_for(d)
        return day.notes if day else ""

    def overrides_for(self, d: date) -> dict[str, DailyOverride]:
        day = self.day_for(d)
        return dict(day.overrides) if day else {}

    def with_day(
        self,
        d: date,
        overrides: dict[str, DailyOverride],
        notes: str = "",
    ) -> "MonthSchedule":
        """Return a copy with one day's entry replaced.

        The day is dropped from the copy when it has neither overrides nor
        notes. The receiver is not modified.

        Raises:
            ValueError: If the date is not in this document's month.
        """
        if not self.contains(d):
            raise ValueError(
                f"{d.isoformat()} is not in {self.year}-{self.month:02d}"
            )
        days = dict(self.days)
        day = DayOverrides(notes=notes, overrides=dict(overrides))
        if day.is_empty:
            days.pop(d.day, None)
        else:
            days[d.day] = day
        return replace(self, days=days)

    @property
    def override_count(self) -> int:
        return sum(len(day.overrides) for day in self.days.values())


@dataclass(frozen=True)
class ResolvedDayEntry:
    """Resolved status of one person on one date. Never persisted.

    Attributes:
        person_id: ID of the person.
        name: Display name.
        role: Roster role, carried for aggregation.
        status: Resolved status.
        hours: Resolved hours/notes string ("" when none).
        provenance: Tier that produced the status.
        person: The roster entry the status was resolved for.
    """

    person_id: str
    name: str
    role: Role
    status: WorkStatus
    hours: str
    provenance: Provenance
    person: Optional[Person] = field(default=None, compare=False, repr=False)

    @property
    def is_working(self) -> bool:
        return self.status is WorkStatus.WORKING

    @property
    def is_specially_scheduled(self) -> bool:
        """A non-empty hours value marks the entry even on a default status."""
        return bool(self.hours)


@dataclass
class RosterDay:
    """Resolved roster for one date.

    Attributes:
        schedule_date: The resolved date.
        notes: Day-level note from the month document.
        entries: One entry per person, sorted by name.
    """

    schedule_date: date
    notes: str = ""
    entries: list[ResolvedDayEntry] = field(default_factory=list)

    def entry_for(self, person_id: str) -> Optional[ResolvedDayEntry]:
        for entry in self.entries:
            if entry.person_id == person_id:
                return entry
        return None

    def count_with_status(self, status: WorkStatus) -> int:
        return sum(1 for e in self.entries if e.status is status)

    def status_counts(self) -> dict[WorkStatus, int]:
        """Count entries per status, including statuses with no entries."""
        return {status: self.count_with_status(status) for status in WorkStatus}


@dataclass
class StaffingConfig:
    """Monthly numeric configuration for the staffing aggregator.

    Attributes:
        average_drive_time_hours: Average daily drive time per tech.
        overtime_hours_per_tech_per_day: Planned overtime per tech per day.
        average_job_duration_hours: Average hours per new job; unset or zero
            means no new-job capacity can be computed.
    """

    average_drive_time_hours: float = 0.0
    overtime_hours_per_tech_per_day: float = 0.0
    average_job_duration_hours: Optional[float] = None

    @property
    def hours_per_tech(self) -> float:
        """Route hours per working tech, never negative."""
        hours = (
            8
            - (self.average_drive_time_hours or 0)
            + (self.overtime_hours_per_tech_per_day or 0)
        )
        return max(0.0, hours)


@dataclass
class SubcontractorJob:
    """A job handled by a subcontractor crew."""

    name: str = ""
    demo_hours: float = 0.0


@dataclass
class DailyStats:
    """Already-recorded job and labor figures for one date.

    Attributes:
        total_labor_hours: Requested labor hours for the day.
        total_tech_hours: Base tech hours for the day.
        dt_labor_hours: Requested demo-tech hours.
        sub_team_count: Number of subcontractor teams booked.
        subcontractor_jobs: Jobs handled by subcontractors.
        job_type_tech_hours: Tech hours per job type.
        job_type_counts: Job counts per job type.
    """

    total_labor_hours: float = 0.0
    total_tech_hours: float = 0.0
    dt_labor_hours: float = 0.0
    sub_team_count: int = 0
    subcontractor_jobs: list[SubcontractorJob] = field(default_factory=list)
    job_type_tech_hours: dict[str, float] = field(default_factory=dict)
    job_type_counts: dict[str, int] = field(default_factory=dict)

    @property
    def subcontractor_demo_hours(self) -> float:
        return sum(job.demo_hours or 0 for job in self.subcontractor_jobs)


@dataclass
class StaffingMetrics:
    """Operational metrics derived from a resolved roster for one date.

    Every field except base_work_surplus is non-negative.
    """

    schedule_date: date
    hours_per_tech: float = 0.0
    techs_on_route: int = 0
    demo_techs_working: int = 0
    sub_teams: int = 0
    hours_available: float = 0.0
    dt_hours_available: float = 0.0
    prep_hours: float = 0.0
    total_labor_hours: float = 0.0
    total_tech_hours: float = 0.0
    dt_hours: float = 0.0
    base_work_surplus: float = 0.0
    potential_new_jobs: int = 0
    sub_hours_handled: float = 0.0
    internal_demo_hours_needed: float = 0.0
    inefficient_demo_hours: float = 0.0
    forecasted_new_jobs: float = 0.0
    available_hours_goal: float = 0.0

    def as_dict(self) -> dict:
        """Flat dict of the metrics, for reports."""
        return {
            "date": self.schedule_date.isoformat(),
            "hours_per_tech": self.hours_per_tech,
            "techs_on_route": self.techs_on_route,
            "demo_techs_working": self.demo_techs_working,
            "sub_teams": self.sub_teams,
            "hours_available": self.hours_available,
            "dt_hours_available": self.dt_hours_available,
            "prep_hours": self.prep_hours,
            "total_labor_hours": self.total_labor_hours,
            "total_tech_hours": self.total_tech_hours,
            "dt_hours": self.dt_hours,
            "base_work_surplus": self.base_work_surplus,
            "potential_new_jobs": self.potential_new_jobs,
            "sub_hours_handled": self.sub_hours_handled,
            "internal_demo_hours_needed": self.internal_demo_hours_needed,
            "inefficient_demo_hours": self.inefficient_demo_hours,
            "forecasted_new_jobs": self.forecasted_new_jobs,
            "available_hours_goal": self.available_hours_goal,
        }
