"""Validation of roster rules and month override documents.

The resolver never rejects input: malformed rules simply never match and
overlapping rules are settled by position. This module reports those cases
so they can be fixed at the source instead of being silently corrected.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from staffplan.domain.models import (
    Frequency,
    MonthSchedule,
    Person,
    RecurringRule,
    Roster,
)
from staffplan.scheduling.resolver import ScheduleResolver


class ValidationErrorType(Enum):
    """Types of validation errors."""

    DUPLICATE_PERSON_ID = "duplicate_person_id"
    EMPTY_DAY_SET = "empty_day_set"
    INVALID_WEEKDAY = "invalid_weekday"
    INVERTED_DATE_RANGE = "inverted_date_range"
    OVERLAPPING_RULES = "overlapping_rules"
    UNKNOWN_OVERRIDE_PERSON = "unknown_override_person"
    OVERRIDE_KEY_MISMATCH = "override_key_mismatch"
    INVALID_DAY_OF_MONTH = "invalid_day_of_month"
    NO_OP_OVERRIDE = "no_op_override"


@dataclass
class ValidationError:
    """A single validation finding."""

    error_type: ValidationErrorType
    message: str
    person_id: Optional[str] = None
    rule_index: Optional[int] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.person_id:
            parts.append(f"Person {self.person_id}:")
        parts.append(self.message)
        if self.rule_index is not None:
            parts.append(f"(rule {self.rule_index + 1})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a roster or month document."""

    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: ValidationError) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def merge(self, other: "ValidationResult") -> None:
        for error in other.errors:
            self.add_error(error)
        self.warnings.extend(other.warnings)


def _ranges_intersect(a: RecurringRule, b: RecurringRule) -> bool:
    lo = max(a.start_date or date.min, b.start_date or date.min)
    hi = min(a.end_date or date.max, b.end_date or date.max)
    return lo <= hi


def _parities_compatible(a: RecurringRule, b: RecurringRule) -> bool:
    if (
        a.frequency is Frequency.EVERY_OTHER_WEEK
        and b.frequency is Frequency.EVERY_OTHER_WEEK
    ):
        return a.week_anchor % 2 == b.week_anchor % 2
    return True


def rules_overlap(a: RecurringRule, b: RecurringRule) -> bool:
    """Check whether two rules can both match the same date."""
    return (
        bool(a.days & b.days)
        and _ranges_intersect(a, b)
        and _parities_compatible(a, b)
    )


class RosterValidator:
    """Validates recurring rules and override documents.

    Example:
        >>> validator = RosterValidator()
        >>> result = validator.validate_roster(roster)
        >>> for error in result.errors:
        ...     print(error)
    """

    def __init__(self, resolver: Optional[ScheduleResolver] = None):
        self.resolver = resolver or ScheduleResolver()

    def validate_roster(self, roster: Roster) -> ValidationResult:
        """Validate every person's recurring rules.

        Overlapping rules are reported as warnings: the earlier rule wins
        and the overlap may or may not be intended.
        """
        result = ValidationResult()
        seen: set[str] = set()

        for person in roster.people:
            if person.id in seen:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_PERSON_ID,
                        message=f"Duplicate person ID: {person.id}",
                        person_id=person.id,
                    )
                )
            seen.add(person.id)
            result.merge(self.validate_rules(person))

        return result

    def validate_rules(self, person: Person) -> ValidationResult:
        """Validate a single person's recurring rules.

        Rules are checked in evaluation order; rule_index is the rule's
        position in the stored list.
        """
        result = ValidationResult()
        indexed = sorted(
            enumerate(person.recurring_rules),
            key=lambda pair: pair[1].priority,
        )

        for position, (index, rule) in enumerate(indexed):
            if not rule.days:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.EMPTY_DAY_SET,
                        message="Rule has no days and can never match",
                        person_id=person.id,
                        rule_index=index,
                    )
                )

            invalid_days = sorted(d for d in rule.days if not 0 <= d <= 6)
            if invalid_days:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVALID_WEEKDAY,
                        message=f"Weekday indices out of range: {invalid_days}",
                        person_id=person.id,
                        rule_index=index,
                        details={"days": invalid_days},
                    )
                )

            if (
                rule.start_date is not None
                and rule.end_date is not None
                and rule.start_date > rule.end_date
            ):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVERTED_DATE_RANGE,
                        message=(
                            f"Start date {rule.start_date.isoformat()} is after "
                            f"end date {rule.end_date.isoformat()}"
                        ),
                        person_id=person.id,
                        rule_index=index,
                    )
                )

            for earlier_index, earlier in indexed[:position]:
                if rules_overlap(earlier, rule):
                    result.add_warning(
                        ValidationError(
                            error_type=ValidationErrorType.OVERLAPPING_RULES,
                            message=(
                                f"Rule is shadowed by rule {earlier_index + 1} "
                                f"on overlapping days"
                            ),
                            person_id=person.id,
                            rule_index=index,
                            details={"shadowed_by": earlier_index},
                        )
                    )

        return result

    def validate_month_schedule(
        self,
        month_schedule: MonthSchedule,
        roster: Roster,
    ) -> ValidationResult:
        """Validate a month document against the roster.

        Stored overrides that equal the rule/default value are reported as
        warnings, since a save should have pruned them.
        """
        result = ValidationResult()

        for day_number, day in sorted(month_schedule.days.items()):
            try:
                d = date(month_schedule.year, month_schedule.month, day_number)
            except ValueError:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVALID_DAY_OF_MONTH,
                        message=(
                            f"Day {day_number} does not exist in "
                            f"{month_schedule.year}-{month_schedule.month:02d}"
                        ),
                    )
                )
                continue

            for key, override in day.overrides.items():
                if key != override.person_id:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.OVERRIDE_KEY_MISMATCH,
                            message=(
                                f"Override stored under {key} belongs to "
                                f"{override.person_id} on {d.isoformat()}"
                            ),
                            person_id=override.person_id,
                        )
                    )

                person = roster.find(override.person_id)
                if person is None:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.UNKNOWN_OVERRIDE_PERSON,
                            message=f"Override on {d.isoformat()} for unknown person",
                            person_id=override.person_id,
                        )
                    )
                    continue

                status, hours, _ = self.resolver.resolve_without_override(person, d)
                if override.status is status and (override.hours or "") == hours:
                    result.add_warning(
                        ValidationError(
                            error_type=ValidationErrorType.NO_OP_OVERRIDE,
                            message=f"Override on {d.isoformat()} matches the base schedule",
                            person_id=person.id,
                        )
                    )

        return result
