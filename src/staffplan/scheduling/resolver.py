"""Single person, single date status resolution.

Precedence is fixed: a specific override beats the first matching recurring
rule, which beats the weekday/weekend default.
"""

import logging
from datetime import date
from typing import Mapping, Optional

from staffplan.domain.models import (
    DailyOverride,
    Person,
    Provenance,
    ResolvedDayEntry,
    WorkStatus,
)
from staffplan.domain.policies import DefaultStatusPolicy, WeekdayWeekendDefaultPolicy
from staffplan.scheduling.rule_matcher import RuleMatcher

logger = logging.getLogger(__name__)


class ScheduleResolver:
    """Resolves the effective status of a person on a date.

    Example:
        >>> resolver = ScheduleResolver()
        >>> entry = resolver.resolve(person, date(2024, 1, 17), {})
        >>> entry.status, entry.provenance
        (<WorkStatus.WORKING: 'on'>, <Provenance.WEEKDAY_DEFAULT: 'weekday-default'>)
    """

    def __init__(
        self,
        default_policy: Optional[DefaultStatusPolicy] = None,
        rule_matcher: Optional[RuleMatcher] = None,
    ):
        """Initialize resolver with policies.

        Args:
            default_policy: Baseline status before rules and overrides.
            rule_matcher: Matcher for recurring rules.
        """
        self.default_policy = default_policy or WeekdayWeekendDefaultPolicy()
        self.rule_matcher = rule_matcher or RuleMatcher()

    def resolve_without_override(
        self,
        person: Person,
        d: date,
    ) -> tuple[WorkStatus, str, Provenance]:
        """Resolve the default and recurring-rule tiers only.

        This is the value an override is compared against when deciding
        whether it needs to be stored.
        """
        status, hours, provenance = self.default_policy.default_for(d)
        rule = self.rule_matcher.match(person.recurring_rules, d)
        if rule is not None:
            status, hours, provenance = (
                rule.status,
                rule.hours or "",
                Provenance.RECURRING_RULE,
            )
        return status, hours, provenance

    def resolve(
        self,
        person: Person,
        d: date,
        overrides_for_date: Optional[Mapping[str, DailyOverride]] = None,
    ) -> ResolvedDayEntry:
        """Resolve one person on one date.

        Args:
            person: The roster entry.
            d: Target date.
            overrides_for_date: The day's overrides keyed by person ID.

        Returns:
            The resolved entry tagged with its provenance.
        """
        status, hours, provenance = self.resolve_without_override(person, d)

        override = (overrides_for_date or {}).get(person.id)
        if override is not None:
            status, hours, provenance = (
                override.status,
                override.hours or "",
                Provenance.SPECIFIC_OVERRIDE,
            )

        logger.debug(
            "Resolved %s on %s: %s (%s)",
            person.id, d.isoformat(), status.value, provenance.value,
        )
        return ResolvedDayEntry(
            person_id=person.id,
            name=person.name,
            role=person.role,
            status=status,
            hours=hours,
            provenance=provenance,
            person=person,
        )
