"""Recurring rule matching.

Rules are evaluated in ascending priority. The sort is stable, so when
every rule carries the default priority the stored list order decides and
the first matching rule wins; later matches are ignored.
"""

from datetime import date
from typing import Optional, Sequence

from staffplan.domain.models import RecurringRule
from staffplan.domain.policies import ThursdayWeekNumber, WeekNumberStrategy


class RuleMatcher:
    """Finds the recurring rule that governs a date.

    Example:
        >>> matcher = RuleMatcher()
        >>> rule = matcher.match(person.recurring_rules, date(2024, 1, 17))
        >>> if rule is not None:
        ...     print(rule.status)
    """

    def __init__(self, week_numbers: Optional[WeekNumberStrategy] = None):
        """Initialize matcher.

        Args:
            week_numbers: Week numbering used for every-other-week parity.
        """
        self.week_numbers = week_numbers or ThursdayWeekNumber()

    def ordered(self, rules: Sequence[RecurringRule]) -> list[RecurringRule]:
        """Rules in evaluation order."""
        return sorted(rules, key=lambda r: r.priority)

    def match(
        self,
        rules: Sequence[RecurringRule],
        d: date,
    ) -> Optional[RecurringRule]:
        """Get the first rule that applies on a date.

        Args:
            rules: The person's recurring rules.
            d: Target date.

        Returns:
            The winning rule, or None when no rule applies.
        """
        if not rules:
            return None
        week_number = self.week_numbers.week_number(d)
        for rule in self.ordered(rules):
            if rule.applies_on(d, week_number):
                return rule
        return None

    def matching_rules(
        self,
        rules: Sequence[RecurringRule],
        d: date,
    ) -> list[RecurringRule]:
        """Get every rule that applies on a date, in evaluation order.

        Only the first element is effective; the rest are shadowed.
        """
        week_number = self.week_numbers.week_number(d)
        return [r for r in self.ordered(rules) if r.applies_on(d, week_number)]
