"""Status resolution for people and whole rosters."""

from staffplan.scheduling.overrides import (
    build_day_overrides,
    payload_from_roster_day,
    prune_override,
    save_day,
)
from staffplan.scheduling.resolver import ScheduleResolver
from staffplan.scheduling.roster_calculator import RosterScheduleCalculator
from staffplan.scheduling.rule_matcher import RuleMatcher

__all__ = [
    # Resolution
    "RuleMatcher",
    "ScheduleResolver",
    "RosterScheduleCalculator",
    # Overrides
    "build_day_overrides",
    "payload_from_roster_day",
    "prune_override",
    "save_day",
]
