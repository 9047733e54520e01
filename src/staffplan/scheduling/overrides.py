"""Sparse override pruning and save-one-day payloads.

An override is stored only when it differs from what the resolver would
produce without it. Writing a value equal to the rule/default result is a
no-op and yields no entry.
"""

import logging
from datetime import date
from typing import Mapping, Optional

from staffplan.domain.models import (
    DailyOverride,
    MonthSchedule,
    Roster,
    RosterDay,
    WorkStatus,
)
from staffplan.scheduling.resolver import ScheduleResolver

logger = logging.getLogger(__name__)

# person id -> (status, hours)
Proposal = Mapping[str, tuple[WorkStatus, str]]


def prune_override(
    person_id: str,
    baseline: tuple[WorkStatus, str],
    status: WorkStatus,
    hours: str = "",
) -> Optional[DailyOverride]:
    """Get the override to store for a proposed value, if any.

    Args:
        person_id: ID of the person.
        baseline: (status, hours) the resolver produces without an override.
        status: Proposed status.
        hours: Proposed hours/notes.

    Returns:
        A DailyOverride when the proposal differs from the baseline,
        otherwise None.
    """
    base_status, base_hours = baseline
    hours = (hours or "").strip()
    if status is base_status and hours == (base_hours or ""):
        return None
    return DailyOverride(person_id=person_id, status=status, hours=hours)


def build_day_overrides(
    d: date,
    roster: Roster,
    proposed: Proposal,
    resolver: Optional[ScheduleResolver] = None,
) -> dict[str, DailyOverride]:
    """Turn a proposed day into the sparse set of overrides to persist.

    Proposals for IDs that are not on the roster are skipped.

    Args:
        d: The day being saved.
        roster: Roster snapshot.
        proposed: Proposed (status, hours) per person ID.
        resolver: Resolver supplying the baseline values.

    Returns:
        Dict mapping person ID to override, containing only real deltas.
    """
    resolver = resolver or ScheduleResolver()
    overrides = {}

    for person_id, (status, hours) in proposed.items():
        person = roster.find(person_id)
        if person is None:
            logger.warning(
                "Could not find person %s; skipping schedule save for this entry",
                person_id,
            )
            continue
        base_status, base_hours, _ = resolver.resolve_without_override(person, d)
        override = prune_override(person_id, (base_status, base_hours), status, hours)
        if override is not None:
            overrides[person_id] = override

    return overrides


def payload_from_roster_day(roster_day: RosterDay) -> dict[str, tuple[WorkStatus, str]]:
    """Convert a resolved day back into a proposal that reproduces it."""
    return {e.person_id: (e.status, e.hours) for e in roster_day.entries}


def save_day(
    month_schedule: MonthSchedule,
    d: date,
    roster: Roster,
    proposed: Proposal,
    notes: str = "",
    resolver: Optional[ScheduleResolver] = None,
) -> MonthSchedule:
    """Apply a save of one day to a month document.

    The day's overrides and note are replaced as a whole; a concurrent save
    of the same day is not reconciled and the later write wins.

    Returns:
        The updated month document. The input document is not modified.
    """
    overrides = build_day_overrides(d, roster, proposed, resolver)
    logger.debug(
        "Saving %s: %d override(s) from %d proposal(s)",
        d.isoformat(), len(overrides), len(proposed),
    )
    return month_schedule.with_day(d, overrides, (notes or "").strip())
