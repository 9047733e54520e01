"""JSON document adapters.

Converts the stored document shapes (roster, month schedules, monthly
configuration, daily stats) into domain models and back. Keys follow the
stored camelCase names. This is the only module that touches the filesystem.
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Union

from staffplan.domain.models import (
    DailyOverride,
    DailyStats,
    DayOverrides,
    Frequency,
    MonthSchedule,
    Person,
    RecurringRule,
    Role,
    Roster,
    StaffingConfig,
    SubcontractorJob,
    WorkStatus,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def parse_date(value: Any, key: str = "date") -> Optional[date]:
    """Parse an ISO date, accepting a trailing time part.

    Raises:
        ValueError: If the value is not a date string.
    """
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValueError(f"Invalid {key}: {value!r}")


def _number(data: dict, key: str, default: float = 0.0) -> float:
    value = data.get(key)
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {key}: {value!r}")


def _integer(data: dict, key: str, default: int) -> int:
    value = data.get(key)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {key}: {value!r}")


def _days(value: Any) -> frozenset[int]:
    if value is None:
        return frozenset()
    if not isinstance(value, (list, tuple, set)):
        value = [value]
    try:
        return frozenset(int(d) for d in value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid days: {value!r}")


def _status(value: Any, key: str = "status") -> WorkStatus:
    try:
        return WorkStatus.parse(value)
    except ValueError:
        raise ValueError(f"Invalid {key}: {value!r}")


def rule_from_dict(data: dict) -> RecurringRule:
    """Build a RecurringRule from its stored form.

    A missing or null day set gives a rule that never matches.
    """
    try:
        frequency = Frequency.parse(data.get("frequency") or "every")
    except ValueError:
        raise ValueError(f"Invalid frequency: {data.get('frequency')!r}")

    return RecurringRule(
        days=_days(data.get("days")),
        status=_status(data.get("status")),
        hours=str(data.get("hours") or ""),
        frequency=frequency,
        week_anchor=_integer(data, "weekAnchor", 1),
        start_date=parse_date(data.get("startDate"), "startDate"),
        end_date=parse_date(data.get("endDate"), "endDate"),
        priority=_integer(data, "priority", 0),
        id=data.get("id"),
    )


def person_from_dict(
    data: dict,
    zone: str = "",
    is_zone_lead: bool = False,
) -> Person:
    """Build a Person from its stored form."""
    if not data.get("id"):
        raise ValueError(f"Person without id: {data!r}")
    role_value = data.get("role") or Role.MIT_TECH.value
    try:
        role = Role(role_value)
    except ValueError:
        raise ValueError(f"Invalid role for {data['id']}: {role_value!r}")

    return Person(
        id=str(data["id"]),
        name=str(data.get("name") or data["id"]),
        role=role,
        zone=data.get("zone") or zone,
        is_zone_lead=bool(data.get("isZoneLead", is_zone_lead)),
        hire_date=parse_date(data.get("hireDate"), "hireDate"),
        end_date=parse_date(data.get("endDate"), "endDate"),
        in_training=bool(data.get("inTraining", False)),
        training_end_date=parse_date(data.get("trainingEndDate"), "trainingEndDate"),
        recurring_rules=[rule_from_dict(r) for r in data.get("recurringRules") or []],
    )


def roster_from_dict(data: dict) -> Roster:
    """Build a Roster from either a flat people list or zone documents.

    Zone documents have a lead and members; the lead and members inherit
    the zone name.
    """
    people = [person_from_dict(p) for p in data.get("people") or []]

    for zone in data.get("zones") or []:
        name = zone.get("name", "")
        if zone.get("lead"):
            people.append(person_from_dict(zone["lead"], zone=name, is_zone_lead=True))
        for member in zone.get("members") or []:
            people.append(person_from_dict(member, zone=name))

    return Roster(
        people=people,
        second_shift_zone=data.get("secondShiftZone") or "2nd Shift",
    )


def month_schedule_from_dict(data: dict) -> MonthSchedule:
    """Build a MonthSchedule from its stored form.

    Days are keyed by day of month; each holds a note and a staff list of
    {id, status, hours} entries.
    """
    year = int(data["year"])
    month = int(data["month"])
    days = {}

    for day_key, day_data in (data.get("days") or {}).items():
        overrides = {}
        for entry in day_data.get("staff") or []:
            person_id = str(entry["id"])
            overrides[person_id] = DailyOverride(
                person_id=person_id,
                status=_status(entry.get("status")),
                hours=str(entry.get("hours") or ""),
            )
        days[int(day_key)] = DayOverrides(
            notes=str(day_data.get("notes") or ""),
            overrides=overrides,
        )

    return MonthSchedule(year=year, month=month, days=days)


def month_schedule_to_dict(month_schedule: MonthSchedule) -> dict:
    return {
        "year": month_schedule.year,
        "month": month_schedule.month,
        "days": {
            str(day_number): {
                "notes": day.notes,
                "staff": [
                    {"id": o.person_id, "status": o.status.value, "hours": o.hours}
                    for o in day.overrides.values()
                ],
            }
            for day_number, day in sorted(month_schedule.days.items())
        },
    }


def staffing_config_from_dict(data: Optional[dict]) -> StaffingConfig:
    """Build a StaffingConfig; missing values are zero or unset.

    An unset averageJobDuration is left for the caller to estimate from
    recent daily stats.
    """
    data = data or {}
    duration = data.get("averageJobDuration")
    return StaffingConfig(
        average_drive_time_hours=_number(data, "averageDriveTime"),
        overtime_hours_per_tech_per_day=_number(data, "otHoursPerTechPerDay"),
        average_job_duration_hours=(
            None if duration in (None, "") else _number(data, "averageJobDuration")
        ),
    )


def daily_stats_from_dict(data: Optional[dict]) -> DailyStats:
    """Build DailyStats; missing values are zero."""
    data = data or {}
    jobs = [
        SubcontractorJob(
            name=str(job.get("name") or ""),
            demo_hours=_number(job, "demoHours"),
        )
        for job in data.get("subContractorJobs") or []
    ]
    return DailyStats(
        total_labor_hours=_number(data, "totalLaborHours"),
        total_tech_hours=_number(data, "totalTechHours"),
        dt_labor_hours=_number(data, "dtLaborHours"),
        sub_team_count=int(_number(data, "subTeamCount")),
        subcontractor_jobs=jobs,
        job_type_tech_hours={
            k: float(v) for k, v in (data.get("jobTypeTechHours") or {}).items()
        },
        job_type_counts={
            k: int(v) for k, v in (data.get("jobTypeCounts") or {}).items()
        },
    )


def read_json(path: PathLike) -> Any:
    return json.loads(Path(path).read_text())


def load_roster(path: PathLike) -> Roster:
    return roster_from_dict(read_json(path))


class JsonScheduleStore:
    """Month schedule gateway backed by one JSON file per month.

    Files are stored as ``<root>/<year>-<month>.json``. Saving a day
    rewrites the whole month file; concurrent writers are not reconciled.
    """

    def __init__(self, root: PathLike):
        self.root = Path(root)

    def path_for(self, year: int, month: int) -> Path:
        return self.root / f"{year}-{month:02d}.json"

    def load_month_schedule(self, year: int, month: int) -> MonthSchedule:
        """Load a month document; a missing file is an empty document."""
        path = self.path_for(year, month)
        if not path.exists():
            logger.debug("No schedule file at %s; using empty month", path)
            return MonthSchedule.empty(year, month)
        return month_schedule_from_dict(read_json(path))

    def save_day_overrides(
        self,
        d: date,
        overrides: dict[str, DailyOverride],
        notes: str = "",
    ) -> MonthSchedule:
        """Replace one day's overrides and note, then write the month file."""
        month_schedule = self.load_month_schedule(d.year, d.month)
        updated = month_schedule.with_day(d, overrides, notes)
        self.root.mkdir(parents=True, exist_ok=True)
        self.path_for(d.year, d.month).write_text(
            json.dumps(month_schedule_to_dict(updated), indent=2)
        )
        logger.info(
            "Saved %d override(s) for %s", len(overrides), d.isoformat()
        )
        return updated
