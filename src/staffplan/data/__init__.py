"""Loading and saving of stored roster and schedule documents."""

from staffplan.data.loader import (
    JsonScheduleStore,
    daily_stats_from_dict,
    load_roster,
    month_schedule_from_dict,
    month_schedule_to_dict,
    roster_from_dict,
    staffing_config_from_dict,
)

__all__ = [
    "JsonScheduleStore",
    "daily_stats_from_dict",
    "load_roster",
    "month_schedule_from_dict",
    "month_schedule_to_dict",
    "roster_from_dict",
    "staffing_config_from_dict",
]
