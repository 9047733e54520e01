"""Command-line interface for the staffing calendar."""

import argparse
import logging
import sys
from datetime import date
from typing import Optional

from staffplan.data.loader import (
    JsonScheduleStore,
    daily_stats_from_dict,
    load_roster,
    parse_date,
    read_json,
    staffing_config_from_dict,
)
from staffplan.domain.models import DailyStats, Provenance, RosterDay, StaffingMetrics
from staffplan.domain.policies import NewJobForecast
from staffplan.scheduling.roster_calculator import RosterScheduleCalculator
from staffplan.staffing.aggregator import StaffingAggregator
from staffplan.staffing.forecast import MonthlyVolumeForecast, average_job_duration
from staffplan.validation.validator import RosterValidator

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    Provenance.WEEKDAY_DEFAULT: "Weekday Default",
    Provenance.WEEKEND_DEFAULT: "Weekend Default",
    Provenance.RECURRING_RULE: "Recurring Rule",
    Provenance.SPECIFIC_OVERRIDE: "Specific Override",
}


def _parse_date_arg(value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def print_roster_day(day: RosterDay) -> None:
    """Print a resolved day."""
    print(f"\n{'=' * 60}")
    print(f"Schedule for {day.schedule_date.strftime('%A, %B %d, %Y')}")
    print(f"{'=' * 60}")
    if day.notes:
        print(f"  Notes: {day.notes}")

    for entry in day.entries:
        hours = f" [{entry.hours}]" if entry.is_specially_scheduled else ""
        print(f"  {entry.name:<24} {entry.status.label:<16} "
              f"{SOURCE_LABELS[entry.provenance]}{hours}")

    counts = day.status_counts()
    summary = ", ".join(f"{s.label}: {n}" for s, n in counts.items() if n)
    print(f"\n  Totals: {summary or 'nobody on roster'}")


def print_metrics(metrics: StaffingMetrics) -> None:
    """Print staffing metrics for a day."""
    print(f"\nStaffing Metrics - {metrics.schedule_date.isoformat()}")
    print(f"  Techs on Route: {metrics.techs_on_route}")
    print(f"  Demo Techs Working: {metrics.demo_techs_working} "
          f"({metrics.sub_teams} sub teams)")
    print(f"  Hours per Tech: {metrics.hours_per_tech:.2f}")
    print(f"  Hours Available: {metrics.hours_available:.1f}")
    print(f"  DT Hours Available: {metrics.dt_hours_available:.1f}")
    print(f"  Total Labor Hours: {metrics.total_labor_hours:.1f} "
          f"(incl. {metrics.prep_hours:.1f} prep)")
    print(f"  DT Hours Requested: {metrics.dt_hours:.1f}")
    print(f"  Base Work Surplus: {metrics.base_work_surplus:+.1f}")
    print(f"  Potential New Jobs: {metrics.potential_new_jobs}")
    print(f"  Sub Hours Handled: {metrics.sub_hours_handled:.1f}")
    print(f"  Inefficient Demo Hours: {metrics.inefficient_demo_hours:.1f}")
    print(f"  Available Hours Goal: {metrics.available_hours_goal:.1f} "
          f"({metrics.forecasted_new_jobs:g} new jobs forecast)")


def run_day(roster_path: str, schedules_dir: str, target: date) -> None:
    """Resolve and print the roster for a date."""
    roster = load_roster(roster_path)
    store = JsonScheduleStore(schedules_dir)
    month_schedule = store.load_month_schedule(target.year, target.month)

    day = RosterScheduleCalculator().resolve_day(target, month_schedule, roster)
    print_roster_day(day)


def load_recent_stats(path: str) -> list[DailyStats]:
    """Load a JSON list of daily stats documents."""
    data = read_json(path)
    if not isinstance(data, list):
        raise ValueError(f"Recent stats file must hold a list: {path}")
    return [daily_stats_from_dict(item) for item in data]


def run_metrics(
    roster_path: str,
    schedules_dir: str,
    target: date,
    config_path: Optional[str] = None,
    stats_path: Optional[str] = None,
    projected_jobs: Optional[float] = None,
    recent_stats_path: Optional[str] = None,
) -> None:
    """Resolve a date and print its staffing metrics.

    When the configuration has no job duration it is estimated from the
    recent daily stats file (a JSON list of daily stats documents).
    """
    roster = load_roster(roster_path)
    store = JsonScheduleStore(schedules_dir)
    month_schedule = store.load_month_schedule(target.year, target.month)
    config = staffing_config_from_dict(read_json(config_path) if config_path else None)
    stats = daily_stats_from_dict(read_json(stats_path) if stats_path else None)

    if config.average_job_duration_hours is None:
        config.average_job_duration_hours = average_job_duration(
            load_recent_stats(recent_stats_path) if recent_stats_path else []
        )
        logger.debug(
            "Estimated job duration: %.2f hours", config.average_job_duration_hours
        )

    forecast: Optional[NewJobForecast] = None
    if projected_jobs is not None:
        forecast = MonthlyVolumeForecast(target.year, target.month, projected_jobs)

    day = RosterScheduleCalculator().resolve_day(target, month_schedule, roster)
    aggregator = StaffingAggregator(
        forecast=forecast,
        second_shift_zone=roster.second_shift_zone,
    )
    metrics = aggregator.aggregate_day(day, config, stats)
    print_metrics(metrics)


def run_month(roster_path: str, schedules_dir: str, year: int, month: int) -> None:
    """Print actual route staffing for each day of a month."""
    roster = load_roster(roster_path)
    month_schedule = JsonScheduleStore(schedules_dir).load_month_schedule(year, month)
    staffing = RosterScheduleCalculator().actual_staffing_for_month(
        year, month, month_schedule, roster
    )

    print(f"\nActual Staffing: {year}-{month:02d}")
    for day_number, count in enumerate(staffing, 1):
        d = date(year, month, day_number)
        print(f"  {d} ({d.strftime('%a')}): {count}")
    if staffing:
        print(f"\n  Average: {sum(staffing) / len(staffing):.1f}")


def run_validate(
    roster_path: str,
    schedules_dir: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> bool:
    """Validate the roster and, optionally, one month document."""
    roster = load_roster(roster_path)
    validator = RosterValidator()
    result = validator.validate_roster(roster)

    if schedules_dir and year and month:
        month_schedule = JsonScheduleStore(schedules_dir).load_month_schedule(year, month)
        result.merge(validator.validate_month_schedule(month_schedule, roster))

    if result.is_valid:
        print("Validation: PASSED")
    else:
        print(f"Validation: FAILED ({len(result.errors)} errors)")
        for error in result.errors:
            print(f"    - {error}")

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"    - {warning}")

    return result.is_valid


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="staffplan - Staffing Calendar and Capacity Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s day --roster roster.json --date 2024-01-17
  %(prog)s metrics --roster roster.json --date 2024-01-17 --config jan.json --stats stats.json
  %(prog)s month --roster roster.json --year 2024 --month 1
  %(prog)s validate --roster roster.json
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--roster", "-r",
            required=True,
            help="Roster JSON file",
        )
        sub.add_argument(
            "--schedules", "-s",
            default="schedules",
            help="Directory of month schedule files (default: schedules)",
        )

    day_parser = subparsers.add_parser("day", help="Show the resolved roster for a date")
    add_common(day_parser)
    day_parser.add_argument(
        "--date", "-d",
        type=_parse_date_arg,
        default=date.today(),
        help="Date to resolve (default: today)",
    )

    metrics_parser = subparsers.add_parser("metrics", help="Show staffing metrics for a date")
    add_common(metrics_parser)
    metrics_parser.add_argument(
        "--date", "-d",
        type=_parse_date_arg,
        default=date.today(),
        help="Date to resolve (default: today)",
    )
    metrics_parser.add_argument("--config", "-c", help="Monthly configuration JSON file")
    metrics_parser.add_argument("--stats", "-t", help="Daily stats JSON file")
    metrics_parser.add_argument(
        "--projected-jobs", "-p",
        type=float,
        help="Projected jobs for the month (replaces the day-of-week forecast)",
    )
    metrics_parser.add_argument(
        "--recent-stats",
        help="JSON list of recent daily stats used to estimate job duration",
    )

    month_parser = subparsers.add_parser("month", help="Show actual staffing for a month")
    add_common(month_parser)
    month_parser.add_argument("--year", "-y", type=int, required=True)
    month_parser.add_argument("--month", "-m", type=int, required=True)

    validate_parser = subparsers.add_parser("validate", help="Validate roster rules")
    add_common(validate_parser)
    validate_parser.add_argument("--year", "-y", type=int)
    validate_parser.add_argument("--month", "-m", type=int)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "day":
            run_day(args.roster, args.schedules, args.date)
            return 0
        elif args.command == "metrics":
            run_metrics(
                args.roster,
                args.schedules,
                args.date,
                args.config,
                args.stats,
                args.projected_jobs,
                args.recent_stats,
            )
            return 0
        elif args.command == "month":
            run_month(args.roster, args.schedules, args.year, args.month)
            return 0
        elif args.command == "validate":
            valid = run_validate(args.roster, args.schedules, args.year, args.month)
            return 0 if valid else 1
        else:
            parser.print_help()
            return 1
    except (OSError, ValueError, KeyError) as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
