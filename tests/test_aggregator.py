"""Tests for staffing metric aggregation."""

from datetime import date

import pytest

from staffplan.domain.models import (
    DailyStats,
    Person,
    Provenance,
    ResolvedDayEntry,
    Role,
    RosterDay,
    StaffingConfig,
    SubcontractorJob,
    WorkStatus,
)
from staffplan.domain.policies import DayOfWeekForecast
from staffplan.staffing.aggregator import SUB_TEAM_PREP_HOURS, StaffingAggregator

WEDNESDAY_DATE = date(2024, 1, 17)


def make_entry(
    person_id: str,
    role: Role = Role.MIT_TECH,
    status: WorkStatus = WorkStatus.WORKING,
    person: Person = None,
) -> ResolvedDayEntry:
    """Helper to create resolved entries."""
    return ResolvedDayEntry(
        person_id=person_id,
        name=person_id,
        role=role,
        status=status,
        hours="",
        provenance=Provenance.WEEKDAY_DEFAULT,
        person=person,
    )


def demo_techs(count: int, status: WorkStatus = WorkStatus.WORKING):
    return [make_entry(f"D{i}", Role.DEMO_TECH, status) for i in range(count)]


def mit_techs(count: int, status: WorkStatus = WorkStatus.WORKING):
    return [make_entry(f"T{i}", Role.MIT_TECH, status) for i in range(count)]


@pytest.fixture
def aggregator():
    return StaffingAggregator()


class TestCounts:
    """Tests for head counts and sub teams."""

    @pytest.mark.parametrize(
        "working,expected",
        [(0, 0), (1, 0), (2, 1), (3, 1), (4, 2), (5, 2)],
    )
    def test_sub_teams_from_demo_techs(self, aggregator, working, expected):
        metrics = aggregator.aggregate(WEDNESDAY_DATE, demo_techs(working))
        assert metrics.demo_techs_working == working
        assert metrics.sub_teams == expected

    def test_only_working_entries_count(self, aggregator):
        entries = mit_techs(3) + mit_techs(2, WorkStatus.SICK) + demo_techs(1, WorkStatus.OFF)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, entries)
        assert metrics.techs_on_route == 3
        assert metrics.demo_techs_working == 0

    def test_trainees_do_not_run_routes(self, aggregator):
        trainee = Person(id="N", name="New", in_training=True)
        entries = mit_techs(2) + [make_entry("N", person=trainee)]
        assert aggregator.aggregate(WEDNESDAY_DATE, entries).techs_on_route == 2

    def test_second_shift_lead_runs_route(self, aggregator):
        lead = Person(id="L", name="Lee", role=Role.MIT_LEAD, zone="2nd Shift", is_zone_lead=True)
        other_lead = Person(id="M", name="Max", role=Role.MIT_LEAD, zone="Zone 1", is_zone_lead=True)
        entries = [
            make_entry("L", Role.MIT_LEAD, person=lead),
            make_entry("M", Role.MIT_LEAD, person=other_lead),
            make_entry("S", Role.SECOND_SHIFT_LEAD),
            make_entry("X", Role.SUPERVISOR),
        ]
        assert aggregator.aggregate(WEDNESDAY_DATE, entries).techs_on_route == 2

    def test_explicit_second_shift_lead_ids(self, aggregator):
        entries = [make_entry("X", Role.SUPERVISOR)]
        metrics = aggregator.aggregate(WEDNESDAY_DATE, entries, second_shift_lead_ids=["X"])
        assert metrics.techs_on_route == 1

    def test_custom_second_shift_zone(self):
        lead = Person(id="L", name="Lee", role=Role.MIT_LEAD, zone="Nights", is_zone_lead=True)
        aggregator = StaffingAggregator(second_shift_zone="Nights")
        entries = [make_entry("L", Role.MIT_LEAD, person=lead)]
        assert aggregator.aggregate(WEDNESDAY_DATE, entries).techs_on_route == 1


class TestHoursAndSurplus:
    """Tests for hour totals, surplus and new job capacity."""

    def test_demo_hours_fully_needed(self, aggregator):
        """Five demo techs at six hours cover exactly the internal need."""
        config = StaffingConfig(average_drive_time_hours=2)
        stats = DailyStats(
            dt_labor_hours=40,
            subcontractor_jobs=[SubcontractorJob("Crew A", 6), SubcontractorJob("Crew B", 4)],
        )
        metrics = aggregator.aggregate(WEDNESDAY_DATE, demo_techs(5), config, stats)

        assert metrics.hours_per_tech == 6
        assert metrics.dt_hours_available == 30
        assert metrics.sub_hours_handled == 10
        assert metrics.internal_demo_hours_needed == 30
        assert metrics.inefficient_demo_hours == 0

    def test_inefficient_demo_hours(self, aggregator):
        config = StaffingConfig(average_drive_time_hours=2)
        stats = DailyStats(dt_labor_hours=20)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, demo_techs(5), config, stats)
        assert metrics.inefficient_demo_hours == 10

    def test_potential_new_jobs_from_surplus(self, aggregator):
        config = StaffingConfig(
            average_drive_time_hours=1.5,
            average_job_duration_hours=4,
        )
        stats = DailyStats(total_labor_hours=50)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, mit_techs(10), config, stats)

        assert metrics.hours_per_tech == 6.5
        assert metrics.hours_available == 65
        assert metrics.base_work_surplus == 15
        assert metrics.potential_new_jobs == 3

    def test_deficit_gives_no_new_jobs(self, aggregator):
        config = StaffingConfig(average_job_duration_hours=4)
        stats = DailyStats(total_labor_hours=100)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, mit_techs(2), config, stats)
        assert metrics.base_work_surplus == -84
        assert metrics.potential_new_jobs == 0

    @pytest.mark.parametrize("duration", [None, 0, -2])
    def test_missing_job_duration(self, aggregator, duration):
        config = StaffingConfig(average_job_duration_hours=duration)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, mit_techs(4), config)
        assert metrics.base_work_surplus == 32
        assert metrics.potential_new_jobs == 0

    def test_prep_hours_added_to_labor_totals(self, aggregator):
        stats = DailyStats(total_labor_hours=10, total_tech_hours=8, sub_team_count=2)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, [], stats=stats)
        assert metrics.prep_hours == 2 * SUB_TEAM_PREP_HOURS
        assert metrics.total_labor_hours == 13
        assert metrics.total_tech_hours == 11

    def test_hours_per_tech_never_negative(self, aggregator):
        config = StaffingConfig(average_drive_time_hours=10)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, mit_techs(3), config)
        assert metrics.hours_per_tech == 0
        assert metrics.hours_available == 0

    def test_negative_inputs_clamped(self, aggregator):
        stats = DailyStats(
            total_labor_hours=-5,
            dt_labor_hours=-3,
            sub_team_count=-1,
            subcontractor_jobs=[SubcontractorJob("Crew", -4)],
        )
        metrics = aggregator.aggregate(WEDNESDAY_DATE, [], stats=stats)
        for name, value in metrics.as_dict().items():
            if name in ("date", "base_work_surplus"):
                continue
            assert value >= 0, name

    def test_no_config_or_stats(self, aggregator):
        metrics = aggregator.aggregate(WEDNESDAY_DATE, mit_techs(1))
        assert metrics.hours_per_tech == 8
        assert metrics.total_labor_hours == 0
        assert metrics.potential_new_jobs == 0


class TestAvailableHoursGoal:
    """Tests for the forecast-driven hours goal."""

    def test_goal_uses_default_forecast(self, aggregator):
        config = StaffingConfig(average_job_duration_hours=4)
        stats = DailyStats(total_labor_hours=40, dt_labor_hours=12)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, [], config, stats)
        assert metrics.forecasted_new_jobs == 3
        assert metrics.available_hours_goal == 40 + 12 + 3 * 4

    def test_goal_on_sunday(self, aggregator):
        config = StaffingConfig(average_job_duration_hours=4)
        stats = DailyStats(total_labor_hours=10)
        metrics = aggregator.aggregate(date(2024, 1, 21), [], config, stats)
        assert metrics.forecasted_new_jobs == 0
        assert metrics.available_hours_goal == 10

    def test_goal_without_duration(self, aggregator):
        stats = DailyStats(total_labor_hours=10)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, [], stats=stats)
        assert metrics.available_hours_goal == 10

    def test_injected_forecast(self):
        aggregator = StaffingAggregator(forecast=DayOfWeekForecast(weekday_jobs=5))
        config = StaffingConfig(average_job_duration_hours=2)
        metrics = aggregator.aggregate(WEDNESDAY_DATE, [], config)
        assert metrics.available_hours_goal == 10


class TestAggregateDay:
    """Tests for aggregate_day."""

    def test_uses_roster_day_date_and_entries(self, aggregator):
        day = RosterDay(schedule_date=WEDNESDAY_DATE, entries=mit_techs(2))
        metrics = aggregator.aggregate_day(day)
        assert metrics.schedule_date == WEDNESDAY_DATE
        assert metrics.techs_on_route == 2
