"""Tests for whole-roster resolution."""

import copy
from datetime import date

import pytest

from staffplan.domain.models import (
    WEDNESDAY,
    DailyOverride,
    DayOverrides,
    MonthSchedule,
    Person,
    Provenance,
    RecurringRule,
    Role,
    Roster,
    WorkStatus,
)
from staffplan.scheduling.roster_calculator import RosterScheduleCalculator


@pytest.fixture
def calculator():
    return RosterScheduleCalculator()


@pytest.fixture
def roster():
    return Roster(
        people=[
            Person(id="T1", name="zoe Zimmer", role=Role.MIT_TECH),
            Person(id="T2", name="Adam Alvarez", role=Role.MIT_TECH),
            Person(
                id="T3",
                name="bea Brown",
                role=Role.DEMO_TECH,
                recurring_rules=[
                    RecurringRule(days=frozenset({WEDNESDAY}), status=WorkStatus.OFF)
                ],
            ),
            Person(id="T4", name="Carl Cruz", role=Role.MIT_TECH),
        ]
    )


@pytest.fixture
def january():
    return MonthSchedule(
        year=2024,
        month=1,
        days={
            17: DayOverrides(
                notes="Truck 4 in the shop",
                overrides={"T4": DailyOverride("T4", WorkStatus.SICK)},
            )
        },
    )


class TestResolveDay:
    """Tests for RosterScheduleCalculator.resolve_day."""

    def test_one_entry_per_person(self, calculator, roster, january):
        day = calculator.resolve_day(date(2024, 1, 17), january, roster)
        assert len(day.entries) == 4
        assert {e.person_id for e in day.entries} == {"T1", "T2", "T3", "T4"}

    def test_sorted_case_insensitively(self, calculator, roster, january):
        day = calculator.resolve_day(date(2024, 1, 17), january, roster)
        assert [e.name for e in day.entries] == [
            "Adam Alvarez",
            "bea Brown",
            "Carl Cruz",
            "zoe Zimmer",
        ]

    def test_notes_and_overrides_applied(self, calculator, roster, january):
        day = calculator.resolve_day(date(2024, 1, 17), january, roster)
        assert day.notes == "Truck 4 in the shop"
        assert day.entry_for("T4").status is WorkStatus.SICK
        assert day.entry_for("T4").provenance is Provenance.SPECIFIC_OVERRIDE
        assert day.entry_for("T3").provenance is Provenance.RECURRING_RULE
        assert day.entry_for("T1").provenance is Provenance.WEEKDAY_DEFAULT

    def test_day_without_entry(self, calculator, roster, january):
        day = calculator.resolve_day(date(2024, 1, 18), january, roster)
        assert day.notes == ""
        assert all(e.status is WorkStatus.WORKING for e in day.entries)

    def test_missing_month_document(self, calculator, roster):
        day = calculator.resolve_day(date(2024, 1, 17), None, roster)
        assert day.notes == ""
        assert day.entry_for("T4").status is WorkStatus.WORKING

    def test_document_for_another_month_ignored(self, calculator, roster, january):
        day = calculator.resolve_day(date(2024, 2, 17), january, roster)
        assert day.notes == ""
        assert all(e.provenance is Provenance.WEEKEND_DEFAULT for e in day.entries)

    def test_inputs_not_mutated(self, calculator, roster, january):
        roster_before = copy.deepcopy(roster)
        january_before = copy.deepcopy(january)
        for _ in range(3):
            calculator.resolve_day(date(2024, 1, 17), january, roster)
        assert roster == roster_before
        assert january == january_before

    def test_repeated_calls_are_identical(self, calculator, roster, january):
        first = calculator.resolve_day(date(2024, 1, 17), january, roster)
        second = calculator.resolve_day(date(2024, 1, 17), january, roster)
        assert first == second

    def test_status_counts(self, calculator, roster, january):
        day = calculator.resolve_day(date(2024, 1, 17), january, roster)
        counts = day.status_counts()
        assert counts[WorkStatus.WORKING] == 2
        assert counts[WorkStatus.OFF] == 1
        assert counts[WorkStatus.SICK] == 1
        assert counts[WorkStatus.VACATION] == 0

    def test_empty_roster(self, calculator, january):
        day = calculator.resolve_day(date(2024, 1, 17), january, Roster())
        assert day.entries == []
        assert day.notes == "Truck 4 in the shop"


class TestResolveRange:
    """Tests for RosterScheduleCalculator.resolve_range."""

    def test_spans_month_boundary(self, calculator, roster, january):
        february = MonthSchedule(
            year=2024,
            month=2,
            days={1: DayOverrides(overrides={"T1": DailyOverride("T1", WorkStatus.VACATION)})},
        )
        days = calculator.resolve_range(
            date(2024, 1, 30),
            date(2024, 2, 2),
            {(2024, 1): january, (2024, 2): february},
            roster,
        )
        assert [d.schedule_date for d in days] == [
            date(2024, 1, 30),
            date(2024, 1, 31),
            date(2024, 2, 1),
            date(2024, 2, 2),
        ]
        assert days[2].entry_for("T1").status is WorkStatus.VACATION
        assert days[3].entry_for("T1").status is WorkStatus.WORKING


class TestRosterActiveOn:
    """Tests for Roster.active_on."""

    def test_end_date_is_exclusive(self):
        roster = Roster(
            people=[
                Person(id="A", name="A", end_date=date(2024, 1, 17)),
                Person(id="B", name="B"),
            ]
        )
        assert [p.id for p in roster.active_on(date(2024, 1, 16))] == ["A", "B"]
        assert [p.id for p in roster.active_on(date(2024, 1, 17))] == ["B"]


class TestActualStaffingForMonth:
    """Tests for the per-day MIT tech staffing series."""

    def test_counts_working_mit_techs(self, calculator, roster, january):
        staffing = calculator.actual_staffing_for_month(2024, 1, january, roster)
        assert len(staffing) == 31
        # Wednesday the 17th: T1, T2 working, T4 sick
        assert staffing[16] == 2
        # Thursday the 18th: all three MIT techs
        assert staffing[17] == 3
        # Saturday the 20th
        assert staffing[19] == 0

    def test_excludes_departed_and_training(self, calculator):
        roster = Roster(
            people=[
                Person(id="A", name="A", end_date=date(2024, 1, 17)),
                Person(
                    id="B",
                    name="B",
                    in_training=True,
                    training_end_date=date(2024, 1, 17),
                ),
                Person(id="C", name="C", in_training=True),
            ]
        )
        staffing = calculator.actual_staffing_for_month(2024, 1, None, roster)
        # Tuesday the 16th: A active, B still training
        assert staffing[15] == 1
        # Wednesday the 17th: A gone, B done training
        assert staffing[16] == 1
        # C never finishes training
        assert max(staffing) == 1
