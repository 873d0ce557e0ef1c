"""Tests for the month grid and per-day bookability.

Covers Sunday-first leading blanks, closed and blocked weekdays, and the
rule that a day is bookable exactly when it has a selectable slot.
"""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from condo_reservations.domain.models import (
    DayUnavailableReason,
    OccupiedRange,
    WeeklyAvailabilityRule,
    WeeklySchedule,
    day_of_week,
)
from condo_reservations.services.calendar_service import CalendarAvailabilityComputer
from condo_reservations.services.occupancy_service import OccupancyIndex
from condo_reservations.services.schedule_service import ScheduleResolver
from condo_reservations.services.slot_service import SlotGenerator
from condo_reservations.utils.clock import FixedClock


NOW = datetime(2026, 3, 4, 10, 7)


def _build(occupied=(), blocked=frozenset()) -> tuple[CalendarAvailabilityComputer, SlotGenerator]:
    schedule = WeeklySchedule(
        rules=tuple(WeeklyAvailabilityRule(day, time(8), time(18)) for day in range(1, 6)),
        blocked_weekdays=frozenset(blocked),
    )
    resolver = ScheduleResolver(schedule)
    clock = FixedClock(NOW)
    generator = SlotGenerator(resolver, OccupancyIndex(occupied), clock)
    return CalendarAvailabilityComputer(resolver, generator, clock), generator


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2026, 3, 8)) == 0
    assert day_of_week(date(2026, 3, 9)) == 1
    assert day_of_week(date(2026, 3, 14)) == 6


@pytest.mark.parametrize(
    "year,month,leading_blanks,days",
    [(2026, 3, 0, 31), (2026, 4, 3, 30), (2026, 2, 0, 28), (2028, 2, 2, 29)],
)
def test_month_grid_shape(year: int, month: int, leading_blanks: int, days: int):
    computer, _ = _build()

    grid = computer.month(year, month)

    assert grid.leading_blanks == leading_blanks
    assert len(grid.days) == days
    assert grid.days[0].date == date(year, month, 1)


def test_weekends_are_closed():
    computer, _ = _build()

    assert computer.unavailable_reason(date(2026, 3, 7)) == DayUnavailableReason.DAY_CLOSED
    assert computer.unavailable_reason(date(2026, 3, 8)) == DayUnavailableReason.DAY_CLOSED


def test_blocked_weekday_is_never_bookable():
    computer, _ = _build(blocked={3})

    grid = computer.month(2026, 4)
    wednesdays = [day for day in grid.days if day.weekday == 3]

    assert wednesdays
    assert all(not day.bookable for day in wednesdays)
    assert all(day.reason == DayUnavailableReason.DAY_CLOSED for day in wednesdays)


def test_bookable_matches_free_slot_for_every_day():
    """A day is bookable exactly when its slot list has a selectable entry."""
    occupied = [
        OccupiedRange(date(2026, 3, 9), time(8), time(18)),
        OccupiedRange(date(2026, 3, 10), time(9), time(12)),
    ]
    computer, generator = _build(occupied)

    for day in computer.month(2026, 3).days:
        assert day.bookable == generator.has_free_slot(day.date)


def test_fully_reserved_day_reports_no_free_slots():
    computer, _ = _build([OccupiedRange(date(2026, 3, 9), time(8), time(18))])

    assert computer.day_is_bookable(date(2026, 3, 9)) is False
    assert computer.unavailable_reason(date(2026, 3, 9)) == DayUnavailableReason.NO_FREE_SLOTS
    assert computer.day_is_bookable(date(2026, 3, 10)) is True


def test_earlier_open_days_stay_bookable_and_today_is_flagged():
    """Past-ness is a today-only rule, so earlier open weekdays keep free slots."""
    computer, _ = _build()

    grid = computer.month(2026, 3)
    by_day = {day.date.day: day for day in grid.days}

    assert by_day[2].bookable is True
    assert by_day[3].bookable is True
    assert by_day[3].reason is None
    assert by_day[4].bookable is True
    assert [day.date.day for day in grid.days if day.is_today] == [4]


def test_invalid_month_raises():
    computer, _ = _build()

    with pytest.raises(ValueError):
        computer.month(2026, 13)
