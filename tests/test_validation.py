"""Tests for ReservationValidator.

Covers each rejection reason and the order in which checks short-circuit.
"""

from __future__ import annotations

from datetime import datetime, time

import pytest

from condo_reservations.domain.models import (
    OccupiedRange,
    RejectionReason,
    ReservationRequest,
    WeeklyAvailabilityRule,
    WeeklySchedule,
)
from condo_reservations.services.occupancy_service import OccupancyIndex
from condo_reservations.services.schedule_service import ScheduleResolver
from condo_reservations.services.validation_service import ReservationValidator
from condo_reservations.utils.clock import FixedClock


NOW = datetime(2026, 3, 4, 10, 7)
EXISTING = OccupiedRange(datetime(2026, 3, 9).date(), time(10), time(12))


def _validator(occupied=(EXISTING,), inclusive: bool = True) -> ReservationValidator:
    schedule = WeeklySchedule(
        rules=tuple(WeeklyAvailabilityRule(day, time(8), time(18)) for day in range(1, 6))
    )
    return ReservationValidator(
        ScheduleResolver(schedule),
        OccupancyIndex(occupied),
        FixedClock(NOW),
        inclusive_boundaries=inclusive,
    )


def _request(start: str, end: str) -> ReservationRequest:
    return ReservationRequest(
        space_id=1,
        start=datetime.fromisoformat(start),
        end=datetime.fromisoformat(end),
    )


def test_free_range_inside_window_is_accepted():
    result = _validator().validate(_request("2026-03-09T13:00", "2026-03-09T15:00"))

    assert result.accepted is True
    assert result.reason is None


def test_window_boundaries_are_accepted():
    """Opening and closing times themselves are valid endpoints."""
    result = _validator(occupied=()).validate(_request("2026-03-09T08:00", "2026-03-09T18:00"))

    assert result.accepted is True


def test_closed_day_is_rejected():
    result = _validator().validate(_request("2026-03-08T09:00", "2026-03-08T10:00"))

    assert result.reason == RejectionReason.DAY_NOT_AVAILABLE
    assert result.message == RejectionReason.DAY_NOT_AVAILABLE.default_message


@pytest.mark.parametrize(
    "start,end",
    [
        ("2026-03-09T07:00", "2026-03-09T09:00"),
        ("2026-03-09T17:00", "2026-03-09T18:30"),
        ("2026-03-09T07:30", "2026-03-09T18:30"),
    ],
)
def test_range_leaving_window_is_rejected(start: str, end: str):
    result = _validator().validate(_request(start, end))

    assert result.reason == RejectionReason.OUTSIDE_OPERATING_HOURS
    assert "08:00" in result.message
    assert "18:00" in result.message


def test_overlap_with_existing_reservation_is_rejected():
    result = _validator().validate(_request("2026-03-09T11:00", "2026-03-09T13:00"))

    assert result.reason == RejectionReason.SLOT_OCCUPIED
    assert "10:00" in result.message


def test_request_containing_existing_reservation_is_rejected():
    result = _validator().validate(_request("2026-03-09T09:00", "2026-03-09T13:00"))

    assert result.reason == RejectionReason.SLOT_OCCUPIED


def test_touching_reservation_conflicts_under_inclusive_policy():
    request = _request("2026-03-09T12:00", "2026-03-09T13:00")

    assert _validator().validate(request).reason == RejectionReason.SLOT_OCCUPIED
    assert _validator(inclusive=False).validate(request).accepted is True


@pytest.mark.parametrize(
    "start,end",
    [("2026-03-09T10:00", "2026-03-09T09:00"), ("2026-03-09T10:00", "2026-03-09T10:00")],
)
def test_non_positive_range_is_rejected(start: str, end: str):
    result = _validator().validate(_request(start, end))

    assert result.reason == RejectionReason.INVALID_RANGE


def test_multi_day_request_is_rejected():
    result = _validator().validate(_request("2026-03-09T17:00", "2026-03-10T09:00"))

    assert result.reason == RejectionReason.MULTI_DAY_NOT_SUPPORTED


def test_start_before_current_minute_today_is_rejected():
    result = _validator().validate(_request("2026-03-04T10:06", "2026-03-04T11:00"))

    assert result.reason == RejectionReason.PAST_TIME


def test_start_at_current_minute_today_is_accepted():
    """A start equal to the current minute is not in the past."""
    result = _validator().validate(_request("2026-03-04T10:07", "2026-03-04T11:00"))

    assert result.accepted is True


def test_earlier_date_is_not_checked_against_clock():
    """The past-time rule only compares requests made for today."""
    result = _validator().validate(_request("2026-03-03T09:00", "2026-03-03T10:00"))

    assert result.accepted is True


# --- check ordering ---

def test_invalid_range_wins_over_closed_day():
    """An inverted range is reported before the weekday is checked."""
    result = _validator().validate(_request("2026-03-08T10:00", "2026-03-08T09:00"))

    assert result.reason == RejectionReason.INVALID_RANGE


def test_occupancy_is_reported_before_past_time():
    """An occupied range earlier today is reported as occupied, not past."""
    earlier_today = OccupiedRange(NOW.date(), time(8), time(9))
    result = _validator(occupied=(earlier_today,)).validate(
        _request("2026-03-04T08:30", "2026-03-04T09:30")
    )

    assert result.reason == RejectionReason.SLOT_OCCUPIED


def test_validation_is_deterministic():
    validator = _validator()
    request = _request("2026-03-09T11:00", "2026-03-09T13:00")

    assert validator.validate(request) == validator.validate(request)


def test_request_running_into_existing_reservation_is_rejected():
    result = _validator().validate(_request("2026-03-09T09:30", "2026-03-09T10:30"))

    assert result.reason == RejectionReason.SLOT_OCCUPIED


def test_start_ten_minutes_ago_is_rejected():
    result = _validator(occupied=()).validate(_request("2026-03-04T09:57", "2026-03-04T11:00"))

    assert result.reason == RejectionReason.PAST_TIME
