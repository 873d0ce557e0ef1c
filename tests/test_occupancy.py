"""Tests for occupancy grouping and the range overlap predicates."""

from __future__ import annotations

from datetime import date, time

from condo_reservations.domain.models import OccupiedRange
from condo_reservations.services.occupancy_service import (
    OccupancyIndex,
    range_contains,
    ranges_overlap,
)


DAY = date(2026, 3, 9)


def test_occupied_ranges_are_sorted_and_filtered_by_date():
    index = OccupancyIndex(
        [
            OccupiedRange(DAY, time(14), time(16)),
            OccupiedRange(date(2026, 3, 10), time(8), time(9)),
            OccupiedRange(DAY, time(9), time(11)),
        ]
    )

    assert index.occupied_ranges(DAY) == [
        OccupiedRange(DAY, time(9), time(11)),
        OccupiedRange(DAY, time(14), time(16)),
    ]
    assert index.occupied_ranges(date(2026, 3, 11)) == []
    assert len(index) == 3


def test_from_mapping_regroups_by_each_range_date():
    index = OccupancyIndex.from_mapping(
        {DAY: [OccupiedRange(date(2026, 3, 10), time(8), time(9))]}
    )

    assert index.occupied_ranges(DAY) == []
    assert len(index.occupied_ranges(date(2026, 3, 10))) == 1


def test_overlap_is_symmetric():
    """Swapping the two ranges never changes the verdict."""
    pairs = [
        ((time(9), time(11)), (time(10), time(12))),
        ((time(9), time(11)), (time(11), time(12))),
        ((time(9), time(10)), (time(10, 30), time(12))),
        ((time(8), time(18)), (time(9), time(10))),
    ]
    for (a_start, a_end), (b_start, b_end) in pairs:
        for inclusive in (True, False):
            assert ranges_overlap(a_start, a_end, b_start, b_end, inclusive=inclusive) == (
                ranges_overlap(b_start, b_end, a_start, a_end, inclusive=inclusive)
            )


def test_touching_boundaries_conflict_only_when_inclusive():
    """Back-to-back ranges share an endpoint, which conflicts only under the inclusive policy."""
    assert ranges_overlap(time(9), time(11), time(11), time(12)) is True
    assert ranges_overlap(time(9), time(11), time(11), time(12), inclusive=False) is False


def test_range_contains_end_point_depends_on_policy():
    occupied = OccupiedRange(DAY, time(10), time(12))

    assert range_contains(occupied, time(12)) is True
    assert range_contains(occupied, time(12), inclusive=False) is False
    assert range_contains(occupied, time(10), inclusive=False) is True


def test_conflicts_lists_every_overlap_in_start_order():
    index = OccupancyIndex(
        [
            OccupiedRange(DAY, time(15), time(16)),
            OccupiedRange(DAY, time(9), time(10)),
            OccupiedRange(DAY, time(12), time(13)),
        ]
    )

    conflicts = index.conflicts(DAY, time(9, 30), time(15))

    assert [item.start_time for item in conflicts] == [time(9), time(12), time(15)]
    assert index.conflicts(DAY, time(10, 30), time(11, 30)) == []
