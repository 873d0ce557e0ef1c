"""Per-date view of already reserved time ranges."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, time
from typing import Iterable, Mapping

from condo_reservations.domain.models import OccupiedRange


def ranges_overlap(
    first_start: time,
    first_end: time,
    second_start: time,
    second_end: time,
    *,
    inclusive: bool = True,
) -> bool:
    """Symmetric overlap test; with ``inclusive`` touching boundaries conflict."""
    if inclusive:
        return first_start <= second_end and second_start <= first_end
    return first_start < second_end and second_start < first_end


def range_contains(occupied: OccupiedRange, point: time, *, inclusive: bool = True) -> bool:
    if inclusive:
        return occupied.start_time <= point <= occupied.end_time
    return occupied.start_time <= point < occupied.end_time


class OccupancyIndex:
    """Normalizes an occupancy snapshot into sorted per-date lists."""

    def __init__(self, ranges: Iterable[OccupiedRange] = ()) -> None:
        by_date: dict[date, list[OccupiedRange]] = defaultdict(list)
        for occupied in ranges:
            by_date[occupied.date].append(occupied)
        self._by_date = {
            day: sorted(items, key=lambda item: (item.start_time, item.end_time))
            for day, items in by_date.items()
        }

    @classmethod
    def from_mapping(cls, ranges_by_date: Mapping[date, Iterable[OccupiedRange]]) -> "OccupancyIndex":
        # Keys are trusted only as grouping hints; each range keeps its own date.
        return cls(occupied for items in ranges_by_date.values() for occupied in items)

    def occupied_ranges(self, on_date: date) -> list[OccupiedRange]:
        return list(self._by_date.get(on_date, ()))

    def conflicts(
        self,
        on_date: date,
        start_time: time,
        end_time: time,
        *,
        inclusive: bool = True,
    ) -> list[OccupiedRange]:
        return [
            occupied
            for occupied in self._by_date.get(on_date, ())
            if ranges_overlap(
                start_time,
                end_time,
                occupied.start_time,
                occupied.end_time,
                inclusive=inclusive,
            )
        ]

    def __len__(self) -> int:
        return sum(len(items) for items in self._by_date.values())
