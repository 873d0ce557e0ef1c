"""Discrete time-slot enumeration for one day of a space."""

from __future__ import annotations

from datetime import date, time

from condo_reservations.domain.models import Slot, day_of_week
from condo_reservations.services.occupancy_service import OccupancyIndex, range_contains
from condo_reservations.services.schedule_service import ScheduleResolver
from condo_reservations.utils.clock import Clock, minute_of_day


DEFAULT_GRANULARITY_MINUTES = 30


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _time_from_minutes(total_minutes: int) -> time:
    hour, minute = divmod(total_minutes, 60)
    return time(hour, minute)


class SlotGenerator:
    """Enumerates open-window time points annotated occupied/past.

    Points run from the opening time to the closing time inclusive, stepping by
    ``granularity_minutes``. A point is occupied when it falls inside any
    reserved range, boundaries included unless ``inclusive_boundaries`` is
    turned off. Only points on today's date can be past: those earlier than
    the current minute.
    """

    def __init__(
        self,
        resolver: ScheduleResolver,
        occupancy: OccupancyIndex,
        clock: Clock,
        *,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
        inclusive_boundaries: bool = True,
    ) -> None:
        if granularity_minutes <= 0:
            raise ValueError("granularity_minutes must be > 0")
        self._resolver = resolver
        self._occupancy = occupancy
        self._clock = clock
        self._granularity = granularity_minutes
        self._inclusive = inclusive_boundaries

    def slots(self, on_date: date) -> list[Slot]:
        window = self._resolver.resolve(day_of_week(on_date))
        if window is None:
            return []

        now = self._clock.now()
        today = now.date()
        now_minute = minute_of_day(now)
        occupied_ranges = self._occupancy.occupied_ranges(on_date)

        result: list[Slot] = []
        current = _minutes(window.open_time)
        last = _minutes(window.close_time)
        while current <= last:
            point = _time_from_minutes(current)
            occupied = any(
                range_contains(occupied_range, point, inclusive=self._inclusive)
                for occupied_range in occupied_ranges
            )
            past = on_date == today and current < now_minute
            result.append(Slot(time_of_day=point, occupied=occupied, past=past))
            current += self._granularity
        return result

    def end_slot_candidates(self, on_date: date, start: time) -> list[Slot]:
        """Slots strictly after ``start``, offered as possible end times."""
        return [slot for slot in self.slots(on_date) if slot.time_of_day > start]

    def has_free_slot(self, on_date: date) -> bool:
        return any(slot.selectable for slot in self.slots(on_date))
