"""Month grid of bookable days for a space."""

from __future__ import annotations

import calendar
from datetime import date
from typing import Optional

from condo_reservations.domain.models import (
    CalendarDay,
    DayUnavailableReason,
    MonthCalendar,
    day_of_week,
)
from condo_reservations.services.schedule_service import ScheduleResolver
from condo_reservations.services.slot_service import SlotGenerator
from condo_reservations.utils.clock import Clock, today


class CalendarAvailabilityComputer:
    """Flags each day of a month as bookable or not."""

    def __init__(
        self,
        resolver: ScheduleResolver,
        slot_generator: SlotGenerator,
        clock: Clock,
    ) -> None:
        self._resolver = resolver
        self._slot_generator = slot_generator
        self._clock = clock

    def unavailable_reason(self, on_date: date) -> Optional[DayUnavailableReason]:
        if self._resolver.is_closed(day_of_week(on_date)):
            return DayUnavailableReason.DAY_CLOSED
        if not self._slot_generator.has_free_slot(on_date):
            return DayUnavailableReason.NO_FREE_SLOTS
        return None

    def day_is_bookable(self, on_date: date) -> bool:
        return self.unavailable_reason(on_date) is None

    def month(self, year: int, month: int) -> MonthCalendar:
        if not 1 <= month <= 12:
            raise ValueError("month must be between 1 and 12")

        first_weekday, days_in_month = calendar.monthrange(year, month)
        current_day = today(self._clock)
        days: list[CalendarDay] = []
        for day_number in range(1, days_in_month + 1):
            current = date(year, month, day_number)
            reason = self.unavailable_reason(current)
            days.append(
                CalendarDay(
                    date=current,
                    weekday=day_of_week(current),
                    bookable=reason is None,
                    reason=reason,
                    is_today=current == current_day,
                )
            )

        return MonthCalendar(
            year=year,
            month=month,
            # monthrange counts from Monday; the grid starts on Sunday
            leading_blanks=(first_weekday + 1) % 7,
            days=days,
        )
