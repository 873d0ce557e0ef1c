"""Weekly opening-hours resolution for a common space."""

from __future__ import annotations

from collections import Counter
from datetime import time
from typing import Iterable, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from condo_reservations.domain.models import (
    OpenWindow,
    WeeklyAvailabilityRule,
    WeeklySchedule,
    parse_wall_time,
)
from condo_reservations.utils.logger import get_logger


logger = get_logger(__name__)


class ScheduleConfigurationError(Exception):
    """Raised when a space's weekly rules are ambiguous or invalid."""


class _SchedulePayloadRule(BaseModel):
    """One entry of the schedule JSON stored alongside a space."""

    dia: int = Field(ge=0, le=6)
    hora_inicio: str = Field(alias="horaInicio")
    hora_fin: str = Field(alias="horaFin")

    @field_validator("hora_inicio", "hora_fin")
    @classmethod
    def validate_wall_time(cls, value: str) -> str:
        parse_wall_time(value)
        return value


_SCHEDULE_PAYLOAD = TypeAdapter(list[_SchedulePayloadRule])


def parse_schedule_payload(
    payload: Optional[str],
    blocked_weekdays: Iterable[int] = (),
) -> WeeklySchedule:
    """Build a schedule from ``[{"dia", "horaInicio", "horaFin"}, ...]`` JSON."""
    blocked = frozenset(int(day) for day in blocked_weekdays)
    if not payload:
        return WeeklySchedule(rules=(), blocked_weekdays=blocked)
    try:
        entries = _SCHEDULE_PAYLOAD.validate_json(payload)
    except ValidationError as exc:
        logger.warning("Rejected schedule payload | errors=%s", exc.error_count())
        raise ScheduleConfigurationError(f"schedule payload is invalid: {exc}") from exc
    rules = tuple(
        WeeklyAvailabilityRule(
            day_of_week=entry.dia,
            open_time=parse_wall_time(entry.hora_inicio),
            close_time=parse_wall_time(entry.hora_fin),
        )
        for entry in entries
    )
    return WeeklySchedule(rules=rules, blocked_weekdays=blocked)


def serialize_schedule_rules(rules: Iterable[WeeklyAvailabilityRule]) -> str:
    return _SCHEDULE_PAYLOAD.dump_json(
        [
            _SchedulePayloadRule(
                dia=rule.day_of_week,
                horaInicio=f"{rule.open_time:%H:%M}",
                horaFin=f"{rule.close_time:%H:%M}",
            )
            for rule in rules
        ],
        by_alias=True,
    ).decode("utf-8")


def _validate_schedule(schedule: WeeklySchedule) -> None:
    for weekday in schedule.blocked_weekdays:
        if not 0 <= weekday <= 6:
            raise ScheduleConfigurationError(f"blocked weekday {weekday} is outside 0..6")

    for rule in schedule.rules:
        if not 0 <= rule.day_of_week <= 6:
            raise ScheduleConfigurationError(
                f"rule weekday {rule.day_of_week} is outside 0..6"
            )
        if rule.open_time >= rule.close_time:
            raise ScheduleConfigurationError(
                f"rule for weekday {rule.day_of_week} opens at {rule.open_time:%H:%M} "
                f"but closes at {rule.close_time:%H:%M}"
            )

    duplicated = sorted(
        weekday
        for weekday, count in Counter(rule.day_of_week for rule in schedule.rules).items()
        if count > 1
    )
    if duplicated:
        raise ScheduleConfigurationError(
            f"multiple rules defined for weekdays {duplicated}"
        )


class ScheduleResolver:
    """Answers which window a weekday is open, or that it is closed."""

    def __init__(self, schedule: WeeklySchedule) -> None:
        _validate_schedule(schedule)
        self._schedule = schedule
        self._windows = {
            rule.day_of_week: OpenWindow(open_time=rule.open_time, close_time=rule.close_time)
            for rule in schedule.rules
        }

    def resolve(self, weekday: int) -> Optional[OpenWindow]:
        """Return the open window for ``weekday`` or ``None`` when closed."""
        if weekday in self._schedule.blocked_weekdays:
            return None
        return self._windows.get(weekday)

    def is_closed(self, weekday: int) -> bool:
        return self.resolve(weekday) is None

    def open_weekdays(self) -> list[int]:
        return [weekday for weekday in range(7) if not self.is_closed(weekday)]

    def operating_range(self) -> Optional[tuple[time, time]]:
        """Earliest opening and latest closing across open weekdays."""
        windows = [self.resolve(weekday) for weekday in self.open_weekdays()]
        if not windows:
            return None
        return (
            min(window.open_time for window in windows),
            max(window.close_time for window in windows),
        )
