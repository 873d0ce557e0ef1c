"""Domain models for common-space schedules, occupancy and reservations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional


WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


def day_of_week(value: date) -> int:
    """Weekday of a calendar date, 0 = Sunday through 6 = Saturday."""
    return (value.weekday() + 1) % 7


def format_wall_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def parse_wall_time(value: str) -> time:
    """Parse an ``HH:MM`` wall-clock string."""
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(part.isdigit() and len(part) == 2 for part in parts):
        raise ValueError(f"time must follow HH:MM format, got {value!r}")
    hour, minute = (int(part) for part in parts)
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise ValueError(f"time boundaries are invalid, got {value!r}")
    return time(hour, minute)


class SpaceType(str, Enum):
    SALON_SOCIAL = "SALON_SOCIAL"
    ZONA_BBQ = "ZONA_BBQ"
    SAUNA = "SAUNA"
    CASA_EVENTOS = "CASA_EVENTOS"
    GIMNASIO = "GIMNASIO"
    PISCINA = "PISCINA"
    CANCHA_DEPORTIVA = "CANCHA_DEPORTIVA"
    PARQUEADERO = "PARQUEADERO"
    OTRO = "OTRO"

    @property
    def label(self) -> str:
        return _SPACE_TYPE_LABELS[self]


_SPACE_TYPE_LABELS = {
    SpaceType.SALON_SOCIAL: "Social hall",
    SpaceType.ZONA_BBQ: "BBQ area",
    SpaceType.SAUNA: "Sauna",
    SpaceType.CASA_EVENTOS: "Event house",
    SpaceType.GIMNASIO: "Gym",
    SpaceType.PISCINA: "Pool",
    SpaceType.CANCHA_DEPORTIVA: "Sports court",
    SpaceType.PARQUEADERO: "Parking",
    SpaceType.OTRO: "Other",
}


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class RejectionReason(str, Enum):
    MALFORMED_DATE_TIME = "MALFORMED_DATE_TIME"
    INVALID_RANGE = "INVALID_RANGE"
    MULTI_DAY_NOT_SUPPORTED = "MULTI_DAY_NOT_SUPPORTED"
    DAY_NOT_AVAILABLE = "DAY_NOT_AVAILABLE"
    OUTSIDE_OPERATING_HOURS = "OUTSIDE_OPERATING_HOURS"
    SLOT_OCCUPIED = "SLOT_OCCUPIED"
    PAST_TIME = "PAST_TIME"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    @property
    def default_message(self) -> str:
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES = {
    RejectionReason.MALFORMED_DATE_TIME: "Date and time must follow YYYY-MM-DDTHH:MM",
    RejectionReason.INVALID_RANGE: "End time must be after start time",
    RejectionReason.MULTI_DAY_NOT_SUPPORTED: "Reservations must start and end on the same day",
    RejectionReason.DAY_NOT_AVAILABLE: "The space is not available on the selected day",
    RejectionReason.OUTSIDE_OPERATING_HOURS: "The selected hours are outside the space's opening hours",
    RejectionReason.SLOT_OCCUPIED: "The selected hours overlap an existing reservation",
    RejectionReason.PAST_TIME: "The selected start time has already passed",
    RejectionReason.CONFIGURATION_ERROR: "The space's weekly schedule is misconfigured",
}


class DayUnavailableReason(str, Enum):
    DAY_CLOSED = "DAY_CLOSED"
    NO_FREE_SLOTS = "NO_FREE_SLOTS"


@dataclass(frozen=True)
class CommonSpace:
    space_id: int
    name: str
    space_type: SpaceType
    requires_approval: bool = True
    active: bool = True


@dataclass(frozen=True)
class WeeklyAvailabilityRule:
    day_of_week: int
    open_time: time
    close_time: time


@dataclass(frozen=True)
class WeeklySchedule:
    rules: tuple[WeeklyAvailabilityRule, ...] = ()
    blocked_weekdays: frozenset[int] = frozenset()


@dataclass(frozen=True)
class OpenWindow:
    open_time: time
    close_time: time

    def contains(self, value: time) -> bool:
        return self.open_time <= value <= self.close_time


@dataclass(frozen=True)
class OccupiedRange:
    date: date
    start_time: time
    end_time: time


@dataclass(frozen=True)
class ReservationRequest:
    space_id: int
    start: datetime
    end: datetime
    unit_id: Optional[str] = None
    reason: Optional[str] = None

    @property
    def date(self) -> date:
        return self.start.date()


@dataclass(frozen=True)
class Slot:
    time_of_day: time
    occupied: bool
    past: bool

    @property
    def label(self) -> str:
        return format_wall_time(self.time_of_day)

    @property
    def selectable(self) -> bool:
        return not self.occupied and not self.past


@dataclass(frozen=True)
class ValidationResult:
    accepted: bool
    reason: Optional[RejectionReason] = None
    message: str = ""

    @classmethod
    def accept(cls) -> "ValidationResult":
        return cls(accepted=True)

    @classmethod
    def reject(
        cls,
        reason: RejectionReason,
        message: Optional[str] = None,
    ) -> "ValidationResult":
        return cls(
            accepted=False,
            reason=reason,
            message=message or reason.default_message,
        )


@dataclass(frozen=True)
class CalendarDay:
    date: date
    weekday: int
    bookable: bool
    reason: Optional[DayUnavailableReason]
    is_today: bool


@dataclass(frozen=True)
class MonthCalendar:
    year: int
    month: int
    leading_blanks: int
    days: list[CalendarDay] = field(default_factory=list)


@dataclass(frozen=True)
class ReservationRecord:
    reservation_id: int
    space_id: int
    start: datetime
    end: datetime
    status: ReservationStatus
    start_instant: str
    end_instant: str
    unit_id: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class ReservationPage:
    """One page of a filtered reservation listing."""

    items: list[ReservationRecord]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.total else 0
