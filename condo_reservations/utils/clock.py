"""Injectable wall-clock sources.

Every engine component that needs "now" receives a ``Clock``; the value is the
caller's current local wall-clock time as a naive ``datetime``.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now(self) -> datetime:
        ...


def today(clock: Clock) -> date:
    return clock.now().date()


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


class SystemClock:
    """Reads the system time converted to a fixed IANA zone."""

    def __init__(self, zone: tzinfo | str) -> None:
        self._zone = ZoneInfo(zone) if isinstance(zone, str) else zone

    def now(self) -> datetime:
        return datetime.now(self._zone).replace(tzinfo=None)


class FixedClock:
    """Always returns the same local moment."""

    def __init__(self, moment: datetime) -> None:
        self._moment = moment.replace(tzinfo=None)

    def now(self) -> datetime:
        return self._moment
