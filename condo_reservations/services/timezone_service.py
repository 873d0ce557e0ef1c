"""Wall-clock to offset-tagged instant conversion.

The hour and minute a resident picks are never shifted: the normalizer only
appends seconds and the UTC offset so the booking store knows which zone the
wall-clock value belongs to.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo


WALL_CLOCK_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})$")
OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):(\d{2})$")
MAX_OFFSET = timedelta(hours=24)


class MalformedDateTimeError(ValueError):
    """Raised when a wall-clock date-time or offset cannot be parsed."""


def parse_wall_clock(value: str) -> datetime:
    """Parse ``YYYY-MM-DDTHH:MM`` into a naive local datetime."""
    if not isinstance(value, str):
        raise MalformedDateTimeError("date-time must be a string")
    match = WALL_CLOCK_PATTERN.fullmatch(value.strip())
    if match is None:
        raise MalformedDateTimeError(
            f"date-time must follow YYYY-MM-DDTHH:MM format, got {value!r}"
        )
    year, month, day, hour, minute = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError as exc:
        raise MalformedDateTimeError(f"date-time {value!r} does not exist") from exc


def parse_utc_offset(value: timedelta | str) -> timedelta:
    if isinstance(value, timedelta):
        offset = value
    else:
        match = OFFSET_PATTERN.fullmatch(value.strip())
        if match is None:
            raise MalformedDateTimeError(f"UTC offset must follow ±HH:MM, got {value!r}")
        sign, hours, minutes = match.groups()
        if int(minutes) > 59:
            raise MalformedDateTimeError(f"UTC offset minutes are invalid, got {value!r}")
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        if sign == "-":
            offset = -offset
    if abs(offset) >= MAX_OFFSET:
        raise MalformedDateTimeError("UTC offset must be strictly within ±24 hours")
    if offset % timedelta(minutes=1):
        raise MalformedDateTimeError("UTC offset must be a whole number of minutes")
    return offset


def format_utc_offset(offset: timedelta) -> str:
    sign = "-" if offset < timedelta(0) else "+"
    total_minutes = abs(offset) // timedelta(minutes=1)
    hours, minutes = divmod(total_minutes, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


class TimezoneNormalizer:
    """Attaches a UTC offset to a wall-clock value without shifting it."""

    def normalize(self, wall_clock: str, utc_offset: timedelta | str) -> str:
        moment = parse_wall_clock(wall_clock)
        offset = parse_utc_offset(utc_offset)
        return f"{moment:%Y-%m-%dT%H:%M}:00{format_utc_offset(offset)}"

    def normalize_in_zone(self, wall_clock: str, zone: tzinfo | str) -> str:
        """Normalize using the offset ``zone`` has at that wall-clock moment."""
        moment = parse_wall_clock(wall_clock)
        resolved_zone = ZoneInfo(zone) if isinstance(zone, str) else zone
        offset = moment.replace(tzinfo=resolved_zone).utcoffset()
        if offset is None:
            raise MalformedDateTimeError(f"zone {zone!r} has no UTC offset")
        return self.normalize(wall_clock, offset)

    def normalize_datetime(self, moment: datetime, zone: tzinfo | str) -> str:
        return self.normalize_in_zone(f"{moment:%Y-%m-%dT%H:%M}", zone)
