"""Domain-level validation rules for the availability engine."""

from __future__ import annotations

from dataclasses import dataclass

from condo_reservations.domain.models import ReservationStatus


MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class EngineConfig:
    slot_granularity_minutes: int
    inclusive_overlap_boundaries: bool
    blocking_statuses: tuple[str, ...]


def validate_engine_config(config: EngineConfig) -> None:
    if config.slot_granularity_minutes <= 0:
        raise ValueError("slot_granularity_minutes must be > 0")
    if MINUTES_PER_DAY % config.slot_granularity_minutes != 0:
        raise ValueError("slot_granularity_minutes must divide a day evenly")
    known_statuses = {status.value for status in ReservationStatus}
    for status in config.blocking_statuses:
        if status not in known_statuses:
            raise ValueError(f"blocking status {status!r} is not a reservation status")
    if ReservationStatus.CANCELLED.value in config.blocking_statuses:
        raise ValueError("cancelled reservations cannot block a slot")
