"""Tests for engine configuration validation.

Covers every branch in validate_engine_config() and log level resolution.
"""

from __future__ import annotations

import pytest

from condo_reservations.domain.constraints import EngineConfig, validate_engine_config
from condo_reservations.utils.logger import resolve_level


def valid_config(**overrides) -> EngineConfig:
    """Return a valid baseline EngineConfig, optionally overriding fields."""
    defaults = {
        "slot_granularity_minutes": 30,
        "inclusive_overlap_boundaries": True,
        "blocking_statuses": ("PENDING", "CONFIRMED", "COMPLETED"),
    }
    defaults.update(overrides)
    return EngineConfig(**defaults)


# --- Baseline pass ---

def test_valid_config_passes() -> None:
    """A fully valid config must not raise."""
    validate_engine_config(valid_config())


# --- slot_granularity_minutes ---

def test_granularity_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_engine_config(valid_config(slot_granularity_minutes=0))


def test_granularity_negative_raises() -> None:
    with pytest.raises(ValueError):
        validate_engine_config(valid_config(slot_granularity_minutes=-30))


def test_granularity_not_dividing_day_raises() -> None:
    with pytest.raises(ValueError):
        validate_engine_config(valid_config(slot_granularity_minutes=7))


@pytest.mark.parametrize("minutes", [15, 20, 60, 120])
def test_granularity_dividing_day_passes(minutes: int) -> None:
    validate_engine_config(valid_config(slot_granularity_minutes=minutes))


# --- blocking_statuses ---

def test_unknown_blocking_status_raises() -> None:
    with pytest.raises(ValueError):
        validate_engine_config(valid_config(blocking_statuses=("CONFIRMED", "ON_HOLD")))


def test_cancelled_blocking_status_raises() -> None:
    with pytest.raises(ValueError):
        validate_engine_config(valid_config(blocking_statuses=("CONFIRMED", "CANCELLED")))


def test_empty_blocking_statuses_passes() -> None:
    """Nothing blocks: every reservation is ignored by occupancy."""
    validate_engine_config(valid_config(blocking_statuses=()))


# --- log level ---

@pytest.mark.parametrize("name,expected", [("info", 20), ("DEBUG", 10), (" warning ", 30)])
def test_log_level_names_resolve(name: str, expected: int) -> None:
    assert resolve_level(name) == expected


def test_unknown_log_level_raises() -> None:
    with pytest.raises(ValueError):
        resolve_level("chatty")
