"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


ENV_PREFIX = "CONDO_RESERVATIONS_"


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_tuple(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    return tuple(item.strip().upper() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    database_path: Path
    log_level: str
    timezone_name: str
    slot_granularity_minutes: int
    inclusive_overlap_boundaries: bool
    blocking_statuses: tuple[str, ...]
    seed_demo_data: bool
    host: str
    port: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process; call ``get_settings.cache_clear()`` to reload."""
    return Settings(
        app_name=_env("APP_NAME", "Condo Reservations"),
        app_version=_env("APP_VERSION", "1.0.0"),
        database_path=Path(_env("DATABASE_PATH", "data/condo_reservations.db")),
        log_level=_env("LOG_LEVEL", "INFO"),
        timezone_name=_env("TIMEZONE", "America/Bogota"),
        slot_granularity_minutes=int(_env("SLOT_GRANULARITY_MINUTES", "30")),
        inclusive_overlap_boundaries=_env_bool("INCLUSIVE_OVERLAP_BOUNDARIES", True),
        blocking_statuses=_env_tuple(
            "BLOCKING_STATUSES",
            ("PENDING", "CONFIRMED", "COMPLETED"),
        ),
        seed_demo_data=_env_bool("SEED_DEMO_DATA", True),
        host=_env("HOST", "127.0.0.1"),
        port=int(_env("PORT", "8000")),
    )
