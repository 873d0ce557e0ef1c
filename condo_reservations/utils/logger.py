"""Process-wide logging for the reservation engine and its HTTP server."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from condo_reservations.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Server loggers re-routed through the root handler so every line shares one format.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_configured_level: Optional[int] = None


def resolve_level(level: str) -> int:
    """Map a level name such as ``"info"`` to its numeric value."""
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(level: Optional[str] = None) -> int:
    """Configure logging once; later calls return the level already in effect."""
    global _configured_level
    if _configured_level is not None:
        return _configured_level

    numeric_level = resolve_level(level or get_settings().log_level)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, stream=sys.stdout)
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    _configured_level = numeric_level
    return numeric_level


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
