"""
Server launcher and entry point.

Run this file to start the reservation API:

    python main.py

This file does NOT contain application logic. See
condo_reservations/main.py for the FastAPI application, service wiring, and
startup sequence.

Direct uvicorn usage:
    uvicorn condo_reservations.main:app --reload
"""

from __future__ import annotations

import uvicorn

from condo_reservations.utils.config import get_settings


def main() -> None:
    """Start the reservation API server."""
    settings = get_settings()
    print("=" * 60)
    print(f"  {settings.app_name} v{settings.app_version}")
    print("=" * 60)
    print(f"  Server   : http://{settings.host}:{settings.port}")
    print(f"  API docs : http://{settings.host}:{settings.port}/docs")
    print(f"  Timezone : {settings.timezone_name}")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    uvicorn.run(
        "condo_reservations.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
