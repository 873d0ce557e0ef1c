#!/usr/bin/env python3
"""Self-check that this machine can run the reservation engine.

Runs each check against a throwaway database and prints one PASS/FAIL line
per check. Exit status is 0 only when every check passes.
"""

from __future__ import annotations

import importlib
import sys
import tempfile
from dataclasses import replace
from datetime import date, timedelta
from pathlib import Path
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from condo_reservations.repository.data_repository import DataRepository
from condo_reservations.services.reservation_service import ReservationService
from condo_reservations.utils.config import Settings, get_settings

SEPARATOR_LINE = "=" * 44
REQUIRED_MODULES = ("fastapi", "uvicorn", "pydantic", "httpx", "pytest")

Check = Callable[[], str]


class CheckFailed(Exception):
    pass


def check_python() -> str:
    found = sys.version.split()[0]
    if sys.version_info < (3, 10):
        raise CheckFailed(f"Python 3.10+ required, found {found}")
    return found


def check_modules() -> str:
    missing = []
    for module_name in REQUIRED_MODULES:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            missing.append(f"{module_name} ({exc})")
    if missing:
        raise CheckFailed("not importable: " + "; ".join(missing))
    return ", ".join(REQUIRED_MODULES)


def check_timezone(settings: Settings) -> str:
    try:
        ZoneInfo(settings.timezone_name)
    except ZoneInfoNotFoundError as exc:
        raise CheckFailed(f"unknown zone {settings.timezone_name!r}") from exc
    return settings.timezone_name


def check_store(repository: DataRepository) -> str:
    try:
        repository.initialize_database()
        seeded = repository.seed_demo_spaces_if_empty()
    except RuntimeError as exc:
        raise CheckFailed(str(exc)) from exc
    if seeded <= 0:
        raise CheckFailed("demo seed inserted no spaces")
    return f"{seeded} demo spaces"


def check_slots(service: ReservationService) -> str:
    spaces = service.list_spaces()
    if not spaces:
        raise CheckFailed("no active spaces to compute")
    space = spaces[0]
    start = date.today()
    open_days = sum(
        1
        for offset in range(7)
        if service.compute_slots(space.space_id, start + timedelta(days=offset))
    )
    return f"{space.name} open {open_days}/7 days"


def run_checks(checks: list[tuple[str, Check]]) -> tuple[bool, list[str]]:
    lines: list[str] = []
    all_passed = True
    for name, check in checks:
        try:
            lines.append(f"[PASS] {name}: {check()}")
        except CheckFailed as exc:
            all_passed = False
            lines.append(f"[FAIL] {name}: {exc}")
    return all_passed, lines


def main() -> int:
    settings = get_settings()
    with tempfile.TemporaryDirectory(prefix="condo-reservations-env-") as temp_dir:
        scratch = replace(settings, database_path=Path(temp_dir) / "validation.db")
        repository = DataRepository(scratch)
        all_passed, lines = run_checks(
            [
                ("Python", check_python),
                ("Packages", check_modules),
                ("Timezone", lambda: check_timezone(scratch)),
                ("Booking store", lambda: check_store(repository)),
                (
                    "Slot computation",
                    lambda: check_slots(
                        ReservationService(repository=repository, settings=scratch)
                    ),
                ),
            ]
        )

    print(SEPARATOR_LINE)
    print(" Reservation Engine Environment Validation")
    print(SEPARATOR_LINE)
    for line in lines:
        print(f" {line}")
    print(SEPARATOR_LINE)
    print(" Environment is ready." if all_passed else " One or more checks failed.")
    print(SEPARATOR_LINE)
    return 0 if all_passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
