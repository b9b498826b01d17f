#!/usr/bin/env python3
"""Validate local front desk service environment readiness."""

from __future__ import annotations

import importlib
from importlib.metadata import version
import shutil
import sqlite3
import sys
import tempfile
from dataclasses import replace
from datetime import timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.availability_service import (
    compute_calendar_occupancy,
    list_available_rooms,
    occupancy_percentage,
)
from frontdesk.utils.clock import Clock
from frontdesk.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="frontdesk-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("pandas", "pandas"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Reference time zone resolves
    clock = None
    try:
        clock = Clock(get_settings())
        ok, line = _print_result(
            "Reference clock",
            True,
            f": {get_settings().timezone_name} today={clock.today().isoformat()}",
        )
    except Exception as exc:
        ok, line = _print_result("Reference clock", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    try:
        temp_db_path = Path(temp_dir) / "frontdesk_validation.db"
        validation_settings = replace(get_settings(), database_path=temp_db_path)
        repository = DataRepository(validation_settings)

        # CHECK 4: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Demo property seeding (12 rooms)
        today = clock.today() if clock is not None else None
        try:
            if today is None:
                raise RuntimeError("reference clock unavailable")
            repository.seed_demo_data(today=today)
            with sqlite3.connect(temp_db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) FROM Rooms;")
                seeded_rooms = int(cursor.fetchone()[0])
            if seeded_rooms != 12:
                raise RuntimeError(f"expected 12 rooms, got {seeded_rooms}")
            ok, line = _print_result("Demo property: 12 rooms", True)
        except Exception as exc:
            ok, line = _print_result("Demo property", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 6: Availability engine over the seeded snapshot
        try:
            if today is None:
                raise RuntimeError("reference clock unavailable")
            rooms = repository.list_rooms()
            bookings = repository.list_bookings()
            free_rooms = list_available_rooms(rooms, bookings, today, today + timedelta(days=1))
            occupancy = compute_calendar_occupancy(bookings, today, today + timedelta(days=6))
            percentage = occupancy_percentage(occupancy, len(rooms))
            ok, line = _print_result(
                "Availability engine",
                True,
                f": free_tonight={len(free_rooms)} week_occupancy={percentage}%",
            )
        except Exception as exc:
            ok, line = _print_result("Availability engine", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Front Desk Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
