from __future__ import annotations

from dataclasses import replace
from datetime import date, timezone

from frontdesk.utils.clock import Clock, FixedClock, resolve_timezone
from frontdesk.utils.config import get_settings


def test_utc_resolves_to_fixed_offset() -> None:
    assert resolve_timezone("UTC") is timezone.utc
    assert resolve_timezone("utc") is timezone.utc


def test_named_zone_resolves() -> None:
    zone = resolve_timezone("Asia/Colombo")
    assert str(zone) == "Asia/Colombo"


def test_clock_reports_aware_now() -> None:
    get_settings.cache_clear()
    clock = Clock(replace(get_settings(), timezone_name="UTC"))
    assert clock.now().tzinfo is timezone.utc
    assert clock.today() == clock.now().date()


def test_fixed_clock_pins_today() -> None:
    clock = FixedClock(date(2024, 2, 29))
    assert clock.today() == date(2024, 2, 29)
    assert clock.now().date() == date(2024, 2, 29)
