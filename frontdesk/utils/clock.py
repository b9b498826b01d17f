"""Reference clock for calendar-day computations."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from frontdesk.utils.config import Settings, get_settings


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


class Clock:
    """Yields "today" in the hotel's reference time zone.

    ``FixedClock`` pins the calendar day.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._tz = resolve_timezone(self._settings.timezone_name)

    def now(self) -> datetime:
        return datetime.now(self._tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    def __init__(self, today: date) -> None:
        self._today = today
        self._tz = timezone.utc

    def now(self) -> datetime:
        return datetime(self._today.year, self._today.month, self._today.day, tzinfo=self._tz)

    def today(self) -> date:
        return self._today
