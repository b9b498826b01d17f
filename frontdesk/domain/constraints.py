"""Domain-level validation rules for date ranges and booking snapshots."""

from __future__ import annotations

from datetime import date
from typing import Optional

from frontdesk.domain.models import Booking


class InvalidRangeError(ValueError):
    """Raised when a date range does not satisfy ``start < end``."""


class MalformedBookingError(ValueError):
    """Raised when a single booking handed in by a caller is unusable."""


def parse_iso_date(value: object) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` value without any timezone interpretation.

    Returns None for missing or unparseable input; datetime strings keep only
    their calendar part.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def validate_date_range(start: date, end: date) -> None:
    if start >= end:
        raise InvalidRangeError(
            f"start date {start.isoformat()} must be before end date {end.isoformat()}"
        )


def is_well_formed_booking(booking: Booking) -> bool:
    if not booking.room_numbers:
        return False
    if booking.arrival_date is None or booking.departure_date is None:
        return False
    return booking.departure_date > booking.arrival_date


def require_well_formed_booking(booking: Booking) -> None:
    if not booking.room_numbers:
        raise MalformedBookingError(f"booking {booking.booking_id} has no rooms assigned")
    if booking.arrival_date is None or booking.departure_date is None:
        raise MalformedBookingError(f"booking {booking.booking_id} is missing stay dates")
    if booking.departure_date <= booking.arrival_date:
        raise MalformedBookingError(
            f"booking {booking.booking_id} departs on or before its arrival date"
        )
