"""Room availability, calendar occupancy and stay-extension conflict checks.

Every function here is pure: it reads the room and booking snapshots it is
given, never mutates them, and performs no I/O. Fetching snapshots and
persisting outcomes is the caller's job, which means a check followed by a
write is only as fresh as the snapshot it ran on (see ``FrontDeskService``).
"""

from __future__ import annotations

import math
import re
from datetime import date, timedelta
from typing import Any, Callable, Iterable, Optional, Sequence

from frontdesk.domain.constraints import (
    InvalidRangeError,
    is_well_formed_booking,
    require_well_formed_booking,
)
from frontdesk.domain.models import (
    BOOKING_CANCELLED,
    BOOKING_CHECKED_OUT,
    ROOM_MAINTENANCE,
    Booking,
    ExtensionConflict,
    Room,
    StayExtensionQuote,
)


_DIGIT_RUN = re.compile(r"(\d+)")


def ranges_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    """Half-open overlap test; touching ranges (same-day turnover) do not overlap."""
    return start < other_end and end > other_start


def blocks_availability(booking: Booking) -> bool:
    """Whether a booking still holds its rooms for forward availability."""
    return booking.status not in (BOOKING_CANCELLED, BOOKING_CHECKED_OUT)


def counts_for_occupancy(booking: Booking) -> bool:
    """Whether a booking counts in calendar occupancy reporting."""
    return booking.status != BOOKING_CANCELLED


def room_number_sort_key(room: Room) -> tuple[tuple[int, int, str], ...]:
    """Numeric-aware ordering: "2" < "10" and "101" < "101A"."""
    parts = []
    for chunk in _DIGIT_RUN.split(room.room_number.strip()):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk), ""))
        else:
            parts.append((1, 0, chunk.lower()))
    return tuple(parts)


def _blocking_bookings(bookings: Iterable[Booking]) -> list[Booking]:
    return [
        booking
        for booking in bookings
        if blocks_availability(booking) and is_well_formed_booking(booking)
    ]


def is_room_available(
    room: Room,
    bookings: Iterable[Booking],
    start: date,
    end: date,
) -> bool:
    if room.status == ROOM_MAINTENANCE:
        return False
    if start >= end:
        return False

    for booking in _blocking_bookings(bookings):
        if room.room_number not in booking.room_numbers:
            continue
        if ranges_overlap(start, end, booking.arrival_date, booking.departure_date):
            return False
    return True


def occupied_room_numbers(
    bookings: Iterable[Booking],
    start: date,
    end: date,
) -> set[str]:
    """Union of rooms held by blocking bookings overlapping ``[start, end)``."""
    occupied: set[str] = set()
    if start >= end:
        return occupied
    for booking in _blocking_bookings(bookings):
        if ranges_overlap(start, end, booking.arrival_date, booking.departure_date):
            occupied.update(booking.room_numbers)
    return occupied


def list_available_rooms(
    rooms: Iterable[Room],
    bookings: Iterable[Booking],
    start: date,
    end: date,
    room_type: Optional[str] = None,
    sort_key: Callable[[Room], Any] = room_number_sort_key,
) -> list[Room]:
    """Rooms free for the whole of ``[start, end)``.

    An empty or inverted range yields an empty list rather than an error; the
    workflow layer rejects such ranges before calling in.
    """
    if start >= end:
        return []

    occupied = occupied_room_numbers(bookings, start, end)
    available = [
        room
        for room in rooms
        if (room_type is None or room.room_type == room_type)
        and room.status != ROOM_MAINTENANCE
        and room.room_number not in occupied
    ]
    return sorted(available, key=sort_key)


def compute_calendar_occupancy(
    bookings: Iterable[Booking],
    start: date,
    end: date,
) -> dict[str, int]:
    """Occupied-room count per day for every day of ``[start, end]`` inclusive."""
    if start > end:
        return {}

    reportable = [
        booking
        for booking in bookings
        if counts_for_occupancy(booking) and is_well_formed_booking(booking)
    ]

    occupancy: dict[str, int] = {}
    day = start
    while day <= end:
        rooms_on_day: set[str] = set()
        for booking in reportable:
            if booking.arrival_date <= day < booking.departure_date:
                rooms_on_day.update(booking.room_numbers)
        occupancy[day.isoformat()] = len(rooms_on_day)
        day += timedelta(days=1)
    return occupancy


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def occupancy_percentage(occupancy_map: dict[str, int], total_room_count: int) -> int:
    """Average daily occupancy as a whole percentage.

    Results above 100 are returned as-is: they mean the snapshot is
    overbooked.
    """
    if total_room_count <= 0 or not occupancy_map:
        return 0
    average_occupied = sum(occupancy_map.values()) / len(occupancy_map)
    return _round_half_up(average_occupied / total_room_count * 100)


def upcoming_bookings(
    bookings: Iterable[Booking],
    days_from_now: int,
    *,
    today: date,
) -> list[Booking]:
    if days_from_now < 0:
        return []
    horizon = today + timedelta(days=days_from_now)
    selected = [
        booking
        for booking in bookings
        if booking.status != BOOKING_CANCELLED
        and booking.arrival_date is not None
        and today <= booking.arrival_date <= horizon
    ]
    return sorted(selected, key=lambda booking: (booking.arrival_date, booking.booking_id))


def find_extension_conflict(
    booking: Booking,
    bookings: Sequence[Booking],
    new_departure: date,
) -> Optional[ExtensionConflict]:
    window_start = booking.departure_date
    others = sorted(
        (
            other
            for other in _blocking_bookings(bookings)
            if other.booking_id != booking.booking_id
        ),
        key=lambda other: (other.arrival_date, other.booking_id),
    )
    for room_number in booking.room_numbers:
        for other in others:
            if room_number not in other.room_numbers:
                continue
            if ranges_overlap(window_start, new_departure, other.arrival_date, other.departure_date):
                return ExtensionConflict(
                    room_number=room_number,
                    booking_id=other.booking_id,
                    guest_name=other.guest_name,
                    grc_number=other.grc_number,
                    arrival_date=other.arrival_date,
                    departure_date=other.departure_date,
                )
    return None


def check_stay_extension(
    booking: Booking,
    bookings: Sequence[Booking],
    new_departure: date,
) -> StayExtensionQuote:
    """Quote extending ``booking`` to ``new_departure``.

    The nightly rate is implied from the booking's current total so manual
    rate overrides carry over to the extra nights. A conflict is reported, not
    resolved.
    """
    require_well_formed_booking(booking)
    current_departure = booking.departure_date
    if new_departure <= current_departure:
        raise InvalidRangeError(
            f"new departure {new_departure.isoformat()} must be after the current "
            f"departure {current_departure.isoformat()}"
        )

    additional_nights = (new_departure - current_departure).days
    room_count = len(booking.room_numbers)
    nightly_rate_per_room = booking.total_room_charge / booking.nights / room_count
    additional_charge = round(nightly_rate_per_room * additional_nights * room_count, 2)

    return StayExtensionQuote(
        booking_id=booking.booking_id,
        current_departure=current_departure,
        new_departure=new_departure,
        additional_nights=additional_nights,
        nightly_rate_per_room=nightly_rate_per_room,
        additional_charge=additional_charge,
        new_total_charge=round(booking.total_room_charge + additional_charge, 2),
        conflict=find_extension_conflict(booking, bookings, new_departure),
    )
