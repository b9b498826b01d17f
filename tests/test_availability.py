"""Tests for room availability and available-room listing."""

from __future__ import annotations

import functools
from datetime import date

from frontdesk.domain.models import Booking, Room
from frontdesk.services.availability_service import (
    is_room_available,
    list_available_rooms,
    occupied_room_numbers,
    ranges_overlap,
    room_number_sort_key,
)


JAN_10 = date(2024, 1, 10)
JAN_11 = date(2024, 1, 11)
JAN_12 = date(2024, 1, 12)
JAN_13 = date(2024, 1, 13)
JAN_14 = date(2024, 1, 14)


def _booking(
    booking_id: int,
    rooms: tuple[str, ...],
    arrival: date | None,
    departure: date | None,
    status: str = "checked_in",
) -> Booking:
    return Booking(
        booking_id=booking_id,
        room_numbers=rooms,
        arrival_date=arrival,
        departure_date=departure,
        status=status,
        guest_name=f"Guest {booking_id}",
    )


def test_ranges_overlap_is_half_open() -> None:
    assert ranges_overlap(JAN_11, JAN_13, JAN_10, JAN_12)
    assert not ranges_overlap(JAN_12, JAN_14, JAN_10, JAN_12)
    assert not ranges_overlap(JAN_10, JAN_12, JAN_12, JAN_14)
    assert ranges_overlap(JAN_10, JAN_14, JAN_11, JAN_12)


def test_turnover_day_scenario() -> None:
    room = Room(room_number="101", room_type="DBL", status="available")
    bookings = [_booking(1, ("101",), JAN_10, JAN_12)]

    assert is_room_available(room, bookings, JAN_12, JAN_14) is True
    assert is_room_available(room, bookings, JAN_11, JAN_13) is False


def test_booking_starting_at_requested_end_does_not_block() -> None:
    room = Room(room_number="101", room_type="DBL")
    bookings = [_booking(1, ("101",), JAN_12, JAN_14)]

    assert is_room_available(room, bookings, JAN_10, JAN_12) is True


def test_room_without_bookings_is_available() -> None:
    room = Room(room_number="101", room_type="DBL")
    other_room_booking = [_booking(1, ("102",), JAN_10, JAN_14)]

    assert is_room_available(room, [], JAN_10, JAN_12) is True
    assert is_room_available(room, other_room_booking, JAN_10, JAN_12) is True


def test_maintenance_room_is_never_available() -> None:
    room = Room(room_number="101", room_type="DBL", status="maintenance")
    assert is_room_available(room, [], JAN_10, JAN_12) is False


def test_occupied_status_alone_does_not_block() -> None:
    room = Room(room_number="101", room_type="DBL", status="occupied")
    assert is_room_available(room, [], JAN_10, JAN_12) is True


def test_cancelled_and_checked_out_bookings_do_not_block() -> None:
    room = Room(room_number="101", room_type="DBL")
    bookings = [
        _booking(1, ("101",), JAN_10, JAN_14, status="cancelled"),
        _booking(2, ("101",), JAN_10, JAN_14, status="checked_out"),
    ]
    assert is_room_available(room, bookings, JAN_11, JAN_13) is True


def test_reserved_booking_blocks() -> None:
    room = Room(room_number="101", room_type="DBL")
    bookings = [_booking(1, ("101",), JAN_11, JAN_13, status="reserved")]
    assert is_room_available(room, bookings, JAN_10, JAN_14) is False


def test_malformed_bookings_are_ignored() -> None:
    room = Room(room_number="101", room_type="DBL")
    bookings = [
        _booking(1, ("101",), JAN_10, None),
        _booking(2, ("101",), JAN_12, JAN_10),
        _booking(3, (), JAN_10, JAN_14),
    ]
    assert is_room_available(room, bookings, JAN_10, JAN_14) is True


def test_multi_room_booking_blocks_each_room() -> None:
    bookings = [_booking(1, ("101", "102"), JAN_10, JAN_12)]
    for number in ("101", "102"):
        assert is_room_available(Room(number, "DBL"), bookings, JAN_10, JAN_11) is False
    assert is_room_available(Room("103", "DBL"), bookings, JAN_10, JAN_11) is True


def test_list_available_rooms_excludes_maintenance_and_booked() -> None:
    rooms = [
        Room("101", "DBL"),
        Room("102", "DBL", status="maintenance"),
        Room("103", "SGL"),
        Room("104", "DBL", status="occupied"),
    ]
    bookings = [_booking(1, ("101",), JAN_10, JAN_12)]

    available = list_available_rooms(rooms, bookings, JAN_11, JAN_13)
    assert [room.room_number for room in available] == ["103", "104"]


def test_list_available_rooms_filters_room_type() -> None:
    rooms = [Room("101", "DBL"), Room("103", "SGL"), Room("104", "DBL")]
    available = list_available_rooms(rooms, [], JAN_10, JAN_12, room_type="DBL")
    assert [room.room_number for room in available] == ["101", "104"]


def test_list_available_rooms_never_returns_maintenance() -> None:
    rooms = [Room(str(number), "DBL", status="maintenance") for number in range(1, 6)]
    assert list_available_rooms(rooms, [], JAN_10, JAN_12) == []


def test_list_available_rooms_orders_room_numbers_numerically() -> None:
    rooms = [Room("10", "DBL"), Room("2", "DBL"), Room("101A", "DBL"), Room("101", "DBL")]
    available = list_available_rooms(rooms, [], JAN_10, JAN_12)
    assert [room.room_number for room in available] == ["2", "10", "101", "101A"]


def test_list_available_rooms_accepts_caller_comparator() -> None:
    rooms = [Room("2", "DBL"), Room("10", "DBL"), Room("3", "DBL")]

    def descending(left: Room, right: Room) -> int:
        return int(right.room_number) - int(left.room_number)

    available = list_available_rooms(
        rooms,
        [],
        JAN_10,
        JAN_12,
        sort_key=functools.cmp_to_key(descending),
    )
    assert [room.room_number for room in available] == ["10", "3", "2"]


def test_invalid_range_yields_empty_result_instead_of_raising() -> None:
    """Inverted or empty ranges return nothing; the engine never raises for them."""
    rooms = [Room("101", "DBL")]

    assert list_available_rooms(rooms, [], JAN_12, JAN_10) == []
    assert list_available_rooms(rooms, [], JAN_12, JAN_12) == []
    assert is_room_available(rooms[0], [], JAN_12, JAN_12) is False
    assert occupied_room_numbers([], JAN_12, JAN_10) == set()


def test_batch_listing_matches_per_room_check() -> None:
    rooms = [Room(str(number), "DBL") for number in range(101, 109)]
    rooms.append(Room("109", "SGL", status="maintenance"))
    bookings = [
        _booking(1, ("101", "102"), JAN_10, JAN_12),
        _booking(2, ("103",), JAN_12, JAN_14),
        _booking(3, ("104",), JAN_11, JAN_13, status="cancelled"),
        _booking(4, ("105",), JAN_13, JAN_14, status="reserved"),
        _booking(5, ("106",), JAN_10, JAN_11, status="checked_out"),
        _booking(6, ("107",), JAN_13, JAN_11),
    ]
    windows = [(JAN_10, JAN_11), (JAN_11, JAN_12), (JAN_12, JAN_14), (JAN_10, JAN_14)]

    for start, end in windows:
        batch = {room.room_number for room in list_available_rooms(rooms, bookings, start, end)}
        single = {
            room.room_number
            for room in rooms
            if is_room_available(room, bookings, start, end)
        }
        assert batch == single


def test_engine_does_not_mutate_inputs() -> None:
    rooms = [Room("2", "DBL"), Room("1", "DBL")]
    bookings = [_booking(1, ("1",), JAN_10, JAN_12)]
    rooms_before = list(rooms)
    bookings_before = list(bookings)

    list_available_rooms(rooms, bookings, JAN_10, JAN_14)

    assert rooms == rooms_before
    assert bookings == bookings_before


def test_room_number_sort_key_handles_prefixes() -> None:
    rooms = [Room("B10", "DBL"), Room("B2", "DBL"), Room("A3", "DBL")]
    ordered = sorted(rooms, key=room_number_sort_key)
    assert [room.room_number for room in ordered] == ["A3", "B2", "B10"]
