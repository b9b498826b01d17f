"""Front-desk workflows: registration, check-out, stay extension and billing.

Each workflow fetches a fresh snapshot from the repository, runs the pure
availability engine on it and then writes. Two operators acting on the same
rooms can still race between the check and the write: registration re-checks
availability on a fresh snapshot right before inserting, and stay extensions
are committed with an optimistic guard on the departure date they were quoted
against. A store-level exclusion constraint would be required to close the
window entirely.
"""

from __future__ import annotations

from datetime import date
from threading import RLock
from typing import Any, Optional, Sequence

from frontdesk.domain.constraints import InvalidRangeError, validate_date_range
from frontdesk.domain.models import (
    ACTIVE_BOOKING_STATUSES,
    BOOKING_CANCELLED,
    BOOKING_CHECKED_IN,
    BOOKING_STATUSES,
    ROOM_AVAILABLE,
    ROOM_MAINTENANCE,
    ROOM_STATUSES,
    BillSummary,
    Booking,
    Room,
    StayExtensionQuote,
)
from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.availability_service import (
    check_stay_extension,
    compute_calendar_occupancy,
    is_room_available,
    list_available_rooms,
    occupancy_percentage,
    room_number_sort_key,
    upcoming_bookings,
)
from frontdesk.services.billing_service import (
    calculate_bill_total,
    calculate_room_charges,
    next_grc_number,
)
from frontdesk.utils.clock import Clock
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


class FrontDeskError(Exception):
    """Base exception for front-desk workflow failures."""


class FrontDeskValidationError(FrontDeskError):
    """Raised when workflow inputs are invalid."""


class GuestNotFoundError(FrontDeskError):
    """Raised when a guest/booking id does not exist."""


class RoomNotFoundError(FrontDeskError):
    """Raised when a room number does not exist in the inventory."""


class DuplicateRoomError(FrontDeskError):
    """Raised when creating a room whose number is already taken."""


class RoomInUseError(FrontDeskError):
    """Raised when deleting a room still assigned to an active stay."""


class BookingConflictError(FrontDeskError):
    """Raised when requested rooms or dates clash with another stay."""

    def __init__(self, message: str, conflict: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.conflict = conflict


class StaleBookingError(FrontDeskError):
    """Raised when a stay changed between the snapshot and the write."""


def _quote_to_dict(quote: StayExtensionQuote) -> dict[str, Any]:
    return {
        "booking_id": quote.booking_id,
        "current_departure": quote.current_departure.isoformat(),
        "new_departure": quote.new_departure.isoformat(),
        "additional_nights": quote.additional_nights,
        "nightly_rate_per_room": round(quote.nightly_rate_per_room, 2),
        "additional_charge": quote.additional_charge,
        "new_total_charge": quote.new_total_charge,
        "is_extendable": quote.is_extendable,
        "conflict": quote.conflict.to_dict() if quote.conflict else None,
    }


def room_to_dict(room: Room) -> dict[str, Any]:
    return {
        "room_number": room.room_number,
        "room_type": room.room_type,
        "status": room.status,
        "floor": room.floor,
        "base_price": room.base_price,
    }


def booking_to_dict(booking: Booking) -> dict[str, Any]:
    return {
        "booking_id": booking.booking_id,
        "grc_number": booking.grc_number,
        "guest_name": booking.guest_name,
        "room_numbers": list(booking.room_numbers),
        "room_type": booking.room_type,
        "arrival_date": booking.arrival_date.isoformat() if booking.arrival_date else None,
        "departure_date": booking.departure_date.isoformat() if booking.departure_date else None,
        "status": booking.status,
        "total_room_charge": booking.total_room_charge,
        "advance_payment": booking.advance_payment,
    }


def bill_to_dict(bill: BillSummary) -> dict[str, Any]:
    return {
        "room_charges": bill.room_charges,
        "purchases_total": bill.purchases_total,
        "subtotal": bill.subtotal,
        "tax_percentage": bill.tax_percentage,
        "tax": bill.tax,
        "total": bill.total,
        "advance_payment": bill.advance_payment,
        "balance_due": bill.balance_due,
        "purchases": [
            {
                "purchase_id": item.purchase_id,
                "item_name": item.item_name,
                "category": item.category,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
            }
            for item in bill.purchases
        ],
    }


class FrontDeskService:
    """Coordinates snapshot -> availability engine -> persistence for the desk."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._clock = clock or Clock(self._settings)
        self._lock = RLock()

    @property
    def clock(self) -> Clock:
        return self._clock

    def _require_booking(self, booking_id: int) -> Booking:
        booking = self._repository.get_booking(booking_id)
        if booking is None:
            raise GuestNotFoundError(f"guest {booking_id} not found")
        return booking

    def _require_room(self, room_number: str) -> Room:
        room = self._repository.get_room(room_number)
        if room is None:
            raise RoomNotFoundError(f"room {room_number} not found")
        return room

    # --- Inventory ---

    def list_rooms(self) -> list[dict[str, Any]]:
        rooms = sorted(self._repository.list_rooms(), key=room_number_sort_key)
        return [room_to_dict(room) for room in rooms]

    def create_room(
        self,
        *,
        room_number: str,
        room_type: str,
        floor: int,
        base_price: float,
        status: str = ROOM_AVAILABLE,
    ) -> dict[str, Any]:
        normalized_number = room_number.strip()
        if not normalized_number:
            raise FrontDeskValidationError("room_number is required")
        if floor < 1:
            raise FrontDeskValidationError("floor must be a positive integer")
        if base_price < 0:
            raise FrontDeskValidationError("base_price must be a non-negative number")
        if status not in ROOM_STATUSES:
            raise FrontDeskValidationError(f"status must be one of {', '.join(ROOM_STATUSES)}")

        with self._lock:
            if self._repository.get_room(normalized_number) is not None:
                raise DuplicateRoomError(f"room number {normalized_number} already exists")
            room = Room(
                room_number=normalized_number,
                room_type=room_type.strip(),
                status=status,
                floor=floor,
                base_price=float(base_price),
            )
            self._repository.create_room(room)
        logger.info("Room created | room_number=%s | room_type=%s", room.room_number, room.room_type)
        return room_to_dict(room)

    def update_room_status(self, room_number: str, status: str) -> dict[str, Any]:
        if status not in ROOM_STATUSES:
            raise FrontDeskValidationError(f"status must be one of {', '.join(ROOM_STATUSES)}")
        self._require_room(room_number)
        self._repository.update_room_status([room_number], status)
        return room_to_dict(self._require_room(room_number))

    def delete_room(self, room_number: str) -> None:
        self._require_room(room_number)
        with self._lock:
            active_count = self._repository.count_active_bookings_for_room(room_number)
            if active_count > 0:
                raise RoomInUseError(
                    f"room {room_number} is assigned to {active_count} active booking(s)"
                )
            self._repository.delete_room(room_number)
        logger.info("Room deleted | room_number=%s", room_number)

    # --- Availability queries ---

    def check_room_availability(self, room_number: str, start: date, end: date) -> dict[str, Any]:
        validate_date_range(start, end)
        room = self._require_room(room_number)
        available = is_room_available(room, self._repository.list_bookings(), start, end)
        return {
            "room_number": room.room_number,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "available": available,
        }

    def find_available_rooms(
        self,
        start: date,
        end: date,
        room_type: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        validate_date_range(start, end)
        rooms = list_available_rooms(
            self._repository.list_rooms(),
            self._repository.list_bookings(),
            start,
            end,
            room_type=room_type,
        )
        return [room_to_dict(room) for room in rooms]

    def calendar_occupancy(self, start: date, end: date) -> dict[str, Any]:
        if start > end:
            raise InvalidRangeError(
                f"start date {start.isoformat()} must not be after end date {end.isoformat()}"
            )
        occupancy = compute_calendar_occupancy(self._repository.list_bookings(), start, end)
        total_rooms = len(self._repository.list_rooms())
        percentage = occupancy_percentage(occupancy, total_rooms)
        if percentage > 100:
            logger.warning(
                "Occupancy above inventory | start=%s | end=%s | percentage=%s",
                start.isoformat(),
                end.isoformat(),
                percentage,
            )
        return {
            "days": [
                {"date": day, "occupied_rooms": count}
                for day, count in occupancy.items()
            ],
            "total_rooms": total_rooms,
            "occupancy_percentage": percentage,
            "data_integrity_warning": percentage > 100,
        }

    def list_upcoming(self, days_from_now: Optional[int] = None) -> list[dict[str, Any]]:
        days = self._settings.upcoming_default_days if days_from_now is None else days_from_now
        if days < 0:
            raise FrontDeskValidationError("days must be >= 0")
        bookings = upcoming_bookings(
            self._repository.list_bookings(),
            days,
            today=self._clock.today(),
        )
        return [booking_to_dict(booking) for booking in bookings]

    # --- Guests ---

    def list_guests(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        if status is not None and status not in BOOKING_STATUSES:
            raise FrontDeskValidationError(
                f"status must be one of {', '.join(BOOKING_STATUSES)}"
            )
        term = search.strip() if search else None
        bookings = self._repository.list_guests(status=status, search=term or None)
        return [booking_to_dict(booking) for booking in bookings]

    def get_guest(self, booking_id: int) -> dict[str, Any]:
        return booking_to_dict(self._require_booking(booking_id))

    def register_guest(
        self,
        *,
        guest_name: str,
        room_numbers: Sequence[str],
        arrival_date: date,
        departure_date: date,
        advance_payment: float = 0.0,
    ) -> dict[str, Any]:
        if not guest_name.strip():
            raise FrontDeskValidationError("guest_name is required")
        selected = list(dict.fromkeys(number.strip() for number in room_numbers))
        if not selected:
            raise FrontDeskValidationError("select at least one room")
        validate_date_range(arrival_date, departure_date)

        with self._lock:
            rooms = [self._require_room(number) for number in selected]
            bookings = self._repository.list_bookings()
            for room in rooms:
                if room.status == ROOM_MAINTENANCE:
                    raise BookingConflictError(f"room {room.room_number} is under maintenance")
                if not is_room_available(room, bookings, arrival_date, departure_date):
                    raise BookingConflictError(
                        f"room {room.room_number} is already booked between "
                        f"{arrival_date.isoformat()} and {departure_date.isoformat()}"
                    )

            today = self._clock.today()
            grc_prefix = f"{self._settings.grc_prefix}-{today.strftime('%Y%m%d')}-"
            grc_number = next_grc_number(
                self._repository.list_grc_numbers(grc_prefix),
                today,
                prefix=self._settings.grc_prefix,
            )
            room_charge = calculate_room_charges(
                arrival_date,
                departure_date,
                len(rooms),
                rooms[0].base_price,
            )
            booking_id = self._repository.register_booking(
                grc_number=grc_number,
                guest_name=guest_name.strip(),
                room_numbers=selected,
                room_type=rooms[0].room_type,
                arrival_date=arrival_date,
                departure_date=departure_date,
                status=BOOKING_CHECKED_IN,
                total_room_charge=room_charge,
                advance_payment=float(advance_payment),
                created_on=today,
            )
        logger.info(
            "Guest registered | booking_id=%s | grc_number=%s | rooms=%s | arrival=%s | departure=%s",
            booking_id,
            grc_number,
            ",".join(selected),
            arrival_date.isoformat(),
            departure_date.isoformat(),
        )
        return booking_to_dict(self._require_booking(booking_id))

    def check_out(self, booking_id: int) -> dict[str, Any]:
        with self._lock:
            booking = self._require_booking(booking_id)
            if booking.status != BOOKING_CHECKED_IN:
                raise FrontDeskValidationError(
                    f"guest {booking_id} is {booking.status}; only checked-in guests can check out"
                )
            self._repository.check_out_booking(booking_id, booking.room_numbers)
        logger.info("Guest checked out | booking_id=%s", booking_id)
        return booking_to_dict(self._require_booking(booking_id))

    # --- Stay extension ---

    def preview_extension(self, booking_id: int, new_departure: date) -> dict[str, Any]:
        booking = self._require_booking(booking_id)
        quote = check_stay_extension(booking, self._repository.list_bookings(), new_departure)
        return _quote_to_dict(quote)

    def apply_extension(self, booking_id: int, new_departure: date) -> dict[str, Any]:
        with self._lock:
            booking = self._require_booking(booking_id)
            if booking.status not in ACTIVE_BOOKING_STATUSES:
                raise FrontDeskValidationError(
                    f"guest {booking_id} is {booking.status}; only active stays can be extended"
                )
            quote = check_stay_extension(booking, self._repository.list_bookings(), new_departure)
            if quote.conflict is not None:
                conflict = quote.conflict
                raise BookingConflictError(
                    (
                        f"room {conflict.room_number} is booked by {conflict.guest_name} "
                        f"from {conflict.arrival_date.isoformat()} to "
                        f"{conflict.departure_date.isoformat()}"
                    ),
                    conflict=conflict.to_dict(),
                )
            committed = self._repository.update_booking_departure(
                booking_id,
                expected_departure=quote.current_departure,
                new_departure=quote.new_departure,
                new_total_room_charge=quote.new_total_charge,
            )
            if not committed:
                raise StaleBookingError(
                    f"guest {booking_id} changed since the extension was quoted; reload and retry"
                )
        logger.info(
            "Stay extended | booking_id=%s | departure=%s | additional_nights=%s | additional_charge=%.2f",
            booking_id,
            quote.new_departure.isoformat(),
            quote.additional_nights,
            quote.additional_charge,
        )
        return _quote_to_dict(quote)

    # --- Purchases & billing ---

    def add_purchase(
        self,
        booking_id: int,
        *,
        item_name: str,
        category: str,
        quantity: int,
        unit_price: float,
    ) -> dict[str, Any]:
        self._require_booking(booking_id)
        if not item_name.strip():
            raise FrontDeskValidationError("item_name is required")
        if quantity <= 0:
            raise FrontDeskValidationError("quantity must be > 0")
        if unit_price < 0:
            raise FrontDeskValidationError("unit_price must be >= 0")
        purchase_id = self._repository.add_purchase(
            booking_id,
            item_name.strip(),
            category,
            quantity,
            unit_price,
        )
        return self.get_bill(booking_id) | {"purchase_id": purchase_id}

    def delete_purchase(self, booking_id: int, purchase_id: int) -> dict[str, Any]:
        self._require_booking(booking_id)
        if not self._repository.delete_purchase(booking_id, purchase_id):
            raise GuestNotFoundError(f"purchase {purchase_id} not found for guest {booking_id}")
        return self.get_bill(booking_id)

    def get_bill(self, booking_id: int) -> dict[str, Any]:
        booking = self._require_booking(booking_id)
        bill = calculate_bill_total(
            booking.total_room_charge,
            self._repository.list_purchases(booking_id),
            self._settings.tax_percentage,
            booking.advance_payment,
        )
        return {
            "booking_id": booking.booking_id,
            "grc_number": booking.grc_number,
            "currency": self._settings.currency,
            **bill_to_dict(bill),
        }

    # --- Dashboard ---

    def dashboard_summary(self) -> dict[str, Any]:
        today = self._clock.today()
        rooms = self._repository.list_rooms()
        bookings = self._repository.list_bookings()

        checked_in = [booking for booking in bookings if booking.status == BOOKING_CHECKED_IN]
        pending_checkouts = [
            booking
            for booking in checked_in
            if booking.departure_date is not None and booking.departure_date <= today
        ]
        room_revenue = sum(
            booking.total_room_charge for booking in bookings if booking.status != BOOKING_CANCELLED
        )
        purchases_revenue = self._repository.get_purchases_revenue()
        occupancy_today = occupancy_percentage(
            compute_calendar_occupancy(bookings, today, today),
            len(rooms),
        )

        return {
            "date": today.isoformat(),
            "current_guests": len(checked_in),
            "pending_checkouts": len(pending_checkouts),
            "available_rooms": sum(1 for room in rooms if room.status == ROOM_AVAILABLE),
            "total_rooms": len(rooms),
            "room_revenue": round(room_revenue, 2),
            "purchases_revenue": round(purchases_revenue, 2),
            "total_revenue": round(room_revenue + purchases_revenue, 2),
            "advance_payments_collected": round(
                sum(booking.advance_payment for booking in bookings), 2
            ),
            "upcoming_reservations": len(
                upcoming_bookings(bookings, self._settings.upcoming_default_days, today=today)
            ),
            "occupancy_today": occupancy_today,
        }
