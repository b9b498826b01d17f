"""Domain records for rooms, guest stays, purchases and derived results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


ROOM_AVAILABLE = "available"
ROOM_OCCUPIED = "occupied"
ROOM_MAINTENANCE = "maintenance"
ROOM_STATUSES = (ROOM_AVAILABLE, ROOM_OCCUPIED, ROOM_MAINTENANCE)

BOOKING_RESERVED = "reserved"
BOOKING_CHECKED_IN = "checked_in"
BOOKING_CHECKED_OUT = "checked_out"
BOOKING_CANCELLED = "cancelled"
BOOKING_STATUSES = (
    BOOKING_RESERVED,
    BOOKING_CHECKED_IN,
    BOOKING_CHECKED_OUT,
    BOOKING_CANCELLED,
)

# Stays that still hold their rooms for the dates they cover.
ACTIVE_BOOKING_STATUSES = (BOOKING_RESERVED, BOOKING_CHECKED_IN)


@dataclass(frozen=True)
class Room:
    room_number: str
    room_type: str
    status: str = ROOM_AVAILABLE
    floor: int = 1
    base_price: float = 0.0


@dataclass(frozen=True)
class Booking:
    """Guest stay covering the half-open range ``[arrival_date, departure_date)``.

    Dates may be None for incomplete rows read from the store; the
    availability engine skips such bookings.
    """

    booking_id: int
    room_numbers: tuple[str, ...]
    arrival_date: Optional[date]
    departure_date: Optional[date]
    status: str = BOOKING_CHECKED_IN
    guest_name: str = ""
    grc_number: str = ""
    room_type: str = ""
    total_room_charge: float = 0.0
    advance_payment: float = 0.0

    @property
    def nights(self) -> int:
        if self.arrival_date is None or self.departure_date is None:
            return 0
        return (self.departure_date - self.arrival_date).days


@dataclass(frozen=True)
class Purchase:
    purchase_id: int
    booking_id: int
    item_name: str
    category: str
    quantity: int
    unit_price: float
    total_price: float


@dataclass(frozen=True)
class ExtensionConflict:
    room_number: str
    booking_id: int
    guest_name: str
    grc_number: str
    arrival_date: date
    departure_date: date

    def to_dict(self) -> dict[str, str | int]:
        return {
            "room_number": self.room_number,
            "booking_id": self.booking_id,
            "guest_name": self.guest_name,
            "grc_number": self.grc_number,
            "arrival_date": self.arrival_date.isoformat(),
            "departure_date": self.departure_date.isoformat(),
        }


@dataclass(frozen=True)
class StayExtensionQuote:
    booking_id: int
    current_departure: date
    new_departure: date
    additional_nights: int
    nightly_rate_per_room: float
    additional_charge: float
    new_total_charge: float
    conflict: Optional[ExtensionConflict] = None

    @property
    def is_extendable(self) -> bool:
        return self.conflict is None


@dataclass(frozen=True)
class BillSummary:
    room_charges: float
    purchases_total: float
    subtotal: float
    tax_percentage: float
    tax: float
    total: float
    advance_payment: float
    balance_due: float
    purchases: list[Purchase] = field(default_factory=list)
