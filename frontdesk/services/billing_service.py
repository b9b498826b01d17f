"""Room charge, invoice totals and guest registration card numbering."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from frontdesk.domain.constraints import InvalidRangeError
from frontdesk.domain.models import BillSummary, Purchase


def calculate_room_charges(
    arrival_date: date,
    departure_date: date,
    number_of_rooms: int,
    price_per_night: float,
) -> float:
    nights = (departure_date - arrival_date).days
    if nights <= 0:
        raise InvalidRangeError("departure date must be after the arrival date")
    return round(float(nights * number_of_rooms * price_per_night), 2)


def calculate_bill_total(
    room_charges: float,
    purchases: Iterable[Purchase],
    tax_percentage: float,
    advance_payment: float = 0.0,
) -> BillSummary:
    """Invoice totals; tax applies to room charges plus purchases."""
    purchase_list = list(purchases)
    purchases_total = round(sum(float(item.total_price) for item in purchase_list), 2)
    subtotal = round(float(room_charges) + purchases_total, 2)
    tax = round(subtotal * (float(tax_percentage) / 100.0), 2)
    total = round(subtotal + tax, 2)
    return BillSummary(
        room_charges=round(float(room_charges), 2),
        purchases_total=purchases_total,
        subtotal=subtotal,
        tax_percentage=float(tax_percentage),
        tax=tax,
        total=total,
        advance_payment=round(float(advance_payment), 2),
        balance_due=round(total - float(advance_payment), 2),
        purchases=purchase_list,
    )


def next_grc_number(
    existing_numbers: Iterable[str],
    on_date: date,
    prefix: str = "GRC",
) -> str:
    """Next ``PREFIX-YYYYMMDD-NNNN`` number; sequences restart every day."""
    day_prefix = f"{prefix}-{on_date.strftime('%Y%m%d')}-"
    highest = 0
    for number in existing_numbers:
        if not number or not number.startswith(day_prefix):
            continue
        suffix = number[len(day_prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{day_prefix}{highest + 1:04d}"
