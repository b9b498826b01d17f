from __future__ import annotations

from datetime import date

import pytest

from frontdesk.domain.constraints import InvalidRangeError
from frontdesk.domain.models import Purchase
from frontdesk.services.billing_service import (
    calculate_bill_total,
    calculate_room_charges,
    next_grc_number,
)


def _purchase(purchase_id: int, total: float) -> Purchase:
    return Purchase(
        purchase_id=purchase_id,
        booking_id=1,
        item_name="Item",
        category="minibar",
        quantity=1,
        unit_price=total,
        total_price=total,
    )


def test_room_charges_multiply_nights_rooms_and_rate() -> None:
    assert calculate_room_charges(date(2024, 1, 10), date(2024, 1, 13), 2, 150.0) == 900.0


def test_room_charges_reject_empty_stay() -> None:
    with pytest.raises(InvalidRangeError):
        calculate_room_charges(date(2024, 1, 10), date(2024, 1, 10), 1, 100.0)


def test_bill_applies_tax_to_rooms_and_purchases() -> None:
    bill = calculate_bill_total(
        room_charges=400.0,
        purchases=[_purchase(1, 30.0), _purchase(2, 70.0)],
        tax_percentage=12.0,
        advance_payment=100.0,
    )

    assert bill.purchases_total == pytest.approx(100.0)
    assert bill.subtotal == pytest.approx(500.0)
    assert bill.tax == pytest.approx(60.0)
    assert bill.total == pytest.approx(560.0)
    assert bill.balance_due == pytest.approx(460.0)
    assert len(bill.purchases) == 2


def test_bill_without_purchases() -> None:
    bill = calculate_bill_total(room_charges=250.0, purchases=[], tax_percentage=0.0)
    assert bill.total == pytest.approx(250.0)
    assert bill.balance_due == pytest.approx(250.0)


def test_grc_number_starts_each_day_at_one() -> None:
    assert next_grc_number([], date(2024, 1, 10)) == "GRC-20240110-0001"


def test_grc_number_continues_same_day_sequence() -> None:
    existing = [
        "GRC-20240110-0001",
        "GRC-20240110-0007",
        "GRC-20240109-0042",
        "",
        "GRC-20240110-bad",
    ]
    assert next_grc_number(existing, date(2024, 1, 10)) == "GRC-20240110-0008"


def test_grc_number_uses_configured_prefix() -> None:
    assert next_grc_number(["HTL-20240110-0003"], date(2024, 1, 10), prefix="HTL") == "HTL-20240110-0004"
