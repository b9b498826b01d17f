from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from frontdesk.domain.constraints import InvalidRangeError
from frontdesk.domain.models import Room
from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.forecast_service import (
    ReservationForecastService,
    build_daily_occupancy_frame,
    room_type_distribution,
)
from frontdesk.utils.clock import FixedClock
from frontdesk.utils.config import get_settings


TODAY = date(2024, 3, 1)


def _build_forecast_service(tmp_path) -> tuple[ReservationForecastService, DataRepository]:
    get_settings.cache_clear()
    settings = replace(
        get_settings(),
        database_path=tmp_path / "forecast.db",
        seed_demo_data=False,
        forecast_trend_days=3,
        forecast_upcoming_days=10,
        currency="LKR",
    )
    repository = DataRepository(settings)
    repository.initialize_database()
    repository.create_room(Room("101", "DBL", floor=1, base_price=100.0))
    repository.create_room(Room("102", "DBL", floor=1, base_price=100.0))
    repository.create_room(Room("201", "SGL", floor=2, base_price=80.0))
    repository.create_room(Room("202", "SGL", floor=2, base_price=80.0))
    service = ReservationForecastService(
        repository=repository,
        settings=settings,
        clock=FixedClock(TODAY),
    )
    return service, repository


def _register(repository: DataRepository, rooms, room_type, arrival, departure, status, charge):
    return repository.register_booking(
        grc_number="GRC-20240301-0001",
        guest_name="Forecast Guest",
        room_numbers=rooms,
        room_type=room_type,
        arrival_date=arrival,
        departure_date=departure,
        status=status,
        total_room_charge=charge,
        advance_payment=0.0,
        created_on=TODAY,
    )


def test_daily_frame_rounds_half_up() -> None:
    frame = build_daily_occupancy_frame({"2024-03-01": 1, "2024-03-02": 3}, 8)
    assert list(frame["occupancy_percentage"]) == [13, 38]


def test_daily_frame_handles_empty_inventory() -> None:
    frame = build_daily_occupancy_frame({"2024-03-01": 2}, 0)
    assert list(frame["occupancy_percentage"]) == [0]
    assert build_daily_occupancy_frame({}, 4).empty


def test_room_type_distribution_is_sorted() -> None:
    rooms = [Room("1", "SGL"), Room("2", "DBL"), Room("3", "SGL")]
    assert room_type_distribution(rooms) == [
        {"room_type": "DBL", "rooms": 1},
        {"room_type": "SGL", "rooms": 2},
    ]
    assert room_type_distribution([]) == []


def test_forecast_aggregates_reservations(tmp_path) -> None:
    service, repository = _build_forecast_service(tmp_path)
    _register(repository, ["101", "102"], "DBL", date(2024, 3, 1), date(2024, 3, 3), "checked_in", 400.0)
    _register(repository, ["201"], "SGL", date(2024, 3, 2), date(2024, 3, 4), "reserved", 160.0)
    _register(repository, ["202"], "SGL", date(2024, 3, 1), date(2024, 3, 4), "cancelled", 240.0)

    report = service.build_forecast(date(2024, 3, 1), date(2024, 3, 4))

    assert report["total_rooms"] == 4
    assert [row["occupied_rooms"] for row in report["daily_occupancy"]] == [2, 3, 1, 0]
    # (2 + 3 + 1 + 0) / 4 days / 4 rooms = 37.5% -> 38
    assert report["occupancy_percentage"] == 38
    assert report["expected_revenue"] == pytest.approx(560.0)
    assert report["upcoming_reservations"] == 2
    assert report["currency"] == "LKR"
    assert [row["date"] for row in report["occupancy_trend"]] == [
        "2024-03-02",
        "2024-03-03",
        "2024-03-04",
    ]
    assert report["data_integrity_warning"] is False


def test_forecast_filters_by_room_type(tmp_path) -> None:
    service, repository = _build_forecast_service(tmp_path)
    _register(repository, ["101", "102"], "DBL", date(2024, 3, 1), date(2024, 3, 3), "checked_in", 400.0)
    _register(repository, ["201"], "SGL", date(2024, 3, 1), date(2024, 3, 3), "reserved", 160.0)

    report = service.build_forecast(date(2024, 3, 1), date(2024, 3, 2), room_type="SGL")

    assert report["total_rooms"] == 2
    assert report["occupancy_percentage"] == 50
    assert report["expected_revenue"] == pytest.approx(160.0)
    assert report["room_type_distribution"] == [{"room_type": "SGL", "rooms": 2}]


def test_forecast_defaults_to_configured_window(tmp_path) -> None:
    service, _ = _build_forecast_service(tmp_path)

    report = service.build_forecast()

    assert report["start"] == "2024-03-01"
    assert report["end"] == "2024-03-31"
    assert report["occupancy_percentage"] == 0


def test_forecast_rejects_inverted_window(tmp_path) -> None:
    service, _ = _build_forecast_service(tmp_path)
    with pytest.raises(InvalidRangeError):
        service.build_forecast(date(2024, 3, 5), date(2024, 3, 1))
