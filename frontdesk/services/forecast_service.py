"""Reservation forecast report built on calendar occupancy."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Optional

import pandas as pd

from frontdesk.domain.constraints import InvalidRangeError
from frontdesk.domain.models import BOOKING_CANCELLED, Booking, Room
from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.availability_service import (
    compute_calendar_occupancy,
    occupancy_percentage,
    upcoming_bookings,
)
from frontdesk.utils.clock import Clock
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


def build_daily_occupancy_frame(
    occupancy: dict[str, int],
    total_rooms: int,
) -> pd.DataFrame:
    """One row per day with the occupied count and its share of the inventory."""
    frame = pd.DataFrame(
        {
            "date": list(occupancy.keys()),
            "occupied_rooms": list(occupancy.values()),
        },
        columns=["date", "occupied_rooms"],
    )
    if frame.empty:
        frame["occupancy_percentage"] = pd.Series(dtype=int)
        return frame

    frame = frame.sort_values(by="date").reset_index(drop=True)
    frame["occupied_rooms"] = frame["occupied_rooms"].astype(int)
    if total_rooms > 0:
        ratio = frame["occupied_rooms"] / total_rooms * 100.0
        # Half-up to match occupancy_percentage; pandas' round() is half-even.
        frame["occupancy_percentage"] = (ratio + 0.5).apply(int)
    else:
        frame["occupancy_percentage"] = 0
    return frame


def room_type_distribution(rooms: list[Room]) -> list[dict[str, Any]]:
    if not rooms:
        return []
    counts = (
        pd.Series([room.room_type for room in rooms], dtype=str)
        .value_counts()
        .sort_index()
    )
    return [{"room_type": str(name), "rooms": int(count)} for name, count in counts.items()]


class ReservationForecastService:
    """Aggregates on-the-books reservations into a forecast report."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._clock = clock or Clock(self._settings)

    def default_window(self) -> tuple[date, date]:
        today = self._clock.today()
        return today, today + timedelta(days=self._settings.forecast_default_window_days)

    def build_forecast(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        room_type: Optional[str] = None,
    ) -> dict[str, Any]:
        default_start, default_end = self.default_window()
        start = start or default_start
        end = end or default_end
        if start > end:
            raise InvalidRangeError(
                f"start date {start.isoformat()} must not be after end date {end.isoformat()}"
            )

        rooms = self._repository.list_rooms()
        bookings: list[Booking] = [
            booking
            for booking in self._repository.list_bookings()
            if booking.status != BOOKING_CANCELLED
        ]
        if room_type:
            rooms = [room for room in rooms if room.room_type == room_type]
            bookings = [booking for booking in bookings if booking.room_type == room_type]

        occupancy = compute_calendar_occupancy(bookings, start, end)
        total_rooms = len(rooms)
        percentage = occupancy_percentage(occupancy, total_rooms)
        daily = build_daily_occupancy_frame(occupancy, total_rooms)
        daily_rows = daily.to_dict(orient="records")
        trend_rows = daily.tail(self._settings.forecast_trend_days).to_dict(orient="records")

        integrity_warning = percentage > 100 or bool(
            not daily.empty and (daily["occupancy_percentage"] > 100).any()
        )
        if integrity_warning:
            logger.warning(
                "Forecast shows occupancy above inventory | start=%s | end=%s | room_type=%s",
                start.isoformat(),
                end.isoformat(),
                room_type or "all",
            )

        upcoming = upcoming_bookings(
            bookings,
            self._settings.forecast_upcoming_days,
            today=self._clock.today(),
        )
        expected_revenue = round(sum(booking.total_room_charge for booking in bookings), 2)

        logger.info(
            "Forecast built | start=%s | end=%s | room_type=%s | occupancy=%s",
            start.isoformat(),
            end.isoformat(),
            room_type or "all",
            percentage,
        )
        return {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "room_type": room_type,
            "total_rooms": total_rooms,
            "occupancy_percentage": percentage,
            "expected_revenue": expected_revenue,
            "currency": self._settings.currency,
            "upcoming_reservations": len(upcoming),
            "daily_occupancy": [_clean_row(row) for row in daily_rows],
            "occupancy_trend": [_clean_row(row) for row in trend_rows],
            "room_type_distribution": room_type_distribution(rooms),
            "data_integrity_warning": integrity_warning,
        }


def _clean_row(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "date": str(row["date"]),
        "occupied_rooms": int(row["occupied_rooms"]),
        "occupancy_percentage": int(row["occupancy_percentage"]),
    }
