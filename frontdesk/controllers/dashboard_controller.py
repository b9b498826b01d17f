"""Controller layer for the front-desk dashboard and reservation forecast."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from frontdesk.controllers.dependencies import get_forecast_service, get_front_desk_service
from frontdesk.domain.constraints import InvalidRangeError
from frontdesk.services.forecast_service import ReservationForecastService
from frontdesk.services.front_desk_service import FrontDeskService
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["dashboard"])


class DashboardSummaryResponse(BaseModel):
    date: str
    current_guests: int = Field(ge=0)
    pending_checkouts: int = Field(ge=0)
    available_rooms: int = Field(ge=0)
    total_rooms: int = Field(ge=0)
    room_revenue: float
    purchases_revenue: float
    total_revenue: float
    advance_payments_collected: float
    upcoming_reservations: int = Field(ge=0)
    occupancy_today: int = Field(ge=0)


class ForecastDayRow(BaseModel):
    date: str
    occupied_rooms: int = Field(ge=0)
    occupancy_percentage: int = Field(ge=0)


class RoomTypeCountRow(BaseModel):
    room_type: str
    rooms: int = Field(ge=0)


class ForecastResponse(BaseModel):
    start: date
    end: date
    room_type: Optional[str] = None
    total_rooms: int = Field(ge=0)
    occupancy_percentage: int = Field(ge=0)
    expected_revenue: float
    currency: str
    upcoming_reservations: int = Field(ge=0)
    daily_occupancy: list[ForecastDayRow]
    occupancy_trend: list[ForecastDayRow]
    room_type_distribution: list[RoomTypeCountRow]
    data_integrity_warning: bool


@router.get(
    "/dashboard/summary",
    response_model=DashboardSummaryResponse,
    status_code=status.HTTP_200_OK,
)
async def dashboard_summary(
    service: FrontDeskService = Depends(get_front_desk_service),
) -> DashboardSummaryResponse:
    try:
        return DashboardSummaryResponse(**service.dashboard_summary())
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected dashboard summary failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load dashboard summary",
        ) from exc


@router.get("/forecast", response_model=ForecastResponse, status_code=status.HTTP_200_OK)
async def forecast(
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    room_type: Optional[str] = Query(default=None),
    service: ReservationForecastService = Depends(get_forecast_service),
) -> ForecastResponse:
    try:
        return ForecastResponse(**service.build_forecast(start, end, room_type=room_type))
    except InvalidRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected forecast failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build reservation forecast",
        ) from exc
