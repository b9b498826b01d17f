"""HTTP controller layer for room inventory, availability and occupancy."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field, field_validator

from frontdesk.controllers.dependencies import get_front_desk_service
from frontdesk.domain.constraints import InvalidRangeError
from frontdesk.domain.models import ROOM_AVAILABLE, ROOM_STATUSES
from frontdesk.services.front_desk_service import (
    DuplicateRoomError,
    FrontDeskService,
    FrontDeskValidationError,
    RoomInUseError,
    RoomNotFoundError,
)
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["availability"])


class RoomResponse(BaseModel):
    room_number: str
    room_type: str
    status: str
    floor: int = Field(ge=1)
    base_price: float = Field(ge=0.0)


class CreateRoomRequest(BaseModel):
    room_number: str = Field(min_length=1)
    room_type: str = Field(min_length=1)
    floor: int = Field(default=1, ge=1)
    base_price: float = Field(default=0.0, ge=0.0)
    status: str = ROOM_AVAILABLE

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: str) -> str:
        if value not in ROOM_STATUSES:
            raise ValueError(f"status must be one of {', '.join(ROOM_STATUSES)}")
        return value


class RoomStatusRequest(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: str) -> str:
        if value not in ROOM_STATUSES:
            raise ValueError(f"status must be one of {', '.join(ROOM_STATUSES)}")
        return value


class RoomAvailabilityResponse(BaseModel):
    room_number: str
    start: date
    end: date
    available: bool


class DailyOccupancyRow(BaseModel):
    date: str
    occupied_rooms: int = Field(ge=0)


class CalendarOccupancyResponse(BaseModel):
    days: list[DailyOccupancyRow]
    total_rooms: int = Field(ge=0)
    occupancy_percentage: int = Field(ge=0)
    data_integrity_warning: bool


class BookingResponse(BaseModel):
    booking_id: int
    grc_number: str
    guest_name: str
    room_numbers: list[str]
    room_type: str
    arrival_date: Optional[date] = None
    departure_date: Optional[date] = None
    status: str
    total_room_charge: float
    advance_payment: float


@router.get("/rooms", response_model=list[RoomResponse], status_code=status.HTTP_200_OK)
async def list_rooms(
    service: FrontDeskService = Depends(get_front_desk_service),
) -> list[RoomResponse]:
    return [RoomResponse(**room) for room in service.list_rooms()]


@router.post("/rooms", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    payload: CreateRoomRequest,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> RoomResponse:
    try:
        room = service.create_room(
            room_number=payload.room_number,
            room_type=payload.room_type,
            floor=payload.floor,
            base_price=payload.base_price,
            status=payload.status,
        )
        return RoomResponse(**room)
    except FrontDeskValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except DuplicateRoomError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc


@router.patch(
    "/rooms/{room_number}/status",
    response_model=RoomResponse,
    status_code=status.HTTP_200_OK,
)
async def update_room_status(
    room_number: str,
    payload: RoomStatusRequest,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> RoomResponse:
    try:
        return RoomResponse(**service.update_room_status(room_number, payload.status))
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.delete("/rooms/{room_number}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_number: str,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> Response:
    try:
        service.delete_room(room_number)
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except RoomInUseError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/rooms/available",
    response_model=list[RoomResponse],
    status_code=status.HTTP_200_OK,
)
async def available_rooms(
    start: date = Query(...),
    end: date = Query(...),
    room_type: Optional[str] = Query(default=None),
    service: FrontDeskService = Depends(get_front_desk_service),
) -> list[RoomResponse]:
    try:
        rooms = service.find_available_rooms(start, end, room_type=room_type)
        return [RoomResponse(**room) for room in rooms]
    except InvalidRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected available rooms failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list available rooms",
        ) from exc


@router.get(
    "/rooms/{room_number}/availability",
    response_model=RoomAvailabilityResponse,
    status_code=status.HTTP_200_OK,
)
async def room_availability(
    room_number: str,
    start: date = Query(...),
    end: date = Query(...),
    service: FrontDeskService = Depends(get_front_desk_service),
) -> RoomAvailabilityResponse:
    try:
        return RoomAvailabilityResponse(**service.check_room_availability(room_number, start, end))
    except InvalidRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.get(
    "/occupancy/calendar",
    response_model=CalendarOccupancyResponse,
    status_code=status.HTTP_200_OK,
)
async def calendar_occupancy(
    start: date = Query(...),
    end: date = Query(...),
    service: FrontDeskService = Depends(get_front_desk_service),
) -> CalendarOccupancyResponse:
    try:
        return CalendarOccupancyResponse(**service.calendar_occupancy(start, end))
    except InvalidRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected calendar occupancy failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute calendar occupancy",
        ) from exc


@router.get(
    "/bookings/upcoming",
    response_model=list[BookingResponse],
    status_code=status.HTTP_200_OK,
)
async def upcoming(
    days: Optional[int] = Query(default=None, ge=0),
    service: FrontDeskService = Depends(get_front_desk_service),
) -> list[BookingResponse]:
    try:
        return [BookingResponse(**booking) for booking in service.list_upcoming(days)]
    except FrontDeskValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
