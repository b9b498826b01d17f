"""Controller layer for guest registration, check-out, extensions and bills."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from frontdesk.controllers.availability_controller import BookingResponse
from frontdesk.controllers.dependencies import get_front_desk_service
from frontdesk.domain.constraints import InvalidRangeError, MalformedBookingError
from frontdesk.services.front_desk_service import (
    BookingConflictError,
    FrontDeskService,
    FrontDeskValidationError,
    GuestNotFoundError,
    RoomNotFoundError,
    StaleBookingError,
)
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["guests"])


class RegisterGuestRequest(BaseModel):
    guest_name: str = Field(min_length=1)
    room_numbers: list[str]
    arrival_date: date
    departure_date: date
    advance_payment: float = Field(default=0.0, ge=0.0)

    @field_validator("room_numbers")
    @classmethod
    def validate_room_numbers(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("room_numbers must contain at least one room")
        for room_number in value:
            if not room_number.strip():
                raise ValueError("room_numbers values must be non-empty")
        return value


class ExtensionRequest(BaseModel):
    new_departure_date: date


class ExtensionConflictResponse(BaseModel):
    room_number: str
    booking_id: int
    guest_name: str
    grc_number: str
    arrival_date: date
    departure_date: date


class ExtensionResponse(BaseModel):
    booking_id: int
    current_departure: date
    new_departure: date
    additional_nights: int = Field(gt=0)
    nightly_rate_per_room: float
    additional_charge: float
    new_total_charge: float
    is_extendable: bool
    conflict: Optional[ExtensionConflictResponse] = None


class PurchaseRequest(BaseModel):
    item_name: str = Field(min_length=1)
    category: str = Field(default="restaurant", min_length=1)
    quantity: int = Field(default=1, gt=0)
    unit_price: float = Field(ge=0.0)


class PurchaseRow(BaseModel):
    purchase_id: int
    item_name: str
    category: str
    quantity: int
    unit_price: float
    total_price: float


class BillResponse(BaseModel):
    booking_id: int
    grc_number: str
    currency: str
    room_charges: float
    purchases_total: float
    subtotal: float
    tax_percentage: float
    tax: float
    total: float
    advance_payment: float
    balance_due: float
    purchases: list[PurchaseRow]
    purchase_id: Optional[int] = None


def _not_found(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.post("/guests", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def register_guest(
    payload: RegisterGuestRequest,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> BookingResponse:
    try:
        booking = service.register_guest(
            guest_name=payload.guest_name,
            room_numbers=payload.room_numbers,
            arrival_date=payload.arrival_date,
            departure_date=payload.departure_date,
            advance_payment=payload.advance_payment,
        )
        return BookingResponse(**booking)
    except (FrontDeskValidationError, InvalidRangeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except RoomNotFoundError as exc:
        raise _not_found(exc) from exc
    except BookingConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected guest registration failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register guest",
        ) from exc


@router.get("/guests", response_model=list[BookingResponse], status_code=status.HTTP_200_OK)
async def list_guests(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None),
    service: FrontDeskService = Depends(get_front_desk_service),
) -> list[BookingResponse]:
    try:
        guests = service.list_guests(status=status_filter, search=search)
        return [BookingResponse(**guest) for guest in guests]
    except FrontDeskValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get("/guests/{booking_id}", response_model=BookingResponse, status_code=status.HTTP_200_OK)
async def get_guest(
    booking_id: int,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> BookingResponse:
    try:
        return BookingResponse(**service.get_guest(booking_id))
    except GuestNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post(
    "/guests/{booking_id}/checkout",
    response_model=BookingResponse,
    status_code=status.HTTP_200_OK,
)
async def check_out(
    booking_id: int,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> BookingResponse:
    try:
        return BookingResponse(**service.check_out(booking_id))
    except GuestNotFoundError as exc:
        raise _not_found(exc) from exc
    except FrontDeskValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post(
    "/guests/{booking_id}/extension/preview",
    response_model=ExtensionResponse,
    status_code=status.HTTP_200_OK,
)
async def preview_extension(
    booking_id: int,
    payload: ExtensionRequest,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> ExtensionResponse:
    try:
        return ExtensionResponse(**service.preview_extension(booking_id, payload.new_departure_date))
    except GuestNotFoundError as exc:
        raise _not_found(exc) from exc
    except (InvalidRangeError, MalformedBookingError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post(
    "/guests/{booking_id}/extension",
    response_model=ExtensionResponse,
    status_code=status.HTTP_200_OK,
)
async def apply_extension(
    booking_id: int,
    payload: ExtensionRequest,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> ExtensionResponse:
    try:
        return ExtensionResponse(**service.apply_extension(booking_id, payload.new_departure_date))
    except GuestNotFoundError as exc:
        raise _not_found(exc) from exc
    except (InvalidRangeError, MalformedBookingError, FrontDeskValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except BookingConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "conflict": exc.conflict},
        ) from exc
    except StaleBookingError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc


@router.post(
    "/guests/{booking_id}/purchases",
    response_model=BillResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_purchase(
    booking_id: int,
    payload: PurchaseRequest,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> BillResponse:
    try:
        bill = service.add_purchase(
            booking_id,
            item_name=payload.item_name,
            category=payload.category,
            quantity=payload.quantity,
            unit_price=payload.unit_price,
        )
        return BillResponse(**bill)
    except GuestNotFoundError as exc:
        raise _not_found(exc) from exc
    except FrontDeskValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.delete(
    "/guests/{booking_id}/purchases/{purchase_id}",
    response_model=BillResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_purchase(
    booking_id: int,
    purchase_id: int,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> BillResponse:
    try:
        return BillResponse(**service.delete_purchase(booking_id, purchase_id))
    except GuestNotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/guests/{booking_id}/bill", response_model=BillResponse, status_code=status.HTTP_200_OK)
async def get_bill(
    booking_id: int,
    service: FrontDeskService = Depends(get_front_desk_service),
) -> BillResponse:
    try:
        return BillResponse(**service.get_bill(booking_id))
    except GuestNotFoundError as exc:
        raise _not_found(exc) from exc
