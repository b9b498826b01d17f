"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from frontdesk.services.forecast_service import ReservationForecastService
from frontdesk.services.front_desk_service import FrontDeskService


def get_front_desk_service(request: Request) -> FrontDeskService:
    service = getattr(request.app.state, "front_desk_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        settings = getattr(request.app.state, "settings", None)
        clock = getattr(request.app.state, "clock", None)
        if repository is not None:
            service = FrontDeskService(
                repository=repository,
                settings=settings,
                clock=clock,
            )
            request.app.state.front_desk_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Front desk service is not initialized",
        )
    return service


def get_forecast_service(request: Request) -> ReservationForecastService:
    service = getattr(request.app.state, "forecast_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        settings = getattr(request.app.state, "settings", None)
        clock = getattr(request.app.state, "clock", None)
        if repository is not None:
            service = ReservationForecastService(
                repository=repository,
                settings=settings,
                clock=clock,
            )
            request.app.state.forecast_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Forecast service is not initialized",
        )
    return service
