"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the repository, clock and services, registers routers, and runs
startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from frontdesk.controllers.availability_controller import router as availability_router
from frontdesk.controllers.dashboard_controller import router as dashboard_router
from frontdesk.controllers.guest_controller import router as guest_router
from frontdesk.repository.data_repository import DataRepository
from frontdesk.services.forecast_service import ReservationForecastService
from frontdesk.services.front_desk_service import FrontDeskService
from frontdesk.utils.clock import Clock
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services receive their repository, settings and clock explicitly and are
    exposed through app.state for dependency resolution.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    clock = clock or Clock(settings)

    # --- Repository (SQLite connection factory standing in for the table store) ---
    repository = DataRepository(settings)

    # --- Services ---
    front_desk_service = FrontDeskService(
        repository=repository,
        settings=settings,
        clock=clock,
    )
    forecast_service = ReservationForecastService(
        repository=repository,
        settings=settings,
        clock=clock,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(availability_router)
    app.include_router(guest_router)
    app.include_router(dashboard_router)

    app.state.settings = settings
    app.state.clock = clock
    app.state.repository = repository
    app.state.front_desk_service = front_desk_service
    app.state.forecast_service = forecast_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Schema must exist before the demo property is seeded; seeding is skipped
    when rooms already exist or SEED_DEMO_DATA is off.
    """
    settings: Settings = app.state.settings
    repository: DataRepository = app.state.repository
    clock: Clock = app.state.clock

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_data:
        logger.info("Startup: seeding demo property (skipped if rooms exist)")
        repository.seed_demo_data(today=clock.today())

    logger.info("Startup complete; system ready")


# Module-level app object for uvicorn
app = create_app()
