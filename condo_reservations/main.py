"""FastAPI application bootstrap and lifecycle wiring."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from condo_reservations.controllers.reservation_controller import router as reservation_router
from condo_reservations.repository.data_repository import DataRepository
from condo_reservations.services.reservation_service import ReservationService
from condo_reservations.utils.clock import Clock
from condo_reservations.utils.config import Settings, get_settings
from condo_reservations.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """Build the app with explicit startup lifecycle dependencies."""
    settings = settings or get_settings()
    repository = DataRepository(settings)
    reservation_service = ReservationService(
        repository=repository,
        settings=settings,
        clock=clock,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(reservation_router)

    app.state.settings = settings
    app.state.repository = repository
    app.state.reservation_service = reservation_service

    return app


def startup(app: FastAPI) -> None:
    """Initialize schema and seed demo spaces; safe to re-run."""
    repository: DataRepository = app.state.repository
    settings: Settings = app.state.settings

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_data:
        logger.info("Startup: seeding demo common spaces (skipped if any exist)")
        repository.seed_demo_spaces_if_empty()

    logger.info("Startup complete | timezone=%s", settings.timezone_name)


app = create_app()
