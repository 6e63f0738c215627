"""
app.py: FastAPI application factory.

The engine itself is pure; this module only wires services into app.state
so the host can call it over HTTP.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from fleet_engine.controllers.quote_controller import router as booking_router
from fleet_engine.services.occupancy_service import OccupancyService
from fleet_engine.services.pricing_service import PricingService
from fleet_engine.services.quote_service import BookingQuoteService
from fleet_engine.utils.config import get_settings
from fleet_engine.utils.logger import get_logger


logger = get_logger(__name__)


def create_app() -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every dependency is created here and injected via app.state.
    """
    settings = get_settings()

    # Config errors surface at startup, not on the first request.
    pricing_service = PricingService(settings=settings)
    quote_service = BookingQuoteService(
        settings=settings,
        pricing_service=pricing_service,
    )
    occupancy_service = OccupancyService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = pricing_service.config
        logger.info(
            (
                "Startup complete | preparation_fee=%s | deposit_fraction=%s | "
                "max_units_per_package=%s | max_pool_size=%s | max_combinations=%s"
            ),
            config.preparation_fee,
            config.deposit_fraction,
            config.max_units_per_package,
            config.max_pool_size,
            config.max_combinations,
        )
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(booking_router)

    app.state.quote_service = quote_service
    app.state.occupancy_service = occupancy_service

    return app


# Module-level app object for uvicorn
app = create_app()
