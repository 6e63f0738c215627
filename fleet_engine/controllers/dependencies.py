"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import Request

from fleet_engine.services.occupancy_service import OccupancyService
from fleet_engine.services.quote_service import BookingQuoteService
from fleet_engine.utils.config import get_settings


def get_quote_service(request: Request) -> BookingQuoteService:
    service = getattr(request.app.state, "quote_service", None)
    if service is None:
        service = BookingQuoteService(settings=get_settings())
        request.app.state.quote_service = service
    return service


def get_occupancy_service(request: Request) -> OccupancyService:
    service = getattr(request.app.state, "occupancy_service", None)
    if service is None:
        service = OccupancyService(settings=get_settings())
        request.app.state.occupancy_service = service
    return service
