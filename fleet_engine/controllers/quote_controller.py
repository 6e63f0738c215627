"""HTTP controller layer for availability search, price quotes and occupancy."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from fleet_engine.controllers.dependencies import get_occupancy_service, get_quote_service
from fleet_engine.controllers.schemas import (
    OccupancyRequestModel,
    QuoteRequestModel,
    SearchRequestModel,
)
from fleet_engine.services.occupancy_service import OccupancyService, OccupancyValidationError
from fleet_engine.services.quote_service import BookingQuoteService, SearchStatus
from fleet_engine.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["booking"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/search", status_code=status.HTTP_200_OK)
def search(
    payload: SearchRequestModel,
    service: BookingQuoteService = Depends(get_quote_service),
) -> dict[str, Any]:
    """Single-unit candidates or multi-unit packages for the requested stay."""
    try:
        result = service.search(
            payload.snapshot.to_domain(),
            payload.to_quote_request(service.config.default_discount_mode),
            include_unavailable=payload.include_unavailable,
        )
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected search failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to search availability",
        ) from exc

    if result.status is SearchStatus.INVALID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.errors,
        )
    return result.to_api_dict()


@router.post("/quote", status_code=status.HTTP_200_OK)
def quote(
    payload: QuoteRequestModel,
    service: BookingQuoteService = Depends(get_quote_service),
) -> dict[str, Any]:
    """Price one houseboat class for a booking form preview."""
    try:
        result = service.quote_unit(
            payload.snapshot.to_domain(),
            payload.to_quote_request(service.config.default_discount_mode),
            payload.class_id,
        )
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected quote failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute quote",
        ) from exc

    if not result.is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.errors,
        )
    return result.to_api_dict()


@router.post("/occupancy", status_code=status.HTTP_200_OK)
def occupancy(
    payload: OccupancyRequestModel,
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    """Busy/free units per class for each half-day of the window."""
    try:
        frame, warnings = service.build_occupancy_frame(
            payload.snapshot.to_domain(),
            payload.start_date,
            payload.end_date,
        )
    except OccupancyValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    records = [
        {**row, "day": row["day"].isoformat()}
        for row in frame.to_dict(orient="records")
    ]
    return {"rows": records, "warnings": warnings}
