"""Request-level facade: validate, route to single-unit or package search."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from fleet_engine.domain.constraints import EngineConfig
from fleet_engine.domain.models import FleetSnapshot, Package, PriceBreakdown, QuoteRequest, UnitCandidate
from fleet_engine.services.availability_service import (
    AvailabilityService,
    find_free_unit,
    partition_reservations,
)
from fleet_engine.services.package_service import PackageSearchService, PackageSearchStatus
from fleet_engine.services.pricing_service import PricingService, extras_applicable
from fleet_engine.services.validation import (
    EngineValidationError,
    UnknownResourceClassError,
    validate_request,
)
from fleet_engine.utils.config import Settings, get_settings
from fleet_engine.utils.logger import get_logger
from fleet_engine.utils.money import to_minor_units


logger = get_logger(__name__)


class SearchMode(str, Enum):
    SINGLE = "single"
    PACKAGE = "package"


class SearchStatus(str, Enum):
    OK = "ok"
    INVALID = "invalid"
    NO_AVAILABILITY = "no_availability"
    NO_MATCH = "no_match"
    INSUFFICIENT_POOL = "insufficient_pool"
    POOL_TOO_LARGE = "pool_too_large"


_PACKAGE_STATUS_MAP = {
    PackageSearchStatus.OK: SearchStatus.OK,
    PackageSearchStatus.NO_MATCH: SearchStatus.NO_MATCH,
    PackageSearchStatus.INSUFFICIENT_POOL: SearchStatus.INSUFFICIENT_POOL,
    PackageSearchStatus.POOL_TOO_LARGE: SearchStatus.POOL_TOO_LARGE,
}


@dataclass(frozen=True)
class SearchResult:
    status: SearchStatus
    mode: SearchMode
    candidates: list[UnitCandidate] = field(default_factory=list)
    packages: list[Package] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    pool_size: int = 0
    combinations_evaluated: int = 0

    @property
    def is_valid(self) -> bool:
        return self.status is not SearchStatus.INVALID

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "mode": self.mode.value,
            "candidates": [candidate.to_api_dict() for candidate in self.candidates],
            "packages": [package.to_api_dict() for package in self.packages],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "pool_size": self.pool_size,
            "combinations_evaluated": self.combinations_evaluated,
        }


@dataclass(frozen=True)
class QuoteResult:
    class_id: str
    breakdown: Optional[PriceBreakdown] = None
    unit_id: Optional[str] = None
    available: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "class_id": self.class_id,
            "unit_id": self.unit_id,
            "available": self.available,
            "breakdown": self.breakdown.to_api_dict() if self.breakdown is not None else None,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


class BookingQuoteService:
    """Entry point used by the host; never lets a validation error escape."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        pricing_service: Optional[PricingService] = None,
        availability_service: Optional[AvailabilityService] = None,
        package_service: Optional[PackageSearchService] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._pricing_service = pricing_service or PricingService(settings=self._settings)
        self._availability_service = availability_service or AvailabilityService(
            settings=self._settings,
            pricing_service=self._pricing_service,
        )
        self._package_service = package_service or PackageSearchService(
            settings=self._settings,
            pricing_service=self._pricing_service,
        )

    @property
    def config(self) -> EngineConfig:
        return self._pricing_service.config

    def search(
        self,
        snapshot: FleetSnapshot,
        request: QuoteRequest,
        *,
        include_unavailable: bool = False,
    ) -> SearchResult:
        mode = SearchMode.PACKAGE if request.interval.unit_count > 1 else SearchMode.SINGLE
        catalog = {extra.extra_id: extra for extra in snapshot.extras}
        try:
            validate_request(request, catalog)
        except EngineValidationError as exc:
            logger.info("Search rejected | reason=%s", exc)
            return SearchResult(status=SearchStatus.INVALID, mode=mode, errors=[str(exc)])

        reservations_by_unit, warnings = partition_reservations(
            snapshot.units,
            snapshot.reservations,
        )

        if mode is SearchMode.SINGLE:
            candidates = self._availability_service.single_resource_candidates(
                snapshot,
                request,
                reservations_by_unit=reservations_by_unit,
                include_unavailable=include_unavailable,
            )
            has_available = any(candidate.available for candidate in candidates)
            return SearchResult(
                status=SearchStatus.OK if has_available else SearchStatus.NO_AVAILABILITY,
                mode=mode,
                candidates=candidates,
                warnings=warnings,
            )

        package_result = self._package_service.search(
            snapshot,
            request,
            reservations_by_unit=reservations_by_unit,
        )
        return SearchResult(
            status=_PACKAGE_STATUS_MAP[package_result.status],
            mode=mode,
            packages=package_result.packages,
            warnings=warnings,
            pool_size=package_result.pool_size,
            combinations_evaluated=package_result.combinations_evaluated,
        )

    def quote_unit(
        self,
        snapshot: FleetSnapshot,
        request: QuoteRequest,
        class_id: str,
    ) -> QuoteResult:
        """Price one class for the booking form and report a free unit if any."""
        catalog = {extra.extra_id: extra for extra in snapshot.extras}
        classes = {resource_class.class_id: resource_class for resource_class in snapshot.classes}
        try:
            validate_request(request, catalog)
            resource_class = classes.get(class_id)
            if resource_class is None:
                raise UnknownResourceClassError(f"class {class_id!r} not found")
            if not extras_applicable(request.selected_extras, catalog, [class_id]):
                raise EngineValidationError(
                    f"a selected extra does not apply to class {class_id!r}"
                )
            breakdown = self._pricing_service.price_class(
                resource_class,
                start=request.interval.start,
                end=request.interval.end,
                selected_extras=request.selected_extras,
                extras_catalog=catalog,
                discount=request.discount,
                amount_paid=to_minor_units(request.amount_paid),
                tariff_seasons=snapshot.tariff_seasons,
            )
        except EngineValidationError as exc:
            logger.info("Quote rejected | class_id=%s | reason=%s", class_id, exc)
            return QuoteResult(class_id=class_id, errors=[str(exc)])

        reservations_by_unit, warnings = partition_reservations(
            snapshot.units,
            snapshot.reservations,
        )
        unit = find_free_unit(
            resource_class,
            request.interval,
            snapshot.units,
            reservations_by_unit,
            min_capacity=request.interval.guest_count,
        )
        return QuoteResult(
            class_id=class_id,
            breakdown=breakdown,
            unit_id=unit.unit_id if unit is not None else None,
            available=unit is not None,
            warnings=warnings,
        )
