"""Caller-correctable input validation shared by the engine services."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping

from fleet_engine.domain.models import (
    Discount,
    DiscountMode,
    Extra,
    QuoteRequest,
    RequestedInterval,
    SelectedExtra,
)
from fleet_engine.domain.slots import whole_night_count


class EngineValidationError(Exception):
    """Raised when request inputs are invalid and must be fixed by the caller."""


class InvalidIntervalError(EngineValidationError):
    """Raised when an interval is empty, reversed, or spans no night."""


class UnknownExtraError(EngineValidationError):
    """Raised when a selected extra id is absent from the catalog."""


class UnknownResourceClassError(EngineValidationError):
    """Raised when a quote targets a class id absent from the snapshot."""


def validate_interval(interval: RequestedInterval) -> None:
    if not interval.start < interval.end:
        raise InvalidIntervalError(
            f"interval start {interval.start} must precede end {interval.end}"
        )
    if whole_night_count(interval.start, interval.end) <= 0:
        raise InvalidIntervalError("interval must span at least one night")
    if interval.guest_count < 1:
        raise EngineValidationError("guest_count must be >= 1")
    if interval.unit_count < 1:
        raise EngineValidationError("unit_count must be >= 1")


def validate_selected_extras(
    selected: Iterable[SelectedExtra],
    catalog: Mapping[str, Extra],
) -> None:
    for item in selected:
        if item.extra_id not in catalog:
            raise UnknownExtraError(f"extra {item.extra_id!r} not found")
        if item.quantity < 1:
            raise EngineValidationError(
                f"extra {item.extra_id!r} quantity must be >= 1"
            )


def validate_discount(discount: Discount) -> None:
    if discount.value < 0:
        raise EngineValidationError("discount value must be >= 0")
    if discount.mode is DiscountMode.PERCENT and discount.value > Decimal("100"):
        raise EngineValidationError("percentage discount must be <= 100")


def validate_request(request: QuoteRequest, catalog: Mapping[str, Extra]) -> None:
    """Fail fast on the first problem; nothing is silently corrected."""
    validate_interval(request.interval)
    validate_selected_extras(request.selected_extras, catalog)
    if request.discount is not None:
        validate_discount(request.discount)
    if request.amount_paid < 0:
        raise EngineValidationError("amount_paid must be >= 0")
