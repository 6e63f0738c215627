from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from fleet_engine.domain.models import (
    Discount,
    DiscountMode,
    Extra,
    FleetSnapshot,
    QuoteRequest,
    RequestedInterval,
    Reservation,
    ResourceClass,
    ResourceUnit,
    SelectedExtra,
    Slot,
    SlotInstant,
)
from fleet_engine.services.quote_service import BookingQuoteService, SearchMode, SearchStatus
from fleet_engine.utils.config import get_settings


def _at(day: int, slot: Slot) -> SlotInstant:
    return SlotInstant(date(2026, 6, day), slot)


def _build_service() -> BookingQuoteService:
    return BookingQuoteService(settings=replace(get_settings()))


def _snapshot() -> FleetSnapshot:
    return FleetSnapshot(
        units=(
            ResourceUnit("u1", "model-a", 4, 6),
            ResourceUnit("u2", "model-a", 4, 6),
            ResourceUnit("u3", "model-b", 2, 4),
        ),
        classes=(
            ResourceClass("model-a", Decimal("150"), Decimal("200")),
            ResourceClass("model-b", Decimal("100"), Decimal("120")),
        ),
        reservations=(
            Reservation("r1", "u1", _at(10, Slot.PM), _at(12, Slot.AM)),
        ),
        extras=(
            Extra("fuel", Decimal("10")),
            Extra("grill", Decimal("15"), applicable_class_ids=frozenset({"model-b"})),
        ),
    )


def _request(start: SlotInstant, end: SlotInstant, guests: int = 4, units: int = 1, **kwargs) -> QuoteRequest:
    return QuoteRequest(
        interval=RequestedInterval(start=start, end=end, guest_count=guests, unit_count=units),
        **kwargs,
    )


def test_single_mode_returns_available_candidates() -> None:
    result = _build_service().search(_snapshot(), _request(_at(11, Slot.AM), _at(13, Slot.AM)))
    assert result.status is SearchStatus.OK
    assert result.mode is SearchMode.SINGLE
    assert [(c.class_id, c.unit_id) for c in result.candidates] == [
        ("model-b", "u3"),
        ("model-a", "u2"),
    ]


def test_package_mode_selected_for_multiple_units() -> None:
    result = _build_service().search(
        _snapshot(),
        _request(_at(12, Slot.AM), _at(14, Slot.AM), guests=6, units=2),
    )
    assert result.mode is SearchMode.PACKAGE
    assert result.status is SearchStatus.OK
    assert result.pool_size == 3
    assert all(6 <= package.optimal_capacity <= 8 for package in result.packages)


def test_no_availability_is_not_an_error() -> None:
    result = _build_service().search(
        _snapshot(),
        _request(_at(11, Slot.AM), _at(13, Slot.AM), guests=10),
    )
    assert result.status is SearchStatus.NO_AVAILABILITY
    assert result.is_valid
    assert result.errors == []
    assert result.candidates == []


def test_insufficient_pool_reported_for_caller_messaging() -> None:
    result = _build_service().search(
        _snapshot(),
        _request(_at(12, Slot.AM), _at(14, Slot.AM), guests=12, units=4),
    )
    assert result.status is SearchStatus.INSUFFICIENT_POOL
    assert result.is_valid


@pytest.mark.parametrize(
    "request_factory,fragment",
    [
        (lambda: _request(_at(12, Slot.AM), _at(11, Slot.AM)), "must precede"),
        (lambda: _request(_at(12, Slot.AM), _at(12, Slot.PM)), "at least one night"),
        (lambda: _request(_at(12, Slot.AM), _at(14, Slot.AM), guests=-1), "guest_count"),
        (lambda: _request(_at(12, Slot.AM), _at(14, Slot.AM), units=0), "unit_count"),
        (
            lambda: _request(
                _at(12, Slot.AM),
                _at(14, Slot.AM),
                selected_extras=(SelectedExtra("jetski", 1),),
            ),
            "jetski",
        ),
    ],
)
def test_invalid_input_returned_as_result(request_factory, fragment) -> None:
    result = _build_service().search(_snapshot(), request_factory())
    assert result.status is SearchStatus.INVALID
    assert not result.is_valid
    assert fragment in result.errors[0]


def test_orphan_reservation_surfaces_warning() -> None:
    snapshot = replace(
        _snapshot(),
        reservations=_snapshot().reservations
        + (Reservation("r9", "ghost", _at(10, Slot.PM), _at(12, Slot.AM)),),
    )
    result = _build_service().search(snapshot, _request(_at(11, Slot.AM), _at(13, Slot.AM)))
    assert result.status is SearchStatus.OK
    assert len(result.warnings) == 1
    assert "ghost" in result.warnings[0]


def test_inapplicable_extra_removes_class_from_candidates() -> None:
    result = _build_service().search(
        _snapshot(),
        _request(
            _at(12, Slot.AM),
            _at(14, Slot.AM),
            guests=2,
            selected_extras=(SelectedExtra("grill", 1),),
        ),
    )
    assert [candidate.class_id for candidate in result.candidates] == ["model-b"]


def test_quote_unit_prices_class_and_reports_free_unit() -> None:
    result = _build_service().quote_unit(
        _snapshot(),
        _request(
            _at(10, Slot.PM),
            _at(13, Slot.AM),
            selected_extras=(SelectedExtra("fuel", 1),),
            discount=Discount(DiscountMode.FLAT, Decimal("20")),
            amount_paid=Decimal("100"),
        ),
        "model-a",
    )
    assert result.is_valid
    assert result.available
    assert result.unit_id == "u2"
    # 2*150 + 1*200 + 10 + 76 - 20
    assert result.breakdown.total == 56600
    assert result.breakdown.balance_due == 46600


def test_quote_unit_unknown_class_is_validation_error() -> None:
    result = _build_service().quote_unit(
        _snapshot(),
        _request(_at(10, Slot.PM), _at(13, Slot.AM)),
        "model-z",
    )
    assert not result.is_valid
    assert result.breakdown is None
    assert "model-z" in result.errors[0]


def test_quote_unit_rejects_extra_for_other_class() -> None:
    result = _build_service().quote_unit(
        _snapshot(),
        _request(_at(10, Slot.PM), _at(13, Slot.AM), selected_extras=(SelectedExtra("grill", 1),)),
        "model-a",
    )
    assert not result.is_valid
