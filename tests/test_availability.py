from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from fleet_engine.domain.models import (
    FleetSnapshot,
    QuoteRequest,
    RequestedInterval,
    Reservation,
    ReservationStatus,
    ResourceClass,
    ResourceUnit,
    Slot,
    SlotInstant,
)
from fleet_engine.services.availability_service import (
    AvailabilityService,
    class_occupancy,
    find_free_unit,
    is_unit_free,
    partition_reservations,
)
from fleet_engine.utils.config import get_settings


def _at(day: int, slot: Slot) -> SlotInstant:
    return SlotInstant(date(2026, 6, day), slot)


def _interval(start: SlotInstant, end: SlotInstant, guests: int = 2, units: int = 1) -> RequestedInterval:
    return RequestedInterval(start=start, end=end, guest_count=guests, unit_count=units)


def _build_service() -> AvailabilityService:
    settings = replace(get_settings(), preparation_fee=Decimal("76.00"))
    return AvailabilityService(settings=settings)


UNIT = ResourceUnit("u1", "model-a", optimal_capacity=4, maximum_capacity=6)
EXISTING = Reservation(
    reservation_id="r1",
    unit_id="u1",
    start=_at(10, Slot.PM),
    end=_at(12, Slot.AM),
    status=ReservationStatus.CONFIRMED,
)


def test_overlapping_confirmed_reservation_blocks_unit() -> None:
    interval = _interval(_at(11, Slot.AM), _at(13, Slot.AM))
    assert is_unit_free(UNIT, interval, [EXISTING]) is False


def test_request_starting_at_checkout_boundary_is_free() -> None:
    interval = _interval(_at(12, Slot.AM), _at(14, Slot.AM))
    assert is_unit_free(UNIT, interval, [EXISTING]) is True


@pytest.mark.parametrize(
    "status,expected_free",
    [
        (ReservationStatus.PENDING, False),
        (ReservationStatus.CONFIRMED, False),
        (ReservationStatus.MAINTENANCE, False),
        (ReservationStatus.CANCELLED, True),
    ],
)
def test_only_cancelled_reservations_are_ignored(status, expected_free) -> None:
    reservation = replace(EXISTING, status=status)
    interval = _interval(_at(10, Slot.AM), _at(14, Slot.PM))
    assert is_unit_free(UNIT, interval, [reservation]) is expected_free


def test_reservation_on_another_unit_does_not_block() -> None:
    other = replace(EXISTING, unit_id="u2")
    interval = _interval(_at(11, Slot.AM), _at(13, Slot.AM))
    assert is_unit_free(UNIT, interval, [other]) is True


def test_reservation_rejects_empty_interval() -> None:
    with pytest.raises(ValueError):
        Reservation("bad", "u1", _at(12, Slot.AM), _at(12, Slot.AM))


def test_class_occupancy_counts_busy_units() -> None:
    units = [UNIT, ResourceUnit("u2", "model-a", 4, 6), ResourceUnit("x1", "model-b", 2, 2)]
    occupancy = class_occupancy(
        ResourceClass("model-a"),
        _interval(_at(11, Slot.AM), _at(13, Slot.AM)),
        units,
        [EXISTING],
    )
    assert occupancy.total_units == 2
    assert occupancy.busy_units == 1
    assert occupancy.free_unit_ids == ("u2",)
    assert occupancy.is_available


def test_class_occupancy_fully_busy_class_is_unavailable() -> None:
    occupancy = class_occupancy(
        ResourceClass("model-a"),
        _interval(_at(11, Slot.AM), _at(13, Slot.AM)),
        [UNIT],
        [EXISTING],
    )
    assert occupancy.busy_units >= occupancy.total_units
    assert not occupancy.is_available


def test_class_without_units_is_never_available() -> None:
    occupancy = class_occupancy(
        ResourceClass("ghost"),
        _interval(_at(11, Slot.AM), _at(13, Slot.AM)),
        [UNIT],
        [],
    )
    assert occupancy.total_units == 0
    assert not occupancy.is_available


def test_class_occupancy_accepts_partitioned_reservations() -> None:
    by_unit, warnings = partition_reservations([UNIT], [EXISTING])
    occupancy = class_occupancy(
        ResourceClass("model-a"),
        _interval(_at(11, Slot.AM), _at(13, Slot.AM)),
        [UNIT],
        by_unit,
    )
    assert warnings == []
    assert occupancy.busy_units == 1


def test_unknown_unit_reservation_becomes_warning() -> None:
    orphan = replace(EXISTING, reservation_id="r9", unit_id="missing")
    by_unit, warnings = partition_reservations([UNIT], [EXISTING, orphan])
    assert list(by_unit) == ["u1"]
    assert len(warnings) == 1
    assert "r9" in warnings[0]


def test_find_free_unit_respects_capacity() -> None:
    units = [ResourceUnit("small", "model-a", 2, 3), ResourceUnit("big", "model-a", 4, 6)]
    interval = _interval(_at(11, Slot.AM), _at(13, Slot.AM), guests=5)
    unit = find_free_unit(ResourceClass("model-a"), interval, units, [], min_capacity=5)
    assert unit is not None
    assert unit.unit_id == "big"


def test_single_candidates_sorted_by_price_then_class_id() -> None:
    snapshot = FleetSnapshot(
        units=(
            ResourceUnit("a1", "model-a", 4, 6),
            ResourceUnit("b1", "model-b", 4, 6),
            ResourceUnit("c1", "model-c", 4, 6),
        ),
        classes=(
            ResourceClass("model-c", Decimal("150"), Decimal("150")),
            ResourceClass("model-b", Decimal("150"), Decimal("150")),
            ResourceClass("model-a", Decimal("200"), Decimal("200")),
        ),
    )
    request = QuoteRequest(interval=_interval(_at(10, Slot.PM), _at(11, Slot.AM), guests=4))
    candidates = _build_service().single_resource_candidates(snapshot, request)
    assert [candidate.class_id for candidate in candidates] == ["model-b", "model-c", "model-a"]
    assert [candidate.unit_id for candidate in candidates] == ["b1", "c1", "a1"]
    assert all(candidate.available for candidate in candidates)


def test_single_candidates_capacity_equal_to_guests_is_valid() -> None:
    snapshot = FleetSnapshot(
        units=(ResourceUnit("a1", "model-a", 4, 6), ResourceUnit("b1", "model-b", 2, 5)),
        classes=(ResourceClass("model-a"), ResourceClass("model-b")),
    )
    request = QuoteRequest(interval=_interval(_at(10, Slot.PM), _at(11, Slot.AM), guests=6))
    candidates = _build_service().single_resource_candidates(snapshot, request)
    assert [candidate.class_id for candidate in candidates] == ["model-a"]


def test_single_candidates_excludes_busy_classes_unless_requested() -> None:
    snapshot = FleetSnapshot(
        units=(UNIT, ResourceUnit("b1", "model-b", 4, 6)),
        classes=(ResourceClass("model-a"), ResourceClass("model-b")),
        reservations=(EXISTING,),
    )
    request = QuoteRequest(interval=_interval(_at(11, Slot.AM), _at(13, Slot.AM)))
    service = _build_service()

    only_available = service.single_resource_candidates(snapshot, request)
    assert [candidate.class_id for candidate in only_available] == ["model-b"]

    everything = service.single_resource_candidates(snapshot, request, include_unavailable=True)
    assert [(c.class_id, c.available) for c in everything] == [
        ("model-b", True),
        ("model-a", False),
    ]
    assert everything[1].unit_id is None
