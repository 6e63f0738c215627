"""Per-unit and per-class occupancy over a requested interval."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from fleet_engine.domain.models import (
    FleetSnapshot,
    QuoteRequest,
    RequestedInterval,
    Reservation,
    ResourceClass,
    ResourceUnit,
    UnitCandidate,
)
from fleet_engine.domain.slots import overlaps
from fleet_engine.services.pricing_service import PricingService, extras_applicable
from fleet_engine.utils.config import Settings, get_settings
from fleet_engine.utils.logger import get_logger
from fleet_engine.utils.money import to_minor_units


logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassOccupancy:
    class_id: str
    total_units: int
    busy_units: int
    free_unit_ids: tuple[str, ...]

    @property
    def is_available(self) -> bool:
        # A class without units is never available.
        return self.busy_units < self.total_units

    @property
    def free_units(self) -> int:
        return self.total_units - self.busy_units


def is_unit_free(
    unit: ResourceUnit,
    interval: RequestedInterval,
    reservations: Iterable[Reservation],
) -> bool:
    for reservation in reservations:
        if reservation.unit_id != unit.unit_id:
            continue
        if not reservation.status.blocks_unit:
            continue
        if overlaps(interval.start, interval.end, reservation.start, reservation.end):
            return False
    return True


def partition_reservations(
    units: Iterable[ResourceUnit],
    reservations: Iterable[Reservation],
) -> tuple[dict[str, list[Reservation]], list[str]]:
    """Group reservations by unit; unknown unit ids become warnings, not errors."""
    known_unit_ids = {unit.unit_id for unit in units}
    by_unit_id: dict[str, list[Reservation]] = defaultdict(list)
    warnings: list[str] = []
    for reservation in reservations:
        if reservation.unit_id not in known_unit_ids:
            message = (
                f"reservation {reservation.reservation_id} references unknown unit "
                f"{reservation.unit_id}; skipped"
            )
            logger.warning(
                "Skipping reservation for unknown unit | reservation_id=%s | unit_id=%s",
                reservation.reservation_id,
                reservation.unit_id,
            )
            warnings.append(message)
            continue
        by_unit_id[reservation.unit_id].append(reservation)
    return dict(by_unit_id), warnings


def class_occupancy(
    resource_class: ResourceClass,
    interval: RequestedInterval,
    units: Sequence[ResourceUnit],
    reservations: Iterable[Reservation] | Mapping[str, Sequence[Reservation]],
) -> ClassOccupancy:
    """Count busy units of a class.

    `reservations` may be the flat list or the per-unit mapping returned by
    `partition_reservations`; the mapping avoids rescanning every booking.
    """
    class_units = [unit for unit in units if unit.class_id == resource_class.class_id]
    free_unit_ids: list[str] = []
    for unit in class_units:
        if isinstance(reservations, Mapping):
            unit_reservations: Iterable[Reservation] = reservations.get(unit.unit_id, ())
        else:
            unit_reservations = reservations
        if is_unit_free(unit, interval, unit_reservations):
            free_unit_ids.append(unit.unit_id)
    return ClassOccupancy(
        class_id=resource_class.class_id,
        total_units=len(class_units),
        busy_units=len(class_units) - len(free_unit_ids),
        free_unit_ids=tuple(free_unit_ids),
    )


def find_free_unit(
    resource_class: ResourceClass,
    interval: RequestedInterval,
    units: Sequence[ResourceUnit],
    reservations: Iterable[Reservation] | Mapping[str, Sequence[Reservation]],
    min_capacity: int = 0,
) -> Optional[ResourceUnit]:
    """Return the first free unit of the class that seats `min_capacity` guests."""
    occupancy = class_occupancy(resource_class, interval, units, reservations)
    free_ids = set(occupancy.free_unit_ids)
    for unit in units:
        if unit.unit_id in free_ids and unit.maximum_capacity >= min_capacity:
            return unit
    return None


class AvailabilityService:
    """Lists the classes that can host a single-unit booking, cheapest first."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        pricing_service: Optional[PricingService] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._pricing_service = pricing_service or PricingService(settings=self._settings)

    def single_resource_candidates(
        self,
        snapshot: FleetSnapshot,
        request: QuoteRequest,
        *,
        reservations_by_unit: Optional[Mapping[str, Sequence[Reservation]]] = None,
        include_unavailable: bool = False,
    ) -> list[UnitCandidate]:
        interval = request.interval
        if reservations_by_unit is None:
            reservations_by_unit, _ = partition_reservations(
                snapshot.units,
                snapshot.reservations,
            )
        catalog = {extra.extra_id: extra for extra in snapshot.extras}
        amount_paid = to_minor_units(request.amount_paid)

        available: list[UnitCandidate] = []
        unavailable: list[UnitCandidate] = []
        for resource_class in snapshot.classes:
            breakdown = self._pricing_service.price_class(
                resource_class,
                start=interval.start,
                end=interval.end,
                selected_extras=request.selected_extras,
                extras_catalog=catalog,
                discount=request.discount,
                amount_paid=amount_paid,
                tariff_seasons=snapshot.tariff_seasons,
            )
            unit = None
            if extras_applicable(request.selected_extras, catalog, [resource_class.class_id]):
                unit = find_free_unit(
                    resource_class,
                    interval,
                    snapshot.units,
                    reservations_by_unit,
                    min_capacity=interval.guest_count,
                )
            candidate = UnitCandidate(
                class_id=resource_class.class_id,
                unit_id=unit.unit_id if unit is not None else None,
                available=unit is not None,
                breakdown=breakdown,
            )
            if candidate.available:
                available.append(candidate)
            else:
                unavailable.append(candidate)

        available.sort(key=_candidate_sort_key)
        logger.info(
            "Single-unit search completed | guests=%s | interval=%s..%s | available=%s | unavailable=%s",
            interval.guest_count,
            interval.start,
            interval.end,
            len(available),
            len(unavailable),
        )
        if include_unavailable:
            unavailable.sort(key=_candidate_sort_key)
            return available + unavailable
        return available


def _candidate_sort_key(candidate: UnitCandidate) -> tuple[int, str]:
    return candidate.breakdown.total, candidate.class_id
