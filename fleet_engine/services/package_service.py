"""Multi-unit package search over the pool of free units.

When a group needs more than one boat, every free unit becomes a token in a
flat pool and all size-k combinations are scored. The enumeration is
C(pool_size, k), so the search is refused with POOL_TOO_LARGE before any
enumeration when the pool exceeds `max_pool_size` or C(pool_size, k) exceeds
`max_combinations`; k never exceeds `max_units_per_package`. Combinations
are streamed, and only in-band unique compositions are held in memory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
from math import comb
from typing import Callable, Iterator, Mapping, Optional, Sequence

from fleet_engine.domain.constraints import EngineConfig
from fleet_engine.domain.models import (
    FleetSnapshot,
    Package,
    PriceBreakdown,
    QuoteRequest,
    Reservation,
    ResourceClass,
    ResourceUnit,
)
from fleet_engine.services.availability_service import class_occupancy, partition_reservations
from fleet_engine.services.pricing_service import PricingService, extras_applicable
from fleet_engine.utils.config import Settings, get_settings
from fleet_engine.utils.logger import get_logger
from fleet_engine.utils.money import to_minor_units


logger = get_logger(__name__)


class PackageSearchStatus(str, Enum):
    OK = "ok"
    NO_MATCH = "no_match"
    INSUFFICIENT_POOL = "insufficient_pool"
    POOL_TOO_LARGE = "pool_too_large"


@dataclass(frozen=True)
class PoolToken:
    """One free unit, carrying its own capacities and its class's stay price."""

    unit: ResourceUnit
    resource_class: ResourceClass
    stay_price: int


@dataclass(frozen=True)
class PackageSearchResult:
    status: PackageSearchStatus
    packages: list[Package] = field(default_factory=list)
    pool_size: int = 0
    combination_size: int = 0
    combinations_evaluated: int = 0


@dataclass(frozen=True)
class _ScoredCombination:
    tokens: tuple[PoolToken, ...]
    composition_key: tuple[str, ...]
    optimal_capacity: int
    maximum_capacity: int
    aggregate_price: int


def build_pool(
    snapshot: FleetSnapshot,
    request: QuoteRequest,
    pricing_service: PricingService,
    reservations_by_unit: Mapping[str, Sequence[Reservation]],
) -> list[PoolToken]:
    """Push one token per free unit; fully booked classes contribute nothing."""
    interval = request.interval
    units_by_id = {unit.unit_id: unit for unit in snapshot.units}
    pool: list[PoolToken] = []
    for resource_class in snapshot.classes:
        occupancy = class_occupancy(resource_class, interval, snapshot.units, reservations_by_unit)
        if not occupancy.is_available:
            continue
        stay_price = pricing_service.price_class(
            resource_class,
            start=interval.start,
            end=interval.end,
        ).total
        for unit_id in occupancy.free_unit_ids:
            pool.append(
                PoolToken(
                    unit=units_by_id[unit_id],
                    resource_class=resource_class,
                    stay_price=stay_price,
                )
            )
    return pool


def combination_size(unit_count: int, pool_size: int, config: EngineConfig) -> int:
    return min(unit_count, pool_size, config.max_units_per_package)


def iter_scored_combinations(pool: Sequence[PoolToken], k: int) -> Iterator[_ScoredCombination]:
    """Yield every size-k combination with its aggregates, lazily."""
    for combo in combinations(pool, k):
        yield _ScoredCombination(
            tokens=combo,
            composition_key=tuple(sorted(token.resource_class.class_id for token in combo)),
            optimal_capacity=sum(token.unit.optimal_capacity for token in combo),
            maximum_capacity=sum(token.unit.maximum_capacity for token in combo),
            aggregate_price=sum(token.stay_price for token in combo),
        )


def in_capacity_band(item: _ScoredCombination, guest_count: int, band: int) -> bool:
    return guest_count <= item.optimal_capacity <= guest_count + band


def collect_fitting_combinations(
    pool: Sequence[PoolToken],
    k: int,
    guest_count: int,
    band: int,
    accept: Callable[[_ScoredCombination], bool] = lambda item: True,
) -> tuple[list[_ScoredCombination], int]:
    """Stream the combinations, keeping in-band unique compositions only.

    Returns the kept items in enumeration order and the number of
    combinations evaluated. Two packages are the same if they use the same
    multiset of classes; the first one enumerated is kept.
    """
    seen: set[tuple[str, ...]] = set()
    fitting: list[_ScoredCombination] = []
    evaluated = 0
    for item in iter_scored_combinations(pool, k):
        evaluated += 1
        if item.composition_key in seen:
            continue
        if not in_capacity_band(item, guest_count, band) or not accept(item):
            continue
        seen.add(item.composition_key)
        fitting.append(item)
    return fitting, evaluated


def rank_combinations(
    scored: Sequence[_ScoredCombination],
    guest_count: int,
) -> list[_ScoredCombination]:
    return sorted(
        scored,
        key=lambda item: (
            item.maximum_capacity - guest_count,
            item.aggregate_price,
            item.composition_key,
        ),
    )


class PackageSearchService:
    """Finds the tightest-fitting, cheapest combinations of free units."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        pricing_service: Optional[PricingService] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._pricing_service = pricing_service or PricingService(settings=self._settings)

    @property
    def config(self) -> EngineConfig:
        return self._pricing_service.config

    def search(
        self,
        snapshot: FleetSnapshot,
        request: QuoteRequest,
        *,
        reservations_by_unit: Optional[Mapping[str, Sequence[Reservation]]] = None,
    ) -> PackageSearchResult:
        config = self.config
        interval = request.interval
        if reservations_by_unit is None:
            reservations_by_unit, _ = partition_reservations(
                snapshot.units,
                snapshot.reservations,
            )

        pool = build_pool(snapshot, request, self._pricing_service, reservations_by_unit)
        pool_size = len(pool)
        if pool_size < interval.unit_count:
            logger.info(
                "Package search skipped: insufficient pool | pool_size=%s | requested_units=%s",
                pool_size,
                interval.unit_count,
            )
            return PackageSearchResult(
                status=PackageSearchStatus.INSUFFICIENT_POOL,
                pool_size=pool_size,
            )

        k = combination_size(interval.unit_count, pool_size, config)
        combination_count = comb(pool_size, k)
        if pool_size > config.max_pool_size or combination_count > config.max_combinations:
            logger.warning(
                (
                    "Package search refused: pool above ceiling | pool_size=%s | k=%s | "
                    "combinations=%s | max_pool_size=%s | max_combinations=%s"
                ),
                pool_size,
                k,
                combination_count,
                config.max_pool_size,
                config.max_combinations,
            )
            return PackageSearchResult(
                status=PackageSearchStatus.POOL_TOO_LARGE,
                pool_size=pool_size,
                combination_size=k,
            )

        catalog = {extra.extra_id: extra for extra in snapshot.extras}
        fitting, evaluated = collect_fitting_combinations(
            pool,
            k,
            interval.guest_count,
            config.capacity_band,
            accept=lambda item: extras_applicable(
                request.selected_extras, catalog, item.composition_key
            ),
        )
        ranked = rank_combinations(fitting, interval.guest_count)
        top = ranked[: config.max_packages]

        packages = [self._to_package(item, snapshot, request, catalog) for item in top]
        status = PackageSearchStatus.OK if packages else PackageSearchStatus.NO_MATCH
        logger.info(
            (
                "Package search completed | status=%s | guests=%s | pool_size=%s | k=%s | "
                "combinations=%s | fitting=%s | packages=%s"
            ),
            status.value,
            interval.guest_count,
            pool_size,
            k,
            evaluated,
            len(fitting),
            len(packages),
        )
        return PackageSearchResult(
            status=status,
            packages=packages,
            pool_size=pool_size,
            combination_size=k,
            combinations_evaluated=evaluated,
        )

    def _to_package(
        self,
        item: _ScoredCombination,
        snapshot: FleetSnapshot,
        request: QuoteRequest,
        catalog: Mapping,
    ) -> Package:
        breakdown: PriceBreakdown = self._pricing_service.price_combination(
            [token.resource_class for token in item.tokens],
            start=request.interval.start,
            end=request.interval.end,
            selected_extras=request.selected_extras,
            extras_catalog=catalog,
            discount=request.discount,
            amount_paid=to_minor_units(request.amount_paid),
            tariff_seasons=snapshot.tariff_seasons,
        )
        return Package(
            units=tuple(token.unit.unit_id for token in item.tokens),
            class_ids=tuple(token.resource_class.class_id for token in item.tokens),
            optimal_capacity=item.optimal_capacity,
            maximum_capacity=item.maximum_capacity,
            breakdown=breakdown,
        )
