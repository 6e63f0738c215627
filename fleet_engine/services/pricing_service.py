"""Season-aware, component-based stay pricing in integer cents."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from fleet_engine.domain.constraints import EngineConfig, engine_config_from_settings
from fleet_engine.domain.models import (
    Discount,
    DiscountMode,
    Extra,
    PriceBreakdown,
    PricingMode,
    ResourceClass,
    SelectedExtra,
    SlotInstant,
    TariffSeason,
)
from fleet_engine.domain.slots import iter_nights, whole_night_count
from fleet_engine.services.validation import (
    EngineValidationError,
    InvalidIntervalError,
    validate_discount,
    validate_selected_extras,
)
from fleet_engine.utils.config import Settings, get_settings
from fleet_engine.utils.logger import get_logger
from fleet_engine.utils.money import ceil_fraction_to_major, percent_of, to_minor_units


logger = get_logger(__name__)

# date.weekday(): Friday == 4, Saturday == 5.
WEEKEND_NIGHTS = frozenset({4, 5})


def is_weekend_night(night: date) -> bool:
    return night.weekday() in WEEKEND_NIGHTS


def classify_nights(start: SlotInstant, end: SlotInstant) -> tuple[int, int]:
    """Return (weekday_nights, weekend_nights) for the stay."""
    weekday_nights = 0
    weekend_nights = 0
    for night in iter_nights(start, end):
        if is_weekend_night(night):
            weekend_nights += 1
        else:
            weekday_nights += 1
    return weekday_nights, weekend_nights


def match_tariff_season(day: date, seasons: Iterable[TariffSeason]) -> Optional[str]:
    """Return the first season whose periods contain the day's MM-DD."""
    month_day = day.strftime("%m-%d")
    for season in seasons:
        if any(period.contains(month_day) for period in season.periods):
            return season.name
    return None


def resolve_rates(resource_class: ResourceClass, config: EngineConfig) -> tuple[int, int]:
    weekday_rate = (
        to_minor_units(resource_class.weekday_rate)
        if resource_class.weekday_rate is not None
        else config.default_weekday_rate
    )
    weekend_rate = (
        to_minor_units(resource_class.weekend_rate)
        if resource_class.weekend_rate is not None
        else config.default_weekend_rate
    )
    return weekday_rate, weekend_rate


def extras_applicable(
    selected: Iterable[SelectedExtra],
    catalog: Mapping[str, Extra],
    class_ids: Iterable[str],
) -> bool:
    """True when every selected extra applies to at least one of the classes."""
    class_ids = list(class_ids)
    return all(
        any(catalog[item.extra_id].applies_to(class_id) for class_id in class_ids)
        for item in selected
    )


def compute_extras_total(
    selected: Iterable[SelectedExtra],
    catalog: Mapping[str, Extra],
    nights: int,
) -> int:
    total = 0
    for item in selected:
        extra = catalog[item.extra_id]
        price = to_minor_units(extra.price)
        if extra.pricing_mode is PricingMode.PER_DAY:
            total += price * nights * item.quantity
        else:
            # Per-person quantities arrive already multiplied by guest count.
            total += price * item.quantity
    return total


def compute_discount(subtotal: int, discount: Optional[Discount], config: EngineConfig) -> int:
    if discount is None:
        return 0
    if discount.mode is DiscountMode.PERCENT:
        return percent_of(subtotal, discount.value, rounding=config.discount_rounding)
    return to_minor_units(discount.value)


def price_stay(
    *,
    start: SlotInstant,
    end: SlotInstant,
    weekday_rate: int,
    weekend_rate: int,
    config: EngineConfig,
    selected_extras: Sequence[SelectedExtra] = (),
    extras_catalog: Optional[Mapping[str, Extra]] = None,
    discount: Optional[Discount] = None,
    amount_paid: int = 0,
    tariff_seasons: Iterable[TariffSeason] = (),
    unit_count: int = 1,
) -> PriceBreakdown:
    """Price one stay.

    `weekday_rate`/`weekend_rate` are the nightly rates in cents; for a package
    they are the summed rates of its members and `unit_count` multiplies the
    preparation fee, so the total identity still holds.
    """
    nights = whole_night_count(start, end)
    if nights <= 0:
        raise InvalidIntervalError("interval must span at least one night")

    catalog = extras_catalog or {}
    validate_selected_extras(selected_extras, catalog)
    if discount is not None:
        validate_discount(discount)
    if amount_paid < 0:
        raise EngineValidationError("amount_paid must be >= 0")

    weekday_nights, weekend_nights = classify_nights(start, end)
    rental_total = weekday_nights * weekday_rate + weekend_nights * weekend_rate
    extras_total = compute_extras_total(selected_extras, catalog, nights)
    preparation_fee = config.preparation_fee * unit_count
    subtotal = rental_total + extras_total + preparation_fee

    discount_amount = compute_discount(subtotal, discount, config)
    total = max(0, subtotal - discount_amount)
    deposit = ceil_fraction_to_major(total, config.deposit_fraction)
    balance_due = max(0, total - amount_paid)

    return PriceBreakdown(
        nights=nights,
        weekday_nights=weekday_nights,
        weekend_nights=weekend_nights,
        weekday_rate=weekday_rate,
        weekend_rate=weekend_rate,
        rental_total=rental_total,
        extras_total=extras_total,
        preparation_fee=preparation_fee,
        subtotal=subtotal,
        discount_amount=discount_amount,
        total=total,
        deposit=deposit,
        amount_paid=amount_paid,
        balance_due=balance_due,
        tariff_name=match_tariff_season(start.day, tariff_seasons),
    )


class PricingService:
    """Prices a resource class or a combination of classes for a stay."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._config = config or engine_config_from_settings(self._settings)

    @property
    def config(self) -> EngineConfig:
        return self._config

    def price_class(
        self,
        resource_class: ResourceClass,
        *,
        start: SlotInstant,
        end: SlotInstant,
        selected_extras: Sequence[SelectedExtra] = (),
        extras_catalog: Optional[Mapping[str, Extra]] = None,
        discount: Optional[Discount] = None,
        amount_paid: int = 0,
        tariff_seasons: Iterable[TariffSeason] = (),
    ) -> PriceBreakdown:
        weekday_rate, weekend_rate = resolve_rates(resource_class, self._config)
        return price_stay(
            start=start,
            end=end,
            weekday_rate=weekday_rate,
            weekend_rate=weekend_rate,
            config=self._config,
            selected_extras=selected_extras,
            extras_catalog=extras_catalog,
            discount=discount,
            amount_paid=amount_paid,
            tariff_seasons=tariff_seasons,
        )

    def price_combination(
        self,
        resource_classes: Sequence[ResourceClass],
        *,
        start: SlotInstant,
        end: SlotInstant,
        selected_extras: Sequence[SelectedExtra] = (),
        extras_catalog: Optional[Mapping[str, Extra]] = None,
        discount: Optional[Discount] = None,
        amount_paid: int = 0,
        tariff_seasons: Iterable[TariffSeason] = (),
    ) -> PriceBreakdown:
        """Price several units booked together; extras and discount apply once."""
        rates = [resolve_rates(resource_class, self._config) for resource_class in resource_classes]
        breakdown = price_stay(
            start=start,
            end=end,
            weekday_rate=sum(weekday for weekday, _ in rates),
            weekend_rate=sum(weekend for _, weekend in rates),
            config=self._config,
            selected_extras=selected_extras,
            extras_catalog=extras_catalog,
            discount=discount,
            amount_paid=amount_paid,
            tariff_seasons=tariff_seasons,
            unit_count=len(resource_classes),
        )
        logger.debug(
            "Combination priced | classes=%s | total=%s",
            [resource_class.class_id for resource_class in resource_classes],
            breakdown.total,
        )
        return breakdown
