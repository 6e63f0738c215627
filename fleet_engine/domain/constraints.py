"""Domain-level validation rules for the booking engine configuration."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from fleet_engine.domain.models import DiscountMode
from fleet_engine.utils.config import Settings
from fleet_engine.utils.money import resolve_rounding, to_minor_units


@dataclass(frozen=True)
class EngineConfig:
    preparation_fee: int
    default_weekday_rate: int
    default_weekend_rate: int
    deposit_fraction: Decimal = Decimal("0.30")
    default_discount_mode: DiscountMode = DiscountMode.FLAT
    discount_rounding: str = ROUND_HALF_UP
    # Enumeration is C(pool, k); k never exceeds this.
    max_units_per_package: int = 6
    capacity_band: int = 2
    max_packages: int = 5
    max_pool_size: int = 40
    # Searches with C(pool, k) above this are refused before enumeration.
    max_combinations: int = 100_000


def engine_config_from_settings(settings: Settings) -> EngineConfig:
    try:
        discount_mode = DiscountMode(settings.default_discount_mode)
    except ValueError as exc:
        raise ValueError(
            "default_discount_mode must be 'percent' or 'flat'"
        ) from exc
    config = EngineConfig(
        preparation_fee=to_minor_units(settings.preparation_fee),
        default_weekday_rate=to_minor_units(settings.default_weekday_rate),
        default_weekend_rate=to_minor_units(settings.default_weekend_rate),
        deposit_fraction=settings.deposit_fraction,
        default_discount_mode=discount_mode,
        discount_rounding=resolve_rounding(settings.discount_rounding),
        max_units_per_package=settings.max_units_per_package,
        capacity_band=settings.capacity_band,
        max_packages=settings.max_packages,
        max_pool_size=settings.max_pool_size,
        max_combinations=settings.max_combinations,
    )
    validate_engine_config(config)
    return config


def validate_engine_config(config: EngineConfig) -> None:
    if config.preparation_fee < 0:
        raise ValueError("preparation_fee must be >= 0")
    if config.default_weekday_rate < 0 or config.default_weekend_rate < 0:
        raise ValueError("default rates must be >= 0")
    if not Decimal("0") <= config.deposit_fraction <= Decimal("1"):
        raise ValueError("deposit_fraction must be between 0 and 1")
    if config.max_units_per_package <= 0:
        raise ValueError("max_units_per_package must be > 0")
    if config.capacity_band < 0:
        raise ValueError("capacity_band must be >= 0")
    if config.max_packages <= 0:
        raise ValueError("max_packages must be > 0")
    if config.max_pool_size <= 0:
        raise ValueError("max_pool_size must be > 0")
    if config.max_combinations <= 0:
        raise ValueError("max_combinations must be > 0")
