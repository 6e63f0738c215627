"""Environment-driven settings for the fleet engine and its HTTP host."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_decimal(name: str, default: str) -> Decimal:
    raw = _env_str(name, default)
    try:
        return Decimal(raw)
    except ArithmeticError as exc:
        raise ValueError(f"{name} must be a decimal amount, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str

    # Pricing
    preparation_fee: Decimal
    default_weekday_rate: Decimal
    default_weekend_rate: Decimal
    deposit_fraction: Decimal
    default_discount_mode: str
    discount_rounding: str

    # Package search
    max_units_per_package: int
    capacity_band: int
    max_packages: int
    max_pool_size: int
    max_combinations: int

    # Occupancy timeline
    max_occupancy_days: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings once per process; tests override with dataclasses.replace."""
    return Settings(
        app_name=_env_str("FLEET_APP_NAME", "Fleet Booking Engine"),
        app_version=_env_str("FLEET_APP_VERSION", "1.0.0"),
        log_level=_env_str("FLEET_LOG_LEVEL", "INFO"),
        preparation_fee=_env_decimal("FLEET_PREPARATION_FEE", "76.00"),
        default_weekday_rate=_env_decimal("FLEET_DEFAULT_WEEKDAY_RATE", "150.00"),
        default_weekend_rate=_env_decimal("FLEET_DEFAULT_WEEKEND_RATE", "150.00"),
        deposit_fraction=_env_decimal("FLEET_DEPOSIT_FRACTION", "0.30"),
        default_discount_mode=_env_str("FLEET_DEFAULT_DISCOUNT_MODE", "flat").lower(),
        discount_rounding=_env_str("FLEET_DISCOUNT_ROUNDING", "ROUND_HALF_UP").upper(),
        max_units_per_package=_env_int("FLEET_MAX_UNITS_PER_PACKAGE", 6),
        capacity_band=_env_int("FLEET_CAPACITY_BAND", 2),
        max_packages=_env_int("FLEET_MAX_PACKAGES", 5),
        max_pool_size=_env_int("FLEET_MAX_POOL_SIZE", 40),
        max_combinations=_env_int("FLEET_MAX_COMBINATIONS", 100_000),
        max_occupancy_days=_env_int("FLEET_MAX_OCCUPANCY_DAYS", 366),
    )
