"""Conversion between currency amounts and integer minor units (cents)."""

from __future__ import annotations

import decimal
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Union


MINOR_UNITS_PER_MAJOR = 100

Amount = Union[Decimal, int, str]


def to_minor_units(amount: Amount) -> int:
    """Convert a currency amount to cents, rounding half-up at the third decimal."""
    value = Decimal(str(amount)) if not isinstance(amount, Decimal) else amount
    return int((value * MINOR_UNITS_PER_MAJOR).to_integral_value(rounding=ROUND_HALF_UP))


def format_minor_units(minor: int) -> str:
    """Render cents as a two-decimal string, e.g. 54540 -> '545.40'."""
    sign = "-" if minor < 0 else ""
    whole, cents = divmod(abs(minor), MINOR_UNITS_PER_MAJOR)
    return f"{sign}{whole}.{cents:02d}"


def to_decimal(minor: int) -> Decimal:
    return Decimal(minor) / MINOR_UNITS_PER_MAJOR


def percent_of(minor: int, percent: Decimal, rounding: str = ROUND_HALF_UP) -> int:
    """Return `percent`% of `minor`, rounded to a whole cent."""
    share = Decimal(minor) * percent / 100
    return int(share.to_integral_value(rounding=rounding))


def ceil_fraction_to_major(minor: int, fraction: Decimal) -> int:
    """Return ceil(amount * fraction) in whole currency units, expressed in cents."""
    major = Decimal(minor) * fraction / MINOR_UNITS_PER_MAJOR
    return int(major.to_integral_value(rounding=ROUND_CEILING)) * MINOR_UNITS_PER_MAJOR


def resolve_rounding(name: str) -> str:
    """Map a configured rounding name such as 'ROUND_HALF_EVEN' to the decimal constant."""
    rounding = getattr(decimal, name.upper(), None)
    if not isinstance(rounding, str) or not name.upper().startswith("ROUND_"):
        raise ValueError(f"Unknown rounding mode: {name}")
    return rounding
