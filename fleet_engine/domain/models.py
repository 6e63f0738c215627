"""Domain models for fleet availability, package search and pricing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from fleet_engine.utils.money import format_minor_units


class Slot(str, Enum):
    """Half-day check-in/check-out anchor."""

    AM = "AM"
    PM = "PM"

    @property
    def offset(self) -> int:
        return 0 if self is Slot.AM else 1

    @property
    def hour(self) -> int:
        return 10 if self is Slot.AM else 15


class ReservationStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    MAINTENANCE = "Maintenance"

    @property
    def blocks_unit(self) -> bool:
        return self is not ReservationStatus.CANCELLED


class PricingMode(str, Enum):
    PER_STAY = "per_stay"
    PER_DAY = "per_day"
    PER_PERSON = "per_person"


class DiscountMode(str, Enum):
    PERCENT = "percent"
    FLAT = "flat"


@dataclass(frozen=True, order=True)
class SlotInstant:
    """A calendar date plus AM/PM slot, ordered by (day, slot)."""

    day: date
    slot: Slot = field(compare=False)
    _slot_offset: int = field(init=False, repr=False, compare=True)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_slot_offset", Slot(self.slot).offset)
        object.__setattr__(self, "slot", Slot(self.slot))

    @classmethod
    def from_datetime(cls, value: datetime) -> "SlotInstant":
        """Quantize a timestamp: anything before noon is the AM slot."""
        return cls(day=value.date(), slot=Slot.AM if value.hour < 12 else Slot.PM)

    def __str__(self) -> str:
        return f"{self.day.isoformat()} {self.slot.value}"


@dataclass(frozen=True)
class ResourceClass:
    """A houseboat model; its units share nightly rates."""

    class_id: str
    weekday_rate: Optional[Decimal] = None
    weekend_rate: Optional[Decimal] = None
    name: str = ""


@dataclass(frozen=True)
class ResourceUnit:
    unit_id: str
    class_id: str
    optimal_capacity: int
    maximum_capacity: int


@dataclass(frozen=True)
class Reservation:
    reservation_id: str
    unit_id: str
    start: SlotInstant
    end: SlotInstant
    status: ReservationStatus = ReservationStatus.CONFIRMED

    def __post_init__(self) -> None:
        if not self.start < self.end:
            raise ValueError(
                f"reservation {self.reservation_id} must start before it ends"
            )


@dataclass(frozen=True)
class RequestedInterval:
    start: SlotInstant
    end: SlotInstant
    guest_count: int
    unit_count: int = 1


@dataclass(frozen=True)
class Extra:
    extra_id: str
    price: Decimal
    pricing_mode: PricingMode = PricingMode.PER_STAY
    name: str = ""
    applicable_class_ids: Optional[frozenset[str]] = None

    def applies_to(self, class_id: str) -> bool:
        return self.applicable_class_ids is None or class_id in self.applicable_class_ids


@dataclass(frozen=True)
class SelectedExtra:
    extra_id: str
    quantity: int = 1


@dataclass(frozen=True)
class TariffPeriod:
    """Month-day window such as ("12-20", "01-05"); may wrap across year end."""

    start_md: str
    end_md: str

    def contains(self, month_day: str) -> bool:
        if self.start_md <= self.end_md:
            return self.start_md <= month_day <= self.end_md
        return month_day >= self.start_md or month_day <= self.end_md


@dataclass(frozen=True)
class TariffSeason:
    name: str
    periods: tuple[TariffPeriod, ...] = ()


@dataclass(frozen=True)
class Discount:
    mode: DiscountMode
    value: Decimal = Decimal("0")


@dataclass(frozen=True)
class PriceBreakdown:
    """Cost of a stay. Money fields are integer cents."""

    nights: int
    weekday_nights: int
    weekend_nights: int
    weekday_rate: int
    weekend_rate: int
    rental_total: int
    extras_total: int
    preparation_fee: int
    subtotal: int
    discount_amount: int
    total: int
    deposit: int
    amount_paid: int
    balance_due: int
    tariff_name: Optional[str] = None

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "nights": self.nights,
            "weekday_nights": self.weekday_nights,
            "weekend_nights": self.weekend_nights,
            "weekday_rate": format_minor_units(self.weekday_rate),
            "weekend_rate": format_minor_units(self.weekend_rate),
            "rental_total": format_minor_units(self.rental_total),
            "extras_total": format_minor_units(self.extras_total),
            "preparation_fee": format_minor_units(self.preparation_fee),
            "subtotal": format_minor_units(self.subtotal),
            "discount_amount": format_minor_units(self.discount_amount),
            "total": format_minor_units(self.total),
            "deposit": format_minor_units(self.deposit),
            "amount_paid": format_minor_units(self.amount_paid),
            "balance_due": format_minor_units(self.balance_due),
            "tariff_name": self.tariff_name,
        }


@dataclass(frozen=True)
class UnitCandidate:
    class_id: str
    unit_id: Optional[str]
    available: bool
    breakdown: PriceBreakdown

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "class_id": self.class_id,
            "unit_id": self.unit_id,
            "available": self.available,
            "breakdown": self.breakdown.to_api_dict(),
        }


@dataclass(frozen=True)
class Package:
    units: tuple[str, ...]
    class_ids: tuple[str, ...]
    optimal_capacity: int
    maximum_capacity: int
    breakdown: PriceBreakdown

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "units": list(self.units),
            "class_ids": list(self.class_ids),
            "optimal_capacity": self.optimal_capacity,
            "aggregate_capacity": self.maximum_capacity,
            "breakdown": self.breakdown.to_api_dict(),
        }


@dataclass(frozen=True)
class FleetSnapshot:
    """Read-only view of the fleet captured by the host before a computation."""

    units: tuple[ResourceUnit, ...] = ()
    classes: tuple[ResourceClass, ...] = ()
    reservations: tuple[Reservation, ...] = ()
    extras: tuple[Extra, ...] = ()
    tariff_seasons: tuple[TariffSeason, ...] = ()


@dataclass(frozen=True)
class QuoteRequest:
    interval: RequestedInterval
    selected_extras: tuple[SelectedExtra, ...] = ()
    discount: Optional[Discount] = None
    amount_paid: Decimal = Decimal("0")
