"""Request DTOs: JSON snapshot shapes validated before entering the engine."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from fleet_engine.domain.models import (
    Discount,
    DiscountMode,
    Extra,
    FleetSnapshot,
    PricingMode,
    QuoteRequest,
    RequestedInterval,
    Reservation,
    ReservationStatus,
    ResourceClass,
    ResourceUnit,
    SelectedExtra,
    Slot,
    SlotInstant,
    TariffPeriod,
    TariffSeason,
)


MONTH_DAY_PATTERN = r"^(0[1-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])$"


class SlotInstantModel(BaseModel):
    date: date
    slot: Slot

    def to_domain(self) -> SlotInstant:
        return SlotInstant(day=self.date, slot=self.slot)


class ResourceUnitModel(BaseModel):
    unit_id: str = Field(min_length=1)
    class_id: str = Field(min_length=1)
    optimal_capacity: int = Field(ge=0)
    maximum_capacity: int = Field(ge=0)

    @model_validator(mode="after")
    def validate_capacities(self) -> "ResourceUnitModel":
        if self.maximum_capacity < self.optimal_capacity:
            raise ValueError("maximum_capacity must be >= optimal_capacity")
        return self

    def to_domain(self) -> ResourceUnit:
        return ResourceUnit(
            unit_id=self.unit_id,
            class_id=self.class_id,
            optimal_capacity=self.optimal_capacity,
            maximum_capacity=self.maximum_capacity,
        )


class ResourceClassModel(BaseModel):
    class_id: str = Field(min_length=1)
    name: str = ""
    weekday_rate: Optional[Decimal] = Field(default=None, ge=0)
    weekend_rate: Optional[Decimal] = Field(default=None, ge=0)

    def to_domain(self) -> ResourceClass:
        return ResourceClass(
            class_id=self.class_id,
            weekday_rate=self.weekday_rate,
            weekend_rate=self.weekend_rate,
            name=self.name,
        )


class ReservationModel(BaseModel):
    reservation_id: str = Field(min_length=1)
    unit_id: str = Field(min_length=1)
    start: SlotInstantModel
    end: SlotInstantModel
    status: ReservationStatus = ReservationStatus.CONFIRMED

    @model_validator(mode="after")
    def validate_order(self) -> "ReservationModel":
        if not self.start.to_domain() < self.end.to_domain():
            raise ValueError("reservation start must precede end")
        return self

    def to_domain(self) -> Reservation:
        return Reservation(
            reservation_id=self.reservation_id,
            unit_id=self.unit_id,
            start=self.start.to_domain(),
            end=self.end.to_domain(),
            status=self.status,
        )


class ExtraModel(BaseModel):
    extra_id: str = Field(min_length=1)
    name: str = ""
    price: Decimal = Field(ge=0)
    pricing_mode: PricingMode = PricingMode.PER_STAY
    applicable_class_ids: Optional[list[str]] = None

    def to_domain(self) -> Extra:
        return Extra(
            extra_id=self.extra_id,
            price=self.price,
            pricing_mode=self.pricing_mode,
            name=self.name,
            applicable_class_ids=(
                frozenset(self.applicable_class_ids)
                if self.applicable_class_ids is not None
                else None
            ),
        )


class TariffPeriodModel(BaseModel):
    start: str = Field(pattern=MONTH_DAY_PATTERN)
    end: str = Field(pattern=MONTH_DAY_PATTERN)


class TariffSeasonModel(BaseModel):
    name: str = Field(min_length=1)
    periods: list[TariffPeriodModel] = Field(default_factory=list)

    def to_domain(self) -> TariffSeason:
        return TariffSeason(
            name=self.name,
            periods=tuple(TariffPeriod(start_md=item.start, end_md=item.end) for item in self.periods),
        )


class FleetSnapshotModel(BaseModel):
    units: list[ResourceUnitModel] = Field(default_factory=list)
    classes: list[ResourceClassModel] = Field(default_factory=list)
    reservations: list[ReservationModel] = Field(default_factory=list)
    extras: list[ExtraModel] = Field(default_factory=list)
    tariff_seasons: list[TariffSeasonModel] = Field(default_factory=list)

    @field_validator("units")
    @classmethod
    def validate_unique_units(cls, value: list[ResourceUnitModel]) -> list[ResourceUnitModel]:
        unit_ids = [unit.unit_id for unit in value]
        if len(unit_ids) != len(set(unit_ids)):
            raise ValueError("unit_id values must be unique")
        return value

    def to_domain(self) -> FleetSnapshot:
        return FleetSnapshot(
            units=tuple(item.to_domain() for item in self.units),
            classes=tuple(item.to_domain() for item in self.classes),
            reservations=tuple(item.to_domain() for item in self.reservations),
            extras=tuple(item.to_domain() for item in self.extras),
            tariff_seasons=tuple(item.to_domain() for item in self.tariff_seasons),
        )


class SelectedExtraModel(BaseModel):
    id: str = Field(min_length=1)
    quantity: int = 1


class DiscountModel(BaseModel):
    mode: Optional[DiscountMode] = None
    value: Decimal = Decimal("0")


class SearchRequestModel(BaseModel):
    """Counts and amounts are checked by the engine so errors share one channel."""

    snapshot: FleetSnapshotModel
    start: SlotInstantModel
    end: SlotInstantModel
    guest_count: int
    unit_count: int = 1
    selected_extras: list[SelectedExtraModel] = Field(default_factory=list)
    discount: Optional[DiscountModel] = None
    amount_paid: Decimal = Decimal("0")
    include_unavailable: bool = False

    def to_quote_request(self, default_discount_mode: DiscountMode) -> QuoteRequest:
        discount = None
        if self.discount is not None:
            discount = Discount(
                mode=self.discount.mode or default_discount_mode,
                value=self.discount.value,
            )
        return QuoteRequest(
            interval=RequestedInterval(
                start=self.start.to_domain(),
                end=self.end.to_domain(),
                guest_count=self.guest_count,
                unit_count=self.unit_count,
            ),
            selected_extras=tuple(
                SelectedExtra(extra_id=item.id, quantity=item.quantity)
                for item in self.selected_extras
            ),
            discount=discount,
            amount_paid=self.amount_paid,
        )


class QuoteRequestModel(SearchRequestModel):
    class_id: str = Field(min_length=1)


class OccupancyRequestModel(BaseModel):
    snapshot: FleetSnapshotModel
    start_date: date
    end_date: date
