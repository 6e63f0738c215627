"""Half-day slot arithmetic shared by availability, search and pricing."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from fleet_engine.domain.models import Slot, SlotInstant


SLOTS_PER_DAY = 2


def slot_index(day: date, slot: Slot, origin: Optional[date] = None) -> int:
    """Return the ordinal of (day, slot), two per day, counted from `origin`.

    Without an origin the ordinal is global, which is enough for comparisons.
    Grid renderers pass the first visible day to get 0-based columns.
    """
    base = origin or date.min
    return (day - base).days * SLOTS_PER_DAY + Slot(slot).offset


def instant_index(instant: SlotInstant, origin: Optional[date] = None) -> int:
    return slot_index(instant.day, instant.slot, origin)


def to_instant(day: date, slot: Slot) -> datetime:
    """Check-in/out happens only at 10:00 (AM) or 15:00 (PM) local time."""
    return datetime.combine(day, time(hour=Slot(slot).hour))


def overlaps(
    a_start: SlotInstant,
    a_end: SlotInstant,
    b_start: SlotInstant,
    b_end: SlotInstant,
) -> bool:
    """Half-open overlap test; a checkout and a check-in may share an instant."""
    return a_start < b_end and b_start < a_end


def intervals_overlap(
    a: tuple[SlotInstant, SlotInstant],
    b: tuple[SlotInstant, SlotInstant],
) -> bool:
    return overlaps(a[0], a[1], b[0], b[1])


def whole_night_count(start: SlotInstant, end: SlotInstant) -> int:
    return (end.day - start.day).days


def iter_nights(start: SlotInstant, end: SlotInstant) -> Iterator[date]:
    """Yield each night of the stay; the checkout date is not a night."""
    current = start.day
    while current < end.day:
        yield current
        current += timedelta(days=1)
