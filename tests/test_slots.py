from __future__ import annotations

from datetime import date, datetime, timedelta
from itertools import product

from fleet_engine.domain.models import Slot, SlotInstant
from fleet_engine.domain.slots import (
    instant_index,
    intervals_overlap,
    iter_nights,
    overlaps,
    slot_index,
    to_instant,
    whole_night_count,
)


def _at(day: int, slot: Slot, month: int = 6) -> SlotInstant:
    return SlotInstant(date(2026, month, day), slot)


def test_slot_index_is_two_per_day_with_am_before_pm() -> None:
    origin = date(2026, 6, 10)
    assert slot_index(date(2026, 6, 10), Slot.AM, origin) == 0
    assert slot_index(date(2026, 6, 10), Slot.PM, origin) == 1
    assert slot_index(date(2026, 6, 11), Slot.AM, origin) == 2
    assert slot_index(date(2026, 6, 12), Slot.PM, origin) == 5


def test_slot_index_strictly_increases_across_month_boundary() -> None:
    instants = [
        SlotInstant(date(2026, 1, 30) + timedelta(days=offset), slot)
        for offset in range(5)
        for slot in (Slot.AM, Slot.PM)
    ]
    indexes = [instant_index(instant) for instant in instants]
    assert indexes == sorted(indexes)
    assert len(set(indexes)) == len(indexes)


def test_slot_instant_ordering_matches_slot_index() -> None:
    assert _at(10, Slot.AM) < _at(10, Slot.PM) < _at(11, Slot.AM)
    assert _at(10, Slot.PM) == SlotInstant(date(2026, 6, 10), "PM")


def test_from_datetime_quantizes_to_nearest_anchor() -> None:
    assert SlotInstant.from_datetime(datetime(2026, 6, 10, 9, 30)).slot is Slot.AM
    assert SlotInstant.from_datetime(datetime(2026, 6, 10, 11, 59)).slot is Slot.AM
    assert SlotInstant.from_datetime(datetime(2026, 6, 10, 12, 0)).slot is Slot.PM


def test_to_instant_uses_fixed_check_in_times() -> None:
    assert to_instant(date(2026, 6, 10), Slot.AM) == datetime(2026, 6, 10, 10, 0)
    assert to_instant(date(2026, 6, 10), Slot.PM) == datetime(2026, 6, 10, 15, 0)


def test_overlap_is_symmetric() -> None:
    instants = [_at(day, slot) for day in (10, 11, 12) for slot in (Slot.AM, Slot.PM)]
    intervals = [(a, b) for a, b in product(instants, repeat=2) if a < b]
    for first, second in product(intervals, repeat=2):
        assert intervals_overlap(first, second) == intervals_overlap(second, first)


def test_touching_intervals_do_not_overlap() -> None:
    assert not overlaps(_at(10, Slot.AM), _at(12, Slot.AM), _at(12, Slot.AM), _at(13, Slot.PM))
    assert not overlaps(_at(12, Slot.AM), _at(13, Slot.PM), _at(10, Slot.AM), _at(12, Slot.AM))


def test_overlap_detects_shared_half_day() -> None:
    assert overlaps(_at(10, Slot.PM), _at(12, Slot.AM), _at(11, Slot.AM), _at(13, Slot.AM))
    assert overlaps(_at(10, Slot.AM), _at(14, Slot.AM), _at(11, Slot.PM), _at(12, Slot.AM))


def test_nights_exclude_checkout_date() -> None:
    start, end = _at(10, Slot.PM), _at(13, Slot.AM)
    assert whole_night_count(start, end) == 3
    assert list(iter_nights(start, end)) == [
        date(2026, 6, 10),
        date(2026, 6, 11),
        date(2026, 6, 12),
    ]


def test_same_day_interval_has_no_night() -> None:
    assert whole_night_count(_at(10, Slot.AM), _at(10, Slot.PM)) == 0
    assert list(iter_nights(_at(10, Slot.AM), _at(10, Slot.PM))) == []
