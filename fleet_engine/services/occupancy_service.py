"""Half-day occupancy timeline for the dock status view."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from fleet_engine.domain.models import FleetSnapshot, Reservation, ResourceUnit, Slot
from fleet_engine.domain.slots import SLOTS_PER_DAY, instant_index
from fleet_engine.services.availability_service import partition_reservations
from fleet_engine.utils.config import Settings, get_settings
from fleet_engine.utils.logger import get_logger


logger = get_logger(__name__)


class OccupancyValidationError(Exception):
    """Raised when the requested timeline window is invalid."""


def build_slot_matrix(
    units: Sequence[ResourceUnit],
    reservations: Sequence[Reservation],
    start_day: date,
    end_day: date,
) -> np.ndarray:
    """Return a bool matrix (units x slots) over [start_day, end_day].

    Column 2*i is the AM half of day i, 2*i+1 the PM half. A cell is busy when
    a non-cancelled reservation covers that half-day; the checkout slot itself
    stays free because the interval is half-open.
    """
    slot_count = ((end_day - start_day).days + 1) * SLOTS_PER_DAY
    matrix = np.zeros((len(units), slot_count), dtype=bool)
    row_by_unit = {unit.unit_id: row for row, unit in enumerate(units)}
    for reservation in reservations:
        row = row_by_unit.get(reservation.unit_id)
        if row is None or not reservation.status.blocks_unit:
            continue
        first = max(instant_index(reservation.start, origin=start_day), 0)
        last = min(instant_index(reservation.end, origin=start_day), slot_count)
        if first < last:
            matrix[row, first:last] = True
    return matrix


class OccupancyService:
    """Summarises busy and free units per class for each half-day."""

    _COLUMNS = [
        "day",
        "slot",
        "class_id",
        "total_units",
        "busy_units",
        "free_units",
        "occupancy_rate",
    ]

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def build_occupancy_frame(
        self,
        snapshot: FleetSnapshot,
        start_day: date,
        end_day: date,
    ) -> tuple[pd.DataFrame, list[str]]:
        if end_day < start_day:
            raise OccupancyValidationError("end_date must not precede start_date")
        window_days = (end_day - start_day).days + 1
        if window_days > self._settings.max_occupancy_days:
            raise OccupancyValidationError(
                f"occupancy window spans {window_days} days; "
                f"at most {self._settings.max_occupancy_days} are allowed"
            )

        _, warnings = partition_reservations(snapshot.units, snapshot.reservations)
        units = list(snapshot.units)
        matrix = build_slot_matrix(units, snapshot.reservations, start_day, end_day)
        if not units or not snapshot.classes:
            return pd.DataFrame(columns=self._COLUMNS), warnings

        slot_count = matrix.shape[1]
        slot_labels = [
            (start_day + timedelta(days=column // SLOTS_PER_DAY), Slot.AM if column % 2 == 0 else Slot.PM)
            for column in range(slot_count)
        ]
        class_of_unit = np.array([unit.class_id for unit in units])

        rows: list[dict] = []
        for resource_class in snapshot.classes:
            mask = class_of_unit == resource_class.class_id
            total_units = int(mask.sum())
            busy_per_slot = matrix[mask].sum(axis=0) if total_units else np.zeros(slot_count, dtype=int)
            for column, (day, slot) in enumerate(slot_labels):
                busy_units = int(busy_per_slot[column])
                rows.append(
                    {
                        "day": day,
                        "slot": slot.value,
                        "class_id": resource_class.class_id,
                        "total_units": total_units,
                        "busy_units": busy_units,
                        "free_units": total_units - busy_units,
                        "occupancy_rate": (busy_units / total_units) if total_units else 0.0,
                    }
                )

        frame = pd.DataFrame(rows, columns=self._COLUMNS)
        frame = frame.sort_values(by=["day", "slot", "class_id"], kind="stable").reset_index(drop=True)
        logger.info(
            "Occupancy timeline built | start=%s | end=%s | classes=%s | rows=%s",
            start_day.isoformat(),
            end_day.isoformat(),
            len(snapshot.classes),
            len(frame),
        )
        return frame, warnings
