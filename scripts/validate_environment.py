#!/usr/bin/env python3
"""Validate local booking engine environment readiness."""

from __future__ import annotations

import importlib
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fleet_engine.domain.models import (
    FleetSnapshot,
    QuoteRequest,
    RequestedInterval,
    ResourceClass,
    ResourceUnit,
    Slot,
    SlotInstant,
)
from fleet_engine.services.quote_service import BookingQuoteService, SearchStatus
from fleet_engine.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("numpy", "numpy"),
        ("pandas", "pandas"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    from importlib.metadata import version

    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            _ = version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Settings load and pass engine validation
    try:
        service = BookingQuoteService(settings=get_settings())
        ok, line = _print_result(
            "Engine configuration",
            True,
            f": preparation_fee={service.config.preparation_fee} cents",
        )
    except Exception as exc:
        service = None
        ok, line = _print_result("Engine configuration", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Smoke search on a one-boat fleet
    if service is not None:
        try:
            snapshot = FleetSnapshot(
                units=(ResourceUnit("boat-1", "model-a", 4, 6),),
                classes=(ResourceClass("model-a", Decimal("150"), Decimal("200")),),
            )
            request = QuoteRequest(
                interval=RequestedInterval(
                    start=SlotInstant(date(2026, 6, 10), Slot.PM),
                    end=SlotInstant(date(2026, 6, 13), Slot.AM),
                    guest_count=4,
                )
            )
            result = service.search(snapshot, request)
            if result.status is not SearchStatus.OK:
                raise RuntimeError(f"unexpected status {result.status.value}")
            total = result.candidates[0].breakdown.total
            ok, line = _print_result("Smoke search", True, f": total={total} cents")
        except Exception as exc:
            ok, line = _print_result("Smoke search", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Booking Engine Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
