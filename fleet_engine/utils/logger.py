"""Process-wide logging setup for the fleet engine.

Every module takes `logger = get_logger(__name__)` and logs one event per
line: a short message, then the event's fields as `key=value` pairs, all
separated by ` | `:

    Package search completed | status=ok | guests=6 | pool_size=6 | k=2

Values go through %-style arguments, never pre-formatted strings, so records
are only rendered when the level is enabled.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from fleet_engine.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Install the stdout handler once; later calls are no-ops.

    `level` overrides `FLEET_LOG_LEVEL`. The engine is imported both as a
    library and behind the HTTP host, so the format lives here rather than
    in app.py.
    """
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, stream=sys.stdout)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
