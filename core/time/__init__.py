"""
Escrow Core Time — Public API
===============================
Explicit clock protocol and temporal helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    now_utc,
    set_default_clock,
)
from core.time.temporal import (
    SECONDS_PER_DAY,
    days_to_seconds,
    has_elapsed,
    is_past,
    to_timestamp,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "SECONDS_PER_DAY",
    "days_to_seconds",
    "has_elapsed",
    "is_past",
    "to_timestamp",
]
