"""
Escrow Core Time — Temporal Helpers
=====================================
Pure functions over integer epoch-second timestamps.
All functions take explicit arguments; no hidden clock access.

Agreement records store timestamps as integer epoch seconds,
with 0 meaning "never happened".
"""

from __future__ import annotations

from datetime import datetime


SECONDS_PER_DAY = 24 * 60 * 60


def to_timestamp(dt: datetime) -> int:
    """Convert a timezone-aware datetime to integer epoch seconds."""
    if dt.tzinfo is None:
        raise ValueError("to_timestamp requires timezone-aware datetime.")
    return int(dt.timestamp())


def days_to_seconds(days: int, seconds_per_day: int = SECONDS_PER_DAY) -> int:
    return days * seconds_per_day


def has_elapsed(since: int, window_seconds: int, now: int) -> bool:
    """
    True iff strictly more than `window_seconds` passed since `since`.

    Exactly `window_seconds` is NOT elapsed.
    """
    return (now - since) > window_seconds


def is_past(deadline: int, now: int) -> bool:
    """True iff `now` is strictly after `deadline` (deadline itself is allowed)."""
    return now > deadline
