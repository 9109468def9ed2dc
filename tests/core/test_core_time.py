"""
Tests for core.time — Clock protocol and timestamp helpers.
"""

import pytest
from datetime import datetime, timezone, timedelta

from core.time.clock import (
    FixedClock,
    SystemClock,
    set_default_clock,
    get_default_clock,
    now_utc,
)
from core.time.temporal import (
    SECONDS_PER_DAY,
    days_to_seconds,
    has_elapsed,
    is_past,
    to_timestamp,
)


# ── Clock Tests ──────────────────────────────────────────────

class TestSystemClock:
    def test_returns_utc_datetime(self):
        dt = SystemClock().now_utc()
        assert dt.tzinfo == timezone.utc


class TestFixedClock:
    def test_returns_fixed_time(self):
        fixed = datetime(2026, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        assert clock.now_utc() == fixed
        assert clock.now_utc() == fixed

    def test_rejects_naive_datetime(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2026, 1, 1))

    def test_advance(self):
        fixed = datetime(2026, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        clock.advance(60)
        assert clock.now_utc() == fixed + timedelta(seconds=60)

    def test_advance_days(self):
        fixed = datetime(2026, 6, 15, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        clock.advance_days(10)
        assert clock.now_utc() == fixed + timedelta(days=10)


class TestDefaultClock:
    def test_set_and_get_default(self):
        original = get_default_clock()
        fixed = FixedClock(datetime(2026, 1, 1, tzinfo=timezone.utc))
        set_default_clock(fixed)
        try:
            assert get_default_clock() is fixed
            assert now_utc() == datetime(2026, 1, 1, tzinfo=timezone.utc)
        finally:
            set_default_clock(original)


# ── Temporal Helpers ─────────────────────────────────────────

class TestTimestamps:
    def test_to_timestamp(self):
        assert to_timestamp(datetime(1970, 1, 2, tzinfo=timezone.utc)) == SECONDS_PER_DAY

    def test_to_timestamp_rejects_naive(self):
        with pytest.raises(ValueError):
            to_timestamp(datetime(2026, 1, 1))

    def test_days_to_seconds(self):
        assert days_to_seconds(30) == 30 * 86400
        assert days_to_seconds(2, seconds_per_day=10) == 20

    def test_has_elapsed_is_strict(self):
        assert has_elapsed(100, 50, 150) is False
        assert has_elapsed(100, 50, 151) is True

    def test_is_past_allows_deadline_itself(self):
        assert is_past(1000, 1000) is False
        assert is_past(1000, 1001) is True
