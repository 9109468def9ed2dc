"""Rental Engine - tunable constants."""

from __future__ import annotations

from dataclasses import dataclass

from core.time.temporal import SECONDS_PER_DAY, days_to_seconds


@dataclass(frozen=True)
class RentalConfig:
    """
    overdue_window_days: rent is overdue once strictly more than this
                         many days passed since the last payment.
    seconds_per_day:     length of a "day" for durations and windows.
    event_history_limit: events kept by the default in-memory sink;
                         the oldest are dropped first.
    """

    overdue_window_days: int = 30
    seconds_per_day: int = SECONDS_PER_DAY
    event_history_limit: int = 1000

    def __post_init__(self) -> None:
        for name in ("overdue_window_days", "seconds_per_day", "event_history_limit"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be integer > 0, got {value!r}.")

    @property
    def overdue_window_seconds(self) -> int:
        return days_to_seconds(self.overdue_window_days, self.seconds_per_day)

    def duration_seconds(self, duration_days: int) -> int:
        return days_to_seconds(duration_days, self.seconds_per_day)


DEFAULT_RENTAL_CONFIG = RentalConfig()
