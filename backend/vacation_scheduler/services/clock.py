from __future__ import annotations

from datetime import date, datetime
from typing import Protocol, runtime_checkable
from zoneinfo import ZoneInfo

from vacation_scheduler.config import get_settings


@runtime_checkable
class Clock(Protocol):
    """Source of "today" for eligibility and advance-day rules."""

    def today(self) -> date:
        """Return the current calendar date."""
        ...


class SystemClock:
    """Wall clock in the configured time zone."""

    def __init__(self, timezone: str | None = None) -> None:
        self._tz = ZoneInfo(timezone or get_settings().timezone)

    def today(self) -> date:
        return datetime.now(self._tz).date()


class FixedClock:
    """Clock pinned to a given date, for tests and replays."""

    def __init__(self, current: date) -> None:
        self.current = current

    def today(self) -> date:
        return self.current


_clock: Clock | None = None


def get_clock() -> Clock:
    """Return the process clock, creating the system clock on first use."""
    global _clock
    if _clock is None:
        _clock = SystemClock()
    return _clock


def set_clock(clock: Clock | None) -> None:
    """Override the clock (for testing). Passing None restores the system clock."""
    global _clock
    _clock = clock
