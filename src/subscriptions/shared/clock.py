"""Clock port and adapters: the single source of "today" for the domain.

Handlers ask ``get_clock().today()`` instead of reading the wall clock, so
tests can pin the date with a ``FixedClock``.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta

from subscriptions.shared.calendar import normalize


class ClockPort(ABC):
    """Abstract interface for the current calendar day."""

    @abstractmethod
    def today(self) -> date: ...


class SystemClock(ClockPort):
    """Wall clock, truncated to the UTC calendar day."""

    def today(self) -> date:
        return datetime.now(UTC).date()


class FixedClock(ClockPort):
    """Clock pinned to a given day, for tests and replays."""

    def __init__(self, day):
        self._day = normalize(day)

    def today(self) -> date:
        return self._day

    def set(self, day):
        self._day = normalize(day)

    def advance(self, days: int = 1):
        self._day = self._day + timedelta(days=days)


_clock: ClockPort | None = None


def get_clock() -> ClockPort:
    """Return the configured clock (a ``SystemClock`` unless overridden)."""
    global _clock
    if _clock is None:
        _clock = SystemClock()
    return _clock


def set_clock(clock: ClockPort) -> ClockPort:
    global _clock
    _clock = clock
    return clock


def reset_clock():
    """Drop any override and fall back to the system clock (useful for testing)."""
    global _clock
    _clock = None


def today_or(as_of=None) -> date:
    """Resolve an optional explicit day against the configured clock."""
    return normalize(as_of) if as_of else get_clock().today()
