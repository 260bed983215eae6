"""Clock capability used wherever "now" is needed."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import NamedTuple, Protocol

__all__ = ["UtcTimestamp", "Clock", "SystemClock", "FixedClock", "DEFAULT_CLOCK"]


class UtcTimestamp(NamedTuple):
    """Calendar fields of a UTC instant."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    nanosecond: int = 0


class Clock(Protocol):
    def now(self) -> UtcTimestamp: ...


class SystemClock:
    """Reads the wall clock."""

    def now(self) -> UtcTimestamp:
        current = datetime.now(UTC)
        return UtcTimestamp(
            current.year,
            current.month,
            current.day,
            current.hour,
            current.minute,
            current.second,
            current.microsecond * 1000,
        )


class FixedClock:
    """Always returns the same instant; used for deterministic runs."""

    def __init__(self, timestamp: UtcTimestamp) -> None:
        self.timestamp = timestamp

    def now(self) -> UtcTimestamp:
        return self.timestamp


DEFAULT_CLOCK: Clock = SystemClock()
