"""Injectable time source.

Everything that keys data by calendar day (content cache, snapshots, meme
fallback rotation) asks a ``Clock`` instead of calling ``datetime.now()``
directly, so tests can pin the day.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        """Current time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)


def utc_day(clock: Clock) -> date:
    """Calendar day in UTC, used for content cache keys."""
    return clock.now().astimezone(UTC).date()


def local_day(clock: Clock, tz_name: str) -> date:
    """Calendar day in ``tz_name``."""
    return clock.now().astimezone(ZoneInfo(tz_name)).date()


def day_of(moment: datetime) -> date:
    """UTC calendar day of a stored timestamp (naive values are treated as UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).date()


_default_clock: Clock = SystemClock()


def get_clock() -> Clock:
    return _default_clock
