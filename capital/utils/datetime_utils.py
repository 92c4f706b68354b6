"""
Datetime utilities.

Provides timezone-aware datetime functions and the injectable clock used
for every time comparison in the engine.
"""

from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return current aware UTC datetime."""
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> datetime:
        return utc_now()


class FrozenClock:
    """
    Manually advanced clock.

    Used by tests and replays to control scheduler time.
    """

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is None:
            start = start.replace(tzinfo=UTC)
        self._now = start.astimezone(UTC)

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> datetime:
        """
        Move the clock forward.

        Args:
            **kwargs: timedelta arguments (hours=24, minutes=5, ...)

        Returns:
            New current time
        """
        self._now = self._now + timedelta(**kwargs)
        return self._now

    def set(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        self._now = moment.astimezone(UTC)


def local_date(moment: datetime, tz: str = "UTC") -> date:
    """
    Get the calendar date of a moment in a business timezone.

    Args:
        moment: Aware datetime
        tz: IANA timezone name

    Returns:
        Local calendar date
    """
    return moment.astimezone(ZoneInfo(tz)).date()


def day_bounds(moment: datetime, tz: str = "UTC") -> tuple[datetime, datetime]:
    """
    Get the UTC [start, end) window of the local day containing moment.

    Args:
        moment: Aware datetime
        tz: IANA timezone name

    Returns:
        Tuple of (day_start_utc, next_day_start_utc)
    """
    zone = ZoneInfo(tz)
    day = moment.astimezone(zone).date()
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(UTC), end.astimezone(UTC)
