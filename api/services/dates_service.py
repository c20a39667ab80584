"""Calendar-day utilities for habit tracking.

A day identifier is a plain ``datetime.date`` taken in UTC. Strings only
appear at the API boundary, where they are always ``YYYY-MM-DD``.

Wall-clock reads go through a ``Clock`` so statistics can be computed
against a fixed instant.
"""

import re
from datetime import UTC, date, datetime, timedelta
from typing import Protocol

_DAY_ID_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class InvalidDayIdError(ValueError):
    """Raised when a string is not a valid YYYY-MM-DD calendar day."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid day identifier: {value!r} (expected YYYY-MM-DD)")


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Reads the current UTC time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Always returns the same instant. Naive instants are taken as UTC."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def __repr__(self) -> str:
        return f"FixedClock({self._instant.isoformat()})"


SYSTEM_CLOCK = SystemClock()


def resolve_clock(clock: Clock | None) -> Clock:
    return SYSTEM_CLOCK if clock is None else clock


def utc_now(clock: Clock | None = None) -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    now = resolve_clock(clock).now()
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)


def today(clock: Clock | None = None) -> date:
    """Return current UTC date."""
    return utc_now(clock).date()


def to_day_id(timestamp: datetime | date) -> date:
    """Normalize an instant to its UTC calendar day.

    Naive datetimes are assumed to already be UTC (SQLite drops tzinfo).
    Plain dates pass through unchanged.
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            return timestamp.date()
        return timestamp.astimezone(UTC).date()
    return timestamp


def last_n_days(
    n: int,
    *,
    clock: Clock | None = None,
    ascending: bool = False,
) -> list[date]:
    """Return the ``n`` most recent days ending today.

    Most recent first unless ``ascending`` is set.

    Raises:
        ValueError: If ``n`` is negative.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")

    anchor = today(clock)
    days = [anchor - timedelta(days=i) for i in range(n)]
    if ascending:
        days.reverse()
    return days


def parse_day_id(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string.

    Raises:
        InvalidDayIdError: If the format is wrong or the date does not exist.
    """
    if not isinstance(value, str) or not _DAY_ID_RE.fullmatch(value):
        raise InvalidDayIdError(value)
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidDayIdError(value) from e


def format_day_id(day: date) -> str:
    return day.isoformat()
