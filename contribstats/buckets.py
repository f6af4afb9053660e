"""Map commit timestamps onto calendar-aligned time buckets.

Day, week (Monday start), month and year buckets start at local midnight of
the first day they cover. Three-day buckets follow a fixed grid anchored at
1970-01-01 so consecutive buckets never overlap or leave gaps.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum

from contribstats.errors import ConfigurationError

_EPOCH = date(1970, 1, 1)


class Granularity(str, Enum):
    DAY = "day"
    THREE_DAYS = "3day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, text: str) -> "Granularity":
        """Accept either the value (``3day``) or the member name (``three_days``)."""
        key = text.strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        choices = ", ".join(m.value for m in cls)
        raise ConfigurationError(f"Unknown granularity {text!r} (expected one of: {choices})")


_LABELS = {
    Granularity.DAY: "Day",
    Granularity.THREE_DAYS: "3 days",
    Granularity.WEEK: "Week",
    Granularity.MONTH: "Month",
    Granularity.YEAR: "Year",
}

ALL_GRANULARITIES: tuple[Granularity, ...] = tuple(Granularity)


def _first_day(day: date, granularity: Granularity) -> date:
    if granularity is Granularity.DAY:
        return day
    if granularity is Granularity.THREE_DAYS:
        offset = (day - _EPOCH).days % 3  # Python's modulo keeps pre-1970 dates on the grid
        return day - timedelta(days=offset)
    if granularity is Granularity.WEEK:
        return day - timedelta(days=day.weekday())
    if granularity is Granularity.MONTH:
        return day.replace(day=1)
    if granularity is Granularity.YEAR:
        return day.replace(month=1, day=1)
    raise ValueError(f"Unsupported granularity: {granularity!r}")


def _at_midnight(day: date, tz: tzinfo | None) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def bucket_start(timestamp: datetime, granularity: Granularity, tz: tzinfo | None = None) -> datetime:
    """Return the start of the bucket containing *timestamp*.

    Parameters
    ----------
    timestamp:
        Commit timestamp. Aware timestamps are converted to *tz*; naive ones
        are taken to be in *tz* already.
    granularity:
        Bucket length.
    tz:
        Reference timezone. ``None`` keeps the timestamp's own zone.
    """
    if tz is not None:
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=tz)
        else:
            timestamp = timestamp.astimezone(tz)
    return _at_midnight(_first_day(timestamp.date(), granularity), timestamp.tzinfo)


def next_bucket(start: datetime, granularity: Granularity) -> datetime:
    """Return the start of the bucket that follows the one starting at *start*."""
    day = start.date()
    if granularity is Granularity.DAY:
        following = day + timedelta(days=1)
    elif granularity is Granularity.THREE_DAYS:
        following = day + timedelta(days=3)
    elif granularity is Granularity.WEEK:
        following = day + timedelta(days=7)
    elif granularity is Granularity.MONTH:
        following = date(day.year + 1, 1, 1) if day.month == 12 else date(day.year, day.month + 1, 1)
    elif granularity is Granularity.YEAR:
        following = date(day.year + 1, 1, 1)
    else:
        raise ValueError(f"Unsupported granularity: {granularity!r}")
    return _at_midnight(following, start.tzinfo)


def bucket_range(first: datetime, last: datetime, granularity: Granularity) -> Iterator[datetime]:
    """Yield every bucket start from *first* to *last* inclusive."""
    current = first
    while current <= last:
        yield current
        current = next_bucket(current, granularity)
