from datetime import date, datetime, timedelta, timezone

import pytest

from contribstats.buckets import ALL_GRANULARITIES, Granularity, bucket_range, bucket_start, next_bucket
from contribstats.errors import ConfigurationError

UTC = timezone.utc
PLUS_TWO = timezone(timedelta(hours=2))


@pytest.mark.parametrize(
    "granularity, expected",
    [
        (Granularity.DAY, datetime(2025, 3, 15, tzinfo=UTC)),
        (Granularity.WEEK, datetime(2025, 3, 10, tzinfo=UTC)),  # Monday
        (Granularity.MONTH, datetime(2025, 3, 1, tzinfo=UTC)),
        (Granularity.YEAR, datetime(2025, 1, 1, tzinfo=UTC)),
    ],
)
def test_calendar_aligned_buckets(granularity, expected):
    ts = datetime(2025, 3, 15, 17, 45, 12, 345678, tzinfo=UTC)
    assert bucket_start(ts, granularity) == expected


def test_week_spanning_new_year():
    assert bucket_start(datetime(2025, 1, 1, 12, tzinfo=UTC), Granularity.WEEK) == datetime(2024, 12, 30, tzinfo=UTC)


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(1970, 1, 1), date(1970, 1, 1)),
        (date(1970, 1, 3), date(1970, 1, 1)),
        (date(1970, 1, 4), date(1970, 1, 4)),
        (date(1969, 12, 31), date(1969, 12, 29)),
        (date(2025, 1, 1), date(2024, 12, 31)),
        (date(2025, 1, 3), date(2025, 1, 3)),
    ],
)
def test_three_day_grid_is_epoch_anchored(day, expected):
    ts = datetime(day.year, day.month, day.day, 23, 59, tzinfo=UTC)
    start = bucket_start(ts, Granularity.THREE_DAYS)
    assert start.date() == expected
    assert (start.date() - date(1970, 1, 1)).days % 3 == 0


def test_reference_timezone_moves_the_calendar_day():
    ts = datetime(2025, 1, 1, 1, 0, tzinfo=PLUS_TWO)  # 2024-12-31 23:00 UTC
    assert bucket_start(ts, Granularity.DAY, tz=UTC) == datetime(2024, 12, 31, tzinfo=UTC)
    assert bucket_start(ts, Granularity.YEAR, tz=UTC) == datetime(2024, 1, 1, tzinfo=UTC)


def test_without_reference_timezone_keeps_local_calendar():
    ts = datetime(2025, 1, 1, 1, 0, tzinfo=PLUS_TWO)
    start = bucket_start(ts, Granularity.DAY)
    assert start == datetime(2025, 1, 1, tzinfo=PLUS_TWO)
    assert start.tzinfo is PLUS_TWO


def test_naive_timestamp_is_taken_in_reference_zone():
    assert bucket_start(datetime(2025, 6, 1, 8), Granularity.MONTH, tz=UTC) == datetime(2025, 6, 1, tzinfo=UTC)
    assert bucket_start(datetime(2025, 6, 1, 8), Granularity.MONTH).tzinfo is None


@pytest.mark.parametrize("granularity", ALL_GRANULARITIES)
def test_identical_timestamps_bucket_identically(granularity):
    a = datetime(2025, 2, 28, 23, 59, 59, 999999, tzinfo=UTC)
    b = datetime(2025, 2, 28, 23, 59, 59, 999999, tzinfo=UTC)
    assert bucket_start(a, granularity) == bucket_start(b, granularity)


@pytest.mark.parametrize("granularity", ALL_GRANULARITIES)
def test_bucketing_is_monotonic_and_contains_timestamp(granularity):
    base = datetime(2023, 12, 25, 6, tzinfo=UTC)
    stamps = [base + timedelta(hours=13 * i) for i in range(200)]
    starts = [bucket_start(ts, granularity) for ts in stamps]
    assert starts == sorted(starts)
    for ts, start in zip(stamps, starts):
        assert start <= ts < next_bucket(start, granularity)


def test_next_bucket_rolls_months_and_years():
    assert next_bucket(datetime(2024, 12, 1, tzinfo=UTC), Granularity.MONTH) == datetime(2025, 1, 1, tzinfo=UTC)
    assert next_bucket(datetime(2024, 1, 1, tzinfo=UTC), Granularity.YEAR) == datetime(2025, 1, 1, tzinfo=UTC)
    assert next_bucket(datetime(2024, 12, 30, tzinfo=UTC), Granularity.WEEK) == datetime(2025, 1, 6, tzinfo=UTC)


def test_bucket_range_is_contiguous():
    first = datetime(2024, 11, 1, tzinfo=UTC)
    last = datetime(2025, 2, 1, tzinfo=UTC)
    months = list(bucket_range(first, last, Granularity.MONTH))
    assert [m.month for m in months] == [11, 12, 1, 2]
    assert list(bucket_range(last, first, Granularity.MONTH)) == []


@pytest.mark.parametrize(
    "text, expected",
    [
        ("day", Granularity.DAY),
        ("3day", Granularity.THREE_DAYS),
        ("three_days", Granularity.THREE_DAYS),
        (" Week ", Granularity.WEEK),
        ("MONTH", Granularity.MONTH),
    ],
)
def test_parse_granularity(text, expected):
    assert Granularity.parse(text) is expected


def test_parse_unknown_granularity():
    with pytest.raises(ConfigurationError, match="fortnight"):
        Granularity.parse("fortnight")
