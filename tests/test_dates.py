from datetime import date, datetime

import pytest

from utils.dates import (
    DateRange,
    days_in_year,
    iter_days,
    overlaps,
    parse_range,
    parse_ymd,
    sort_and_dedupe,
    to_exclusive_end,
    to_inclusive_end,
)


def test_overlaps_is_inclusive_on_both_ends():
    a = DateRange(date(2025, 6, 10), date(2025, 6, 12))
    assert overlaps(a, DateRange(date(2025, 6, 12), date(2025, 6, 20)))
    assert overlaps(DateRange(date(2025, 6, 1), date(2025, 6, 10)), a)
    assert not overlaps(a, DateRange(date(2025, 6, 13), date(2025, 6, 14)))


def test_boundary_conversions_cross_month_and_leap_day():
    assert to_inclusive_end(date(2024, 3, 1)) == date(2024, 2, 29)
    assert to_exclusive_end(date(2025, 12, 31)) == date(2026, 1, 1)


def test_date_range_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        DateRange(date(2025, 1, 2), date(2025, 1, 1))


def test_parse_ymd_excludes_malformed_values():
    assert parse_ymd("2025-06-10") == date(2025, 6, 10)
    assert parse_ymd("2025-06-10T12:00:00Z") == date(2025, 6, 10)
    assert parse_ymd(datetime(2025, 6, 10, 23, 59)) == date(2025, 6, 10)
    assert parse_ymd("2025-02-30") is None
    assert parse_ymd("demain") is None
    assert parse_ymd(20250610) is None
    assert parse_ymd(None) is None


def test_parse_range_requires_ordered_dates():
    assert parse_range("2025-01-01", "2025-01-03") == DateRange(date(2025, 1, 1), date(2025, 1, 3))
    assert parse_range("2025-01-03", "2025-01-01") is None
    assert parse_range("2025-01-03", "") is None


def test_sort_and_dedupe_collapses_identical_ranges():
    a = DateRange(date(2025, 3, 1), date(2025, 3, 5))
    b = DateRange(date(2025, 1, 1), date(2025, 1, 2))
    c = DateRange(date(2025, 3, 1), date(2025, 3, 3))
    assert sort_and_dedupe([a, b, a, c, a]) == [b, c, a]


def test_days_in_year_and_iteration():
    assert days_in_year(2024) == 366
    assert days_in_year(2025) == 365
    assert list(iter_days(date(2024, 2, 28), date(2024, 3, 1))) == [
        date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1),
    ]
    assert DateRange(date(2024, 2, 28), date(2024, 3, 1)).days == 3
