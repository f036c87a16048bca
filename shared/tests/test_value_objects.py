"""Tests for day keys, DateRange and Money."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shared.domain.value_objects import (
    DateRange,
    Money,
    dates_in_range,
    day_start,
    parse_day,
    to_day_key,
)


class TestDayKeys:
    def test_dates_in_range_is_half_open(self):
        assert dates_in_range("2025-06-01", "2025-06-04") == [
            "2025-06-01",
            "2025-06-02",
            "2025-06-03",
        ]

    def test_empty_and_inverted_ranges(self):
        assert dates_in_range("2025-06-04", "2025-06-04") == []
        assert dates_in_range("2025-06-05", "2025-06-04") == []

    def test_crosses_month_and_leap_day(self):
        assert dates_in_range("2024-02-28", "2024-03-02") == [
            "2024-02-28",
            "2024-02-29",
            "2024-03-01",
        ]

    def test_daylight_saving_switch_does_not_skip_days(self):
        # Europe switches to summer time on the last Sunday of March
        assert dates_in_range("2025-03-29", "2025-04-01") == [
            "2025-03-29",
            "2025-03-30",
            "2025-03-31",
        ]

    def test_parse_day_accepts_timestamps(self):
        assert parse_day("2025-06-01T00:00:00Z") == date(2025, 6, 1)
        assert parse_day("2025-06-01T23:30:00-02:00") == date(2025, 6, 2)
        assert parse_day(datetime(2025, 6, 1, 12, tzinfo=timezone.utc)) == date(2025, 6, 1)

    def test_parse_day_rejects_other_types(self):
        with pytest.raises(TypeError):
            parse_day(20250601)

    def test_day_key_and_day_start(self):
        assert to_day_key(date(2025, 1, 9)) == "2025-01-09"
        assert day_start("2025-01-09").isoformat() == "2025-01-09T00:00:00+00:00"


class TestDateRange:
    def test_requires_start_before_end(self):
        with pytest.raises(ValueError):
            DateRange(date(2025, 6, 5), date(2025, 6, 5))

    def test_back_to_back_ranges_do_not_overlap(self):
        first = DateRange(date(2025, 6, 10), date(2025, 6, 15))
        second = DateRange(date(2025, 6, 15), date(2025, 6, 18))
        assert not first.overlaps_with(second)
        assert first.overlaps_with(DateRange(date(2025, 6, 12), date(2025, 6, 14)))

    def test_nights_and_contains(self):
        stay = DateRange("2025-06-10", "2025-06-13")
        assert len(stay) == 3
        assert stay.contains("2025-06-12")
        assert not stay.contains("2025-06-13")
        assert stay.days()[-1] == "2025-06-12"

    def test_equal_ranges_compare_equal(self):
        start = date(2025, 6, 10)
        assert DateRange(start, start + timedelta(days=2)) == DateRange("2025-06-10", "2025-06-12")


class TestMoney:
    def test_percent_rounds_half_up_to_whole_units(self):
        assert Money(Decimal("450")).percent(Decimal("12.5")).amount == Decimal("56")
        assert Money(Decimal("10")).percent(5).amount == Decimal("1")

    def test_rejects_negative_and_mixed_currencies(self):
        with pytest.raises(ValueError):
            Money(Decimal("-1"))
        with pytest.raises(ValueError):
            Money(Decimal("1"), "USD") + Money(Decimal("1"), "EUR")

    def test_multiplication(self):
        assert (Money(Decimal("150.00")) * 3).amount == Decimal("450.00")
