"""Tests for the AvailabilityCalendar aggregate."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from apps.properties.domain.availability import AvailabilityCalendar, DayEntry
from shared.domain.exceptions import (
    BlockedRangeOverlap,
    InvalidDateRange,
    NotFound,
    Unavailable,
)

START = date(2025, 6, 1)


def make_calendar(days: int = 30) -> AvailabilityCalendar:
    return AvailabilityCalendar.initial(property_id=1, start=START, horizon_days=days)


class TestRangeAvailability:
    def test_fresh_calendar_is_available(self):
        calendar = make_calendar()
        assert len(calendar.dates) == 30
        assert calendar.is_range_available("2025-06-01", "2025-06-05")

    def test_missing_days_fail_closed(self):
        calendar = make_calendar(days=5)
        assert not calendar.is_range_available("2025-06-04", "2025-06-08")
        assert not calendar.is_day_available("2025-07-01")

    def test_empty_range_is_unavailable(self):
        calendar = make_calendar()
        assert not calendar.is_range_available("2025-06-05", "2025-06-05")
        assert not calendar.is_range_available("2025-06-06", "2025-06-05")

    def test_blocked_range_wins_over_day_entries(self):
        calendar = make_calendar()
        calendar.add_blocked_range("2025-06-10", "2025-06-12", "Maintenance")
        # A day entry reopened behind the block's back still does not count
        calendar.dates["2025-06-10"] = DayEntry(is_available=True)

        assert not calendar.is_range_available("2025-06-09", "2025-06-11")
        assert not calendar.is_day_available("2025-06-10")

    def test_touching_block_boundaries_do_not_overlap(self):
        calendar = make_calendar()
        calendar.add_blocked_range("2025-06-10", "2025-06-12")
        assert calendar.is_range_available("2025-06-05", "2025-06-10")
        assert calendar.is_range_available("2025-06-12", "2025-06-15")

    def test_unavailable_dates_are_sorted_and_unique(self):
        calendar = make_calendar()
        calendar.set_date_status("2025-06-20", is_available=False)
        calendar.add_blocked_range("2025-06-03", "2025-06-05")
        assert calendar.unavailable_dates() == ["2025-06-03", "2025-06-04", "2025-06-20"]


class TestDayEdits:
    def test_set_date_status_preserves_other_fields(self):
        calendar = make_calendar()
        calendar.set_date_status("2025-06-02", price=Decimal("180"), minimum_stay=2)
        entry = calendar.set_date_status("2025-06-02", is_available=False)

        assert entry.is_available is False
        assert entry.price == Decimal("180")
        assert entry.minimum_stay == 2

    def test_set_date_status_creates_missing_day_as_available(self):
        calendar = make_calendar(days=1)
        entry = calendar.set_date_status("2025-08-01", notes="Opened late")
        assert entry.is_available is True
        assert entry.notes == "Opened late"

    def test_cannot_open_a_day_held_by_a_booking(self):
        calendar = make_calendar()
        calendar.reserve(uuid4(), "2025-06-05", "2025-06-07")
        with pytest.raises(Unavailable):
            calendar.set_date_status("2025-06-05", is_available=True)

    def test_batched_updates_are_all_or_nothing(self):
        calendar = make_calendar()
        calendar.add_blocked_range("2025-06-10", "2025-06-11")
        with pytest.raises(Unavailable):
            calendar.set_date_range_status({
                "2025-06-09": {"price": 200},
                "2025-06-10": {"isAvailable": True},
            })
        assert calendar.entry("2025-06-09").price is None

    def test_seasonal_pricing_keeps_availability(self):
        calendar = make_calendar()
        calendar.set_date_status("2025-06-03", is_available=False)
        days = calendar.update_seasonal_pricing("2025-06-02", "2025-06-05", Decimal("220"))

        assert days == ["2025-06-02", "2025-06-03", "2025-06-04"]
        assert calendar.entry("2025-06-03").is_available is False
        assert calendar.date_price("2025-06-03", Decimal("150")) == Decimal("220")
        assert calendar.date_price("2025-06-05", Decimal("150")) == Decimal("150")

    def test_seasonal_pricing_rejects_empty_range(self):
        with pytest.raises(InvalidDateRange):
            make_calendar().update_seasonal_pricing("2025-06-05", "2025-06-05", Decimal("1"))


class TestBlockedRanges:
    def test_block_marks_days_with_reason(self):
        calendar = make_calendar()
        blocked = calendar.add_blocked_range("2025-06-10", "2025-06-13", "Owner stay")

        assert blocked.to_document() == {
            "startDate": "2025-06-10T00:00:00+00:00",
            "endDate": "2025-06-13T00:00:00+00:00",
            "reason": "Owner stay",
        }
        assert calendar.entry("2025-06-12").notes == "Owner stay"
        assert calendar.entry("2025-06-13").is_available is True

    def test_overlapping_blocks_are_rejected(self):
        calendar = make_calendar()
        calendar.add_blocked_range("2025-06-10", "2025-06-13")
        with pytest.raises(BlockedRangeOverlap):
            calendar.add_blocked_range("2025-06-12", "2025-06-15")
        calendar.add_blocked_range("2025-06-13", "2025-06-15")
        assert len(calendar.blocked_ranges) == 2

    def test_inverted_block_is_rejected(self):
        with pytest.raises(InvalidDateRange):
            make_calendar().add_blocked_range("2025-06-10", "2025-06-10")

    def test_remove_block_restores_free_days(self):
        calendar = make_calendar()
        calendar.add_blocked_range("2025-06-10", "2025-06-13")
        restored = calendar.remove_blocked_range("2025-06-10", "2025-06-13")

        assert restored == ["2025-06-10", "2025-06-11", "2025-06-12"]
        assert calendar.is_range_available("2025-06-10", "2025-06-13")

    def test_remove_block_does_not_free_booked_days(self):
        calendar = make_calendar()
        booking_id = uuid4()
        calendar.reserve(booking_id, "2025-06-10", "2025-06-12")
        calendar.add_blocked_range("2025-06-09", "2025-06-14")

        restored = calendar.remove_blocked_range("2025-06-09", "2025-06-14")

        assert restored == ["2025-06-09", "2025-06-12", "2025-06-13"]
        assert calendar.entry("2025-06-10").booking_id == str(booking_id)
        assert not calendar.is_range_available("2025-06-10", "2025-06-11")

    def test_remove_unknown_block(self):
        with pytest.raises(NotFound):
            make_calendar().remove_blocked_range("2025-06-10", "2025-06-13")


class TestBookingMarks:
    def test_reserve_then_second_reserve_fails(self):
        calendar = make_calendar()
        first = uuid4()
        assert calendar.reserve(first, "2025-06-05", "2025-06-08") == [
            "2025-06-05",
            "2025-06-06",
            "2025-06-07",
        ]
        with pytest.raises(Unavailable):
            calendar.reserve(uuid4(), "2025-06-07", "2025-06-09")
        assert calendar.bookings_holding("2025-06-01", "2025-06-30") == [str(first)]

    def test_back_to_back_stays(self):
        calendar = make_calendar()
        calendar.reserve(uuid4(), "2025-06-05", "2025-06-08")
        calendar.reserve(uuid4(), "2025-06-08", "2025-06-10")
        assert calendar.entry("2025-06-08").notes == "Booked"

    def test_release_only_frees_own_days(self):
        calendar = make_calendar()
        first, second = uuid4(), uuid4()
        calendar.reserve(first, "2025-06-05", "2025-06-08")
        calendar.reserve(second, "2025-06-08", "2025-06-10")

        released = calendar.release_booking(first, "2025-06-05", "2025-06-10")

        assert released == ["2025-06-05", "2025-06-06", "2025-06-07"]
        assert calendar.entry("2025-06-08").booking_id == str(second)

    def test_release_keeps_blocked_days_closed(self):
        calendar = make_calendar()
        booking_id = uuid4()
        calendar.reserve(booking_id, "2025-06-05", "2025-06-08")
        calendar.add_blocked_range("2025-06-07", "2025-06-09", "Repairs")

        released = calendar.release_booking(booking_id, "2025-06-05", "2025-06-08")

        assert released == ["2025-06-05", "2025-06-06"]
        assert calendar.entry("2025-06-07").is_available is False
        assert calendar.entry("2025-06-07").notes == "Repairs"
        assert calendar.entry("2025-06-07").booking_id is None
