"""Tests for the Booking aggregate, pricing and the refund policy."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from apps.bookings.domain.entities import (
    AddOn,
    Booking,
    BookingStatus,
    ContactInformation,
    GuestCounts,
    PaymentStatus,
)
from apps.bookings.domain.events import (
    BookingCanceled,
    BookingConfirmed,
    PaymentRecorded,
)
from apps.bookings.domain.pricing import days_until_check_in, policy_refund, quote_stay
from shared.domain.exceptions import (
    AlreadyCanceled,
    CapacityExceeded,
    InvalidGuestCounts,
    InvalidTransition,
)
from shared.domain.value_objects import DateRange

CHECK_IN = date(2025, 7, 10)
CHECK_OUT = date(2025, 7, 13)


def make_booking(**overrides) -> Booking:
    stay = DateRange(CHECK_IN, CHECK_OUT)
    values = dict(
        booking_number="BK20250601000000ABCDEF",
        property_id=1,
        user_id=7,
        stay=stay,
        guests=GuestCounts(adults=2),
        contact=ContactInformation(full_name="Ada Guest", email="ada@example.com"),
        pricing=quote_stay(
            stay,
            base_price=Decimal("150"),
            cleaning_fee=Decimal("50"),
            service_fee_percent=Decimal("10"),
            tax_rate_percent=Decimal("8"),
        ),
    )
    values.update(overrides)
    return Booking(**values)


def at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


class TestPricing:
    def test_quote_breakdown(self):
        pricing = quote_stay(
            DateRange(CHECK_IN, CHECK_OUT),
            base_price=Decimal("150"),
            cleaning_fee=Decimal("50"),
            service_fee_percent=Decimal("10"),
            tax_rate_percent=Decimal("8"),
        )
        assert pricing.nights == 3
        assert pricing.subtotal == Decimal("450")
        assert pricing.service_fee == Decimal("45")
        # (450 + 50 + 45) * 8% = 43.6, rounded to whole units
        assert pricing.taxes == Decimal("44")
        assert pricing.total == Decimal("589")

    def test_discount_is_clamped_to_total(self):
        pricing = quote_stay(
            DateRange(CHECK_IN, CHECK_OUT),
            base_price=Decimal("100"),
            discount_code="ALL",
            discount_amount=Decimal("10000"),
        )
        assert pricing.total == Decimal("0")
        assert pricing.to_document()["discountCode"] == "ALL"

    def test_document_uses_decimal_strings(self):
        document = make_booking().pricing.to_document()
        assert document["total"] == "589.00"
        assert document["nightlyRate"] == "150.00"
        assert "discountCode" not in document


class TestRefundPolicy:
    def test_days_until_check_in_rounds_up(self):
        assert days_until_check_in(CHECK_IN, at(CHECK_IN - timedelta(days=7), hour=0)) == 7
        assert days_until_check_in(CHECK_IN, at(CHECK_IN - timedelta(days=7), hour=1)) == 7
        assert days_until_check_in(CHECK_IN, at(CHECK_IN - timedelta(days=1), hour=23)) == 1

    def test_full_refund_a_week_ahead(self):
        now = at(CHECK_IN - timedelta(days=7), hour=0)
        assert policy_refund(Decimal("589"), CHECK_IN, now) == Decimal("589")

    def test_half_refund_three_to_six_days_ahead(self):
        now = at(CHECK_IN - timedelta(days=3), hour=0)
        assert policy_refund(Decimal("589"), CHECK_IN, now) == Decimal("295")
        now = at(CHECK_IN - timedelta(days=6), hour=0)
        assert policy_refund(Decimal("100"), CHECK_IN, now) == Decimal("50")

    def test_no_refund_inside_three_days(self):
        now = at(CHECK_IN - timedelta(days=2), hour=0)
        assert policy_refund(Decimal("589"), CHECK_IN, now) == Decimal("0")
        assert policy_refund(Decimal("589"), CHECK_IN, at(CHECK_IN + timedelta(days=1))) == Decimal("0")


class TestGuestCounts:
    def test_capacity_boundary(self):
        GuestCounts(adults=2, children=2, infants=1, pets=2).ensure_fits(4)
        with pytest.raises(CapacityExceeded):
            GuestCounts(adults=3, children=2).ensure_fits(4)

    def test_needs_an_adult(self):
        with pytest.raises(InvalidGuestCounts) as excinfo:
            GuestCounts(adults=0, children=1)
        assert excinfo.value.code == "invalid_guests"

    def test_negative_counts_are_invalid(self):
        with pytest.raises(InvalidGuestCounts):
            GuestCounts(adults=2, pets=-1)


class TestLifecycle:
    def test_confirm_only_from_pending(self):
        booking = make_booking()
        booking.confirm()
        assert booking.status == BookingStatus.CONFIRMED
        assert isinstance(booking.events[-1], BookingConfirmed)
        with pytest.raises(InvalidTransition):
            booking.confirm()

    def test_complete_requires_check_out_started(self):
        booking = make_booking(status=BookingStatus.CONFIRMED)
        with pytest.raises(InvalidTransition):
            booking.complete(at(CHECK_OUT - timedelta(days=1), hour=23))
        booking.complete(at(CHECK_OUT, hour=1))
        assert booking.status == BookingStatus.COMPLETED

    def test_complete_requires_confirmed(self):
        with pytest.raises(InvalidTransition):
            make_booking().complete(at(CHECK_OUT + timedelta(days=1)))

    def test_cancel_records_refund_and_event(self):
        booking = make_booking(status=BookingStatus.CONFIRMED)
        booking.cancel("Change of plans", "7", Decimal("200"), at(CHECK_IN - timedelta(days=10)))

        assert booking.status == BookingStatus.CANCELED
        assert booking.cancellation.refund_amount == Decimal("200")
        assert booking.cancellation.canceled_by == "7"
        assert booking.payment.status == PaymentStatus.REFUNDED
        event = booking.events[-1]
        assert isinstance(event, BookingCanceled)
        assert event.previous_status == "confirmed"
        assert event.refund_amount == Decimal("200")

    def test_full_refund_marks_payment_refunded(self):
        booking = make_booking()
        booking.cancel("Weather", "admin", booking.pricing.total)
        assert booking.payment.status == PaymentStatus.REFUNDED

    def test_zero_refund_keeps_payment_status(self):
        booking = make_booking()
        booking.cancel("No show", "7", Decimal("0"))
        assert booking.payment.status == PaymentStatus.PENDING

    def test_cancel_twice(self):
        booking = make_booking()
        booking.cancel("First", "7")
        with pytest.raises(AlreadyCanceled):
            booking.cancel("Second", "7")

    def test_cannot_cancel_completed(self):
        booking = make_booking(status=BookingStatus.COMPLETED)
        with pytest.raises(InvalidTransition):
            booking.cancel("Too late", "7")

    def test_refund_cannot_exceed_total(self):
        booking = make_booking()
        with pytest.raises(InvalidTransition):
            booking.cancel("Greedy", "admin", booking.pricing.total + 1)
        assert booking.status == BookingStatus.PENDING

    def test_reject_only_pending(self):
        booking = make_booking()
        booking.reject("Property closed", "admin")
        assert booking.status == BookingStatus.REJECTED
        assert "Property closed" in booking.private_notes
        with pytest.raises(InvalidTransition):
            booking.reject()

    def test_record_payment_confirms_pending(self):
        booking = make_booking()
        booking.record_payment("txn_123", "card")

        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment.status == PaymentStatus.PAID
        assert booking.payment.transaction_id == "txn_123"
        assert [type(event) for event in booking.events] == [PaymentRecorded, BookingConfirmed]
        with pytest.raises(InvalidTransition):
            booking.record_payment("txn_456", "card")


class TestEdits:
    def test_add_ons_recompute_total(self):
        booking = make_booking()
        booking.set_add_ons([
            AddOn(id="sauna", name="Private sauna", price=Decimal("40"), quantity=2),
            AddOn(id="breakfast", name="Breakfast basket", price=Decimal("15")),
        ])
        assert booking.add_ons_total == Decimal("95")
        assert booking.pricing.total == Decimal("684")

        booking.set_add_ons([])
        assert booking.pricing.total == Decimal("589")

    def test_no_add_ons_on_terminal_booking(self):
        booking = make_booking(status=BookingStatus.CANCELED)
        with pytest.raises(InvalidTransition):
            booking.set_add_ons([])

    def test_guest_information_only_while_pending(self):
        booking = make_booking()
        booking.update_guest_information(4, guests={"children": 2}, contact={"phone": "+15550001"})
        assert booking.guests.occupants == 4
        assert booking.contact.phone == "+15550001"
        assert booking.contact.full_name == "Ada Guest"

        with pytest.raises(CapacityExceeded):
            booking.update_guest_information(4, guests={"adults": 3})

        booking.confirm()
        with pytest.raises(InvalidTransition):
            booking.update_guest_information(4, contact={"phone": "+1"})

    def test_special_requests_and_notes(self):
        booking = make_booking(status=BookingStatus.CONFIRMED)
        booking.add_special_requests("Late arrival")
        booking.add_notes(public="Gate code sent", private="VIP")
        assert booking.special_requests == "Late arrival"
        assert (booking.public_notes, booking.private_notes) == ("Gate code sent", "VIP")

        booking.complete(at(CHECK_OUT + timedelta(days=1)))
        with pytest.raises(InvalidTransition):
            booking.add_special_requests("Too late")
        booking.add_notes(private="Left a review")
        assert booking.public_notes == "Gate code sent"
