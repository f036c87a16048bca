"""Persistence for the booking aggregate."""

from __future__ import annotations

from django.db.models import QuerySet  # type: ignore

from shared.domain.value_objects import DateRange
from shared.infrastructure.locking import compare_and_set, lock_queryset_if_possible

from .domain.entities import (
    AddOn,
    Booking,
    BookingStatus,
    Cancellation,
    ContactInformation,
    GuestCounts,
    PaymentInfo,
    Pricing,
)
from .models import Booking as BookingModel


class BookingRepository:
    """
    Maps ``bookings.Booking`` rows to ``Booking`` aggregates

    ``save`` is a compare-and-set on ``version``: a booking changed by
    someone else since it was loaded raises ConcurrencyConflict.
    """

    def get(self, booking_id) -> Booking | None:
        record = BookingModel.objects.filter(pk=booking_id).first()
        return self.to_domain(record) if record else None

    def get_for_update(self, booking_id) -> Booking | None:
        record = lock_queryset_if_possible(BookingModel.objects.filter(pk=booking_id)).first()
        return self.to_domain(record) if record else None

    def add(self, booking: Booking) -> Booking:
        BookingModel.objects.create(
            id=booking.id,
            booking_number=booking.booking_number,
            property_id=booking.property_id,
            user_id=booking.user_id,
            version=0,
            created_at=booking.created_at,
            **self._fields(booking),
        )
        booking.version = 0
        return booking

    def save(self, booking: Booking) -> Booking:
        booking.version = compare_and_set(
            BookingModel.objects.filter(pk=booking.id),
            booking.version,
            **self._fields(booking),
        )
        return booking

    @staticmethod
    def _fields(booking: Booking) -> dict:
        return {
            "status": booking.status.value,
            "check_in": booking.stay.start_date,
            "check_out": booking.stay.end_date,
            "guests": booking.guests.to_document(),
            "contact_information": booking.contact.to_document(),
            "special_requests": booking.special_requests,
            "pricing": booking.pricing.to_document(),
            "add_ons": [item.to_document() for item in booking.add_ons],
            "payment": booking.payment.to_document(),
            "cancellation": booking.cancellation.to_document() if booking.cancellation else None,
            "notes": {"public": booking.public_notes, "private": booking.private_notes},
            "updated_at": booking.updated_at,
        }

    @staticmethod
    def to_domain(record: BookingModel) -> Booking:
        notes = record.notes or {}
        return Booking(
            id=record.id,
            booking_number=record.booking_number,
            property_id=record.property_id,
            user_id=record.user_id,
            stay=DateRange(record.check_in, record.check_out),
            guests=GuestCounts.from_document(record.guests or {}),
            contact=ContactInformation.from_document(record.contact_information or {}),
            special_requests=record.special_requests,
            pricing=Pricing.from_document(record.pricing or {}),
            add_ons=[AddOn.from_document(item) for item in record.add_ons or []],
            payment=PaymentInfo.from_document(record.payment or {}),
            status=BookingStatus(record.status),
            cancellation=(
                Cancellation.from_document(record.cancellation) if record.cancellation else None
            ),
            public_notes=notes.get("public", ""),
            private_notes=notes.get("private", ""),
            created_at=record.created_at,
            updated_at=record.updated_at,
            version=record.version,
        )

    def to_domain_list(self, queryset: QuerySet) -> list[Booking]:
        return [self.to_domain(record) for record in queryset]
