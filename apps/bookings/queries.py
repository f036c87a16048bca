"""Read-side queries over bookings.

Listing pages read ``bookings.Booking`` rows directly; single bookings used
by workflows are returned as ``Booking`` aggregates.
"""

from __future__ import annotations

from datetime import date

from django.db.models import QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import NotFound

from .domain.entities import Booking
from .models import Booking as BookingModel
from .repositories import BookingRepository

booking_repo = BookingRepository()

ACTIVE_STATUSES = (BookingModel.Status.PENDING, BookingModel.Status.CONFIRMED)


def _bookings() -> QuerySet:
    return BookingModel.objects.select_related("property", "user")


def get_booking(booking_id) -> Booking:
    booking = booking_repo.get(booking_id)
    if booking is None:
        raise NotFound(f"Booking {booking_id} not found.", booking_id=str(booking_id))
    return booking


def get_user_bookings(user_id, status: str | None = None) -> QuerySet:
    qs = _bookings().filter(user_id=user_id)
    if status:
        qs = qs.filter(status=status)
    return qs


def get_property_bookings(property_id, status: str | None = None) -> QuerySet:
    qs = _bookings().filter(property_id=property_id)
    if status:
        qs = qs.filter(status=status)
    return qs


def get_pending_bookings() -> QuerySet:
    """Bookings awaiting confirmation, oldest first."""

    return _bookings().filter(status=BookingModel.Status.PENDING).order_by("created_at")


def get_upcoming_bookings(user_id=None, today: date | None = None) -> QuerySet:
    """Pending and confirmed stays that have not started yet, soonest first."""

    today = today or timezone.now().date()
    qs = _bookings().filter(status__in=ACTIVE_STATUSES, check_in__gte=today)
    if user_id is not None:
        qs = qs.filter(user_id=user_id)
    return qs.order_by("check_in")


def get_all_bookings() -> QuerySet:
    return _bookings().all()
