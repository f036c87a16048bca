"""FilterSet definitions for booking listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters shared by the guest and admin booking lists."""

    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    property = django_filters.NumberFilter(field_name="property_id")
    user = django_filters.NumberFilter(field_name="user_id")
    booking_number = django_filters.CharFilter(lookup_expr="iexact")
    check_in_after = django_filters.DateFilter(field_name="check_in", lookup_expr="gte")
    check_in_before = django_filters.DateFilter(field_name="check_in", lookup_expr="lte")
    check_out_after = django_filters.DateFilter(field_name="check_out", lookup_expr="gte")
    check_out_before = django_filters.DateFilter(field_name="check_out", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = [
            "status",
            "property",
            "user",
            "booking_number",
        ]
