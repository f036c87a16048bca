"""FilterSet definitions for property listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    """FilterSet for Property with the filters used by the catalogue pages."""

    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    property_type = django_filters.ChoiceFilter(choices=Property.PropertyType.choices)
    status = django_filters.ChoiceFilter(choices=Property.Status.choices)
    price_min = django_filters.NumberFilter(field_name="base_price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="base_price", lookup_expr="lte")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")

    class Meta:
        model = Property
        fields = [
            "name",
            "property_type",
            "status",
        ]
