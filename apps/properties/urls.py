"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PropertyCalendarViewSet, PropertyPublicCalendarView, PropertyViewSet

router = DefaultRouter()
router.register(r"", PropertyViewSet, basename="property")

calendar_detail = PropertyCalendarViewSet.as_view({"get": "retrieve"})
calendar_initialize = PropertyCalendarViewSet.as_view({"post": "initialize"})
calendar_date = PropertyCalendarViewSet.as_view({"patch": "date"})
calendar_dates = PropertyCalendarViewSet.as_view({"patch": "dates"})
calendar_block = PropertyCalendarViewSet.as_view({"post": "block"})
calendar_unblock = PropertyCalendarViewSet.as_view({"post": "unblock"})
calendar_seasonal = PropertyCalendarViewSet.as_view({"post": "seasonal_pricing"})

urlpatterns = [
    # Public calendar
    path(
        "<int:property_id>/calendar/public/",
        PropertyPublicCalendarView.as_view(),
        name="property-calendar-public",
    ),
    # Calendar management (staff)
    path("<int:property_id>/calendar/", calendar_detail, name="property-calendar"),
    path(
        "<int:property_id>/calendar/initialize/",
        calendar_initialize,
        name="property-calendar-initialize",
    ),
    path("<int:property_id>/calendar/date/", calendar_date, name="property-calendar-date"),
    path("<int:property_id>/calendar/dates/", calendar_dates, name="property-calendar-dates"),
    path(
        "<int:property_id>/calendar/blocked-ranges/",
        calendar_block,
        name="property-calendar-block",
    ),
    path(
        "<int:property_id>/calendar/blocked-ranges/remove/",
        calendar_unblock,
        name="property-calendar-unblock",
    ),
    path(
        "<int:property_id>/calendar/seasonal-pricing/",
        calendar_seasonal,
        name="property-calendar-seasonal-pricing",
    ),
    path("", include(router.urls)),
]
