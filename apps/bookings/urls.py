"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AdminBookingViewSet, BookingViewSet

admin_router = DefaultRouter()
admin_router.register(r"", AdminBookingViewSet, basename="admin-booking")

router = DefaultRouter()
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = [
    path("admin/", include(admin_router.urls)),
    path("", include(router.urls)),
]
