"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, ReconciliationEntry


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Bookings are changed through the API workflows; the admin only reads them."""

    list_display = (
        "booking_number",
        "property",
        "user",
        "status",
        "check_in",
        "check_out",
        "total",
        "created_at",
    )
    list_filter = ("status", "check_in", "check_out")
    search_fields = ("booking_number", "property__name", "user__email")
    readonly_fields = [field.name for field in Booking._meta.fields]

    def has_add_permission(self, request):  # type: ignore
        return False

    @admin.display(description="Total")
    def total(self, obj: Booking):
        return (obj.pricing or {}).get("total")


@admin.register(ReconciliationEntry)
class ReconciliationEntryAdmin(admin.ModelAdmin):
    list_display = ("booking", "kind", "attempts", "resolved_at", "created_at")
    list_filter = ("kind", "resolved_at")
    search_fields = ("booking__booking_number", "last_error")
    readonly_fields = ("booking", "kind", "payload", "created_at", "updated_at")
