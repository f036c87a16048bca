"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property, PropertyAvailability


class PropertyAvailabilityInline(admin.StackedInline):
    model = PropertyAvailability
    extra = 0
    can_delete = False
    fields = ("version", "last_updated", "blocked_ranges")
    readonly_fields = ("version", "last_updated", "blocked_ranges")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "property_type",
        "status",
        "base_price",
        "max_guests",
        "min_nights",
    )
    list_filter = ("status", "property_type")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}
    inlines = (PropertyAvailabilityInline,)
    readonly_fields = ("created_at", "updated_at")


@admin.register(PropertyAvailability)
class PropertyAvailabilityAdmin(admin.ModelAdmin):
    """Read-only view; calendar edits go through the calendar API."""

    list_display = ("property", "version", "last_updated")
    search_fields = ("property__name",)
    readonly_fields = ("property", "dates", "blocked_ranges", "version", "last_updated")

    def has_add_permission(self, request):  # type: ignore
        return False
