"""Tests for the read-only booking admin."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib import admin
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.bookings.admin import BookingAdmin
from apps.bookings.application.command_handlers import CreateBookingCommand, CreateBookingHandler
from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.users.models import User


class BookingAdminTests(TestCase):
    def setUp(self) -> None:
        self.superuser = User.objects.create_superuser(email="root@example.com", password="StrongPass123")
        guest = User.objects.create_user(email="admin-guest@example.com", password="StrongPass123")
        property_obj = Property.objects.create(
            name="Meadow Tent",
            base_price=Decimal("150.00"),
            cleaning_fee=Decimal("50.00"),
            service_fee=Decimal("10.00"),
            tax_rate=Decimal("8.00"),
            max_guests=2,
            status=Property.Status.ACTIVE,
        )
        today = timezone.now().date()
        booking = CreateBookingHandler().handle(
            CreateBookingCommand(
                property_id=property_obj.id,
                user_id=guest.id,
                check_in=today + timedelta(days=10),
                check_out=today + timedelta(days=13),
                guests={"adults": 2},
                contact={"fullName": "Admin Guest", "email": "admin-guest@example.com"},
            )
        )
        self.record = Booking.objects.get(pk=booking.id)

    def test_total_column_reads_pricing(self) -> None:
        model_admin = BookingAdmin(Booking, admin.site)
        self.assertEqual(model_admin.total(self.record), "589.00")

    def test_changelist_renders(self) -> None:
        self.client.force_login(self.superuser)
        response = self.client.get(reverse("admin:bookings_booking_changelist"))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, self.record.booking_number)
        self.assertEqual(self.client.get(reverse("admin:bookings_booking_add")).status_code, 403)
