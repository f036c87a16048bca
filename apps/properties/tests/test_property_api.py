"""Tests for the property directory API."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.properties import services
from apps.properties.models import Property, PropertyAvailability
from apps.users.models import User


class PropertyAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="property-admin@example.com",
            password="StrongPass123",
            is_staff=True,
        )
        self.guest = User.objects.create_user(
            email="property-guest@example.com",
            password="StrongPass123",
        )
        self.active = Property.objects.create(
            name="Forest Treehouse",
            property_type=Property.PropertyType.TREEHOUSE,
            base_price=Decimal("210.00"),
            max_guests=4,
            status=Property.Status.ACTIVE,
        )
        self.draft = Property.objects.create(
            name="Lakeside Yurt",
            property_type=Property.PropertyType.YURT,
            base_price=Decimal("95.00"),
            status=Property.Status.DRAFT,
        )
        self.today = timezone.now().date()

    def test_guests_only_see_active_properties(self) -> None:
        response = self.client.get(reverse("property-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [item["id"] for item in response.data["results"]]
        self.assertEqual(ids, [self.active.id])

    def test_staff_see_all_properties(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse("property-list"))
        self.assertEqual(response.data["count"], 2)

    def test_filter_by_guest_capacity(self) -> None:
        response = self.client.get(reverse("property-list"), {"guests": 5})
        self.assertEqual(response.data["count"], 0)
        response = self.client.get(reverse("property-list"), {"guests": 4})
        self.assertEqual(response.data["count"], 1)

    def test_create_property_initializes_calendar(self) -> None:
        self.client.force_authenticate(self.admin)
        payload = {
            "name": "Desert Dome",
            "property_type": Property.PropertyType.DOME,
            "status": Property.Status.ACTIVE,
            "max_guests": 2,
            "base_price": "180.00",
            "cleaning_fee": "40.00",
            "service_fee": "10.00",
            "tax_rate": "8.00",
        }
        response = self.client.post(reverse("property-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        created = Property.objects.get(name="Desert Dome")
        self.assertEqual(created.slug, "desert-dome")
        availability = PropertyAvailability.objects.get(property=created)
        self.assertEqual(len(availability.dates), 365)
        self.assertIn(str(self.today), availability.dates)

    def test_create_property_rejects_unsupported_currency(self) -> None:
        self.client.force_authenticate(self.admin)
        payload = {
            "name": "Tokyo Pod",
            "status": Property.Status.ACTIVE,
            "max_guests": 2,
            "base_price": "120.00",
            "currency": "JPY",
        }
        response = self.client.post(reverse("property-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("currency", response.data)
        self.assertFalse(Property.objects.filter(name="Tokyo Pod").exists())

        response = self.client.patch(
            reverse("property-detail", kwargs={"pk": self.active.id}),
            {"currency": "JPY"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.active.refresh_from_db()
        self.assertEqual(self.active.currency, "USD")

    def test_guest_cannot_create_property(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(
            reverse("property-list"),
            {"name": "Nope", "base_price": "10.00"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_check_availability(self) -> None:
        services.initialize_availability(self.active.id)
        services.add_blocked_range(
            self.active.id,
            self.today + timedelta(days=5),
            self.today + timedelta(days=7),
        )
        url = reverse("property-check-availability", kwargs={"pk": self.active.id})

        free = self.client.get(url, {
            "check_in": str(self.today + timedelta(days=1)),
            "check_out": str(self.today + timedelta(days=5)),
        })
        self.assertEqual(free.status_code, status.HTTP_200_OK, free.data)
        self.assertTrue(free.data["available"])

        blocked = self.client.get(url, {
            "check_in": str(self.today + timedelta(days=4)),
            "check_out": str(self.today + timedelta(days=6)),
        })
        self.assertFalse(blocked.data["available"])

    def test_check_availability_without_calendar(self) -> None:
        url = reverse("property-check-availability", kwargs={"pk": self.active.id})
        response = self.client.get(url, {
            "check_in": str(self.today + timedelta(days=1)),
            "check_out": str(self.today + timedelta(days=2)),
        })
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_check_availability_rejects_inverted_dates(self) -> None:
        services.initialize_availability(self.active.id)
        url = reverse("property-check-availability", kwargs={"pk": self.active.id})
        response = self.client.get(url, {
            "check_in": str(self.today + timedelta(days=3)),
            "check_out": str(self.today + timedelta(days=3)),
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
