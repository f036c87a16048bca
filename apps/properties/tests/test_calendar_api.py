"""Tests for property calendar management and the public calendar API."""

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


class PropertyCalendarAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="calendar-admin@example.com",
            password="StrongPass123",
            is_staff=True,
        )
        self.guest = User.objects.create_user(
            email="calendar-guest@example.com",
            password="StrongPass123",
        )
        self.property = Property.objects.create(
            name="Aurora Dome",
            base_price=Decimal("150.00"),
            min_nights=2,
            status=Property.Status.ACTIVE,
        )
        self.today = timezone.now().date()
        self.client.force_authenticate(self.admin)

    def _url(self, name, property_id=None):
        return reverse(name, kwargs={"property_id": property_id or self.property.id})

    def _day(self, offset: int) -> str:
        return str(self.today + timedelta(days=offset))

    def test_initialize_creates_calendar_once(self) -> None:
        response = self.client.post(self._url("property-calendar-initialize"))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(len(response.data["dates"]), 365)

        services.set_date_status(self.property.id, self._day(3), is_available=False)
        again = self.client.post(self._url("property-calendar-initialize"))
        self.assertEqual(again.status_code, status.HTTP_201_CREATED)
        self.assertFalse(again.data["dates"][self._day(3)]["isAvailable"])
        self.assertEqual(PropertyAvailability.objects.filter(property=self.property).count(), 1)

    def test_retrieve_without_calendar_is_not_found(self) -> None:
        response = self.client.get(self._url("property-calendar"))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_set_single_date_initializes_missing_calendar(self) -> None:
        payload = {"date": self._day(5), "is_available": False, "notes": "Deep clean"}
        response = self.client.patch(self._url("property-calendar-date"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["isAvailable"], False)

        record = PropertyAvailability.objects.get(property=self.property)
        self.assertEqual(record.dates[self._day(5)], {"isAvailable": False, "notes": "Deep clean"})
        self.assertEqual(record.version, 1)

    def test_batch_dates_update(self) -> None:
        payload = {
            "updates": [
                {"date": self._day(1), "price": "199.00"},
                {"date": self._day(2), "is_available": False},
            ]
        }
        response = self.client.patch(self._url("property-calendar-dates"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["dates"][self._day(1)], {"isAvailable": True, "price": 199.0})

    def test_batch_rejects_duplicate_dates(self) -> None:
        payload = {"updates": [{"date": self._day(1)}, {"date": self._day(1)}]}
        response = self.client.patch(self._url("property-calendar-dates"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_block_and_unblock(self) -> None:
        payload = {"start_date": self._day(10), "end_date": self._day(13), "reason": "Maintenance"}
        response = self.client.post(self._url("property-calendar-block"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["reason"], "Maintenance")

        overlap = {"start_date": self._day(12), "end_date": self._day(15)}
        response = self.client.post(self._url("property-calendar-block"), overlap, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "blocked_range_overlap")

        response = self.client.post(self._url("property-calendar-unblock"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["restored_dates"], [self._day(10), self._day(11), self._day(12)])

    def test_unblock_unknown_range(self) -> None:
        services.initialize_availability(self.property.id)
        payload = {"start_date": self._day(10), "end_date": self._day(13)}
        response = self.client.post(self._url("property-calendar-unblock"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_seasonal_pricing(self) -> None:
        payload = {"start_date": self._day(20), "end_date": self._day(23), "price": "240.00"}
        response = self.client.post(self._url("property-calendar-seasonal-pricing"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(
            services.get_date_price(self.property.id, self._day(21)),
            Decimal("240"),
        )
        self.assertEqual(
            services.get_date_price(self.property.id, self._day(23)),
            Decimal("150.00"),
        )

    def test_calendar_management_requires_staff(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(self._url("property-calendar-initialize"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_public_calendar(self) -> None:
        services.initialize_availability(self.property.id)
        services.add_blocked_range(self.property.id, self._day(2), self._day(4), "Owner stay")
        services.set_date_status(self.property.id, self._day(0), price=Decimal("175"), minimum_stay=3)

        self.client.force_authenticate(None)
        response = self.client.get(
            self._url("property-calendar-public"),
            {"start": self._day(0), "end": self._day(3)},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        days = response.data["dates"]
        self.assertEqual(len(days), 4)
        self.assertEqual(days[0]["price"], "175.00")
        self.assertEqual(days[0]["minimum_stay"], 3)
        self.assertEqual(days[1]["minimum_stay"], 2)
        self.assertTrue(days[1]["is_available"])
        self.assertFalse(days[2]["is_available"])
        self.assertEqual(response.data["unavailable_dates"], [self._day(2), self._day(3)])

    def test_public_calendar_hidden_for_inactive_property(self) -> None:
        self.property.status = Property.Status.INACTIVE
        self.property.save()
        self.client.force_authenticate(None)
        response = self.client.get(
            self._url("property-calendar-public"),
            {"start": self._day(0), "end": self._day(3)},
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
