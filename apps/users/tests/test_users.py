"""Tests for registration, tokens and the booking history."""

from __future__ import annotations

import uuid

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User
from apps.users.services import append_booking_to_history
from shared.domain.exceptions import NotFound


class RegistrationAPITests(APITestCase):
    def test_register_and_obtain_token(self) -> None:
        response = self.client.post(
            reverse("user-register"),
            {"email": "New.Guest@Example.com", "password": "StrongPass123", "phone": "+15550003"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["booking_history"], [])

        token = self.client.post(
            reverse("auth:token_obtain_pair"),
            {"email": "New.Guest@example.com", "password": "StrongPass123"},
            format="json",
        )
        self.assertEqual(token.status_code, status.HTTP_200_OK, token.data)
        self.assertIn("access", token.data)

    def test_me_requires_authentication(self) -> None:
        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_profile(self) -> None:
        user = User.objects.create_user(email="me@example.com", password="StrongPass123")
        self.client.force_authenticate(user)
        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.data["email"], "me@example.com")

    def test_user_list_is_staff_only(self) -> None:
        user = User.objects.create_user(email="plain@example.com", password="StrongPass123")
        self.client.force_authenticate(user)
        self.assertEqual(self.client.get(reverse("user-list")).status_code, status.HTTP_403_FORBIDDEN)


class BookingHistoryTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="history@example.com", password="StrongPass123")

    def test_append_is_idempotent(self) -> None:
        booking_id = uuid.uuid4()
        append_booking_to_history(self.user.id, booking_id)
        history = append_booking_to_history(self.user.id, booking_id)

        self.assertEqual(history, [str(booking_id)])
        self.user.refresh_from_db()
        self.assertEqual(self.user.booking_history, [str(booking_id)])

    def test_keeps_order(self) -> None:
        first, second = uuid.uuid4(), uuid.uuid4()
        append_booking_to_history(self.user.id, first)
        append_booking_to_history(self.user.id, second)
        self.user.refresh_from_db()
        self.assertEqual(self.user.booking_history, [str(first), str(second)])

    def test_unknown_user(self) -> None:
        with self.assertRaises(NotFound):
            append_booking_to_history(999999, uuid.uuid4())
