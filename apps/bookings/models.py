"""Booking persistence models.

``Booking`` rows are written only through ``BookingRepository``, which keeps
the JSON documents (guests, contact information, pricing, add-ons, payment,
cancellation, notes) in the shape the booking pages read and bumps
``version`` on every save.
"""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """Бронирование объекта размещения."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELED = "canceled", _("Canceled")
        COMPLETED = "completed", _("Completed")
        REJECTED = "rejected", _("Rejected")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_number = models.CharField(max_length=32, unique=True, editable=False)
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    check_in = models.DateField()
    check_out = models.DateField()
    guests = models.JSONField(default=dict)
    contact_information = models.JSONField(default=dict)
    special_requests = models.TextField(blank=True)
    pricing = models.JSONField(default=dict)
    add_ons = models.JSONField(default=list, blank=True)
    payment = models.JSONField(default=dict)
    cancellation = models.JSONField(null=True, blank=True)
    notes = models.JSONField(default=dict, blank=True)
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in", "check_out"], name="booking_property_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
            models.Index(fields=["user", "status"], name="booking_user_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_number} for {self.property_id}"


class ReconciliationEntry(models.Model):
    """A follow-up step that failed after its booking committed."""

    class Kind(models.TextChoices):
        HISTORY_APPEND = "history_append", _("User booking history")
        REFUND_LEDGER = "refund_ledger", _("Refund ledger record")

    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="reconciliation_entries",
    )
    kind = models.CharField(max_length=32, choices=Kind.choices)
    payload = models.JSONField(default=dict)
    attempts = models.PositiveSmallIntegerField(default=1)
    last_error = models.TextField(blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Reconciliation entry")
        verbose_name_plural = _("Reconciliation entries")
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["resolved_at", "attempts"], name="reconciliation_open_idx"),
        ]

    def __str__(self) -> str:
        state = "resolved" if self.resolved_at else f"attempt {self.attempts}"
        return f"{self.kind} for {self.booking_id} ({state})"
