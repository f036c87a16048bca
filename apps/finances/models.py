"""Payment ledger models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Payment(models.Model):
    """Платёж по бронированию и его возвраты."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")
        PARTIALLY_REFUNDED = "partially_refunded", _("Partially refunded")

    class Method(models.TextChoices):
        CARD = "card", _("Card")
        CASH = "cash", _("Cash")
        TRANSFER = "transfer", _("Bank transfer")
        OTHER = "other", _("Other")

    transaction_id = models.CharField(max_length=100, unique=True)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="payments",
        null=True,
        blank=True,
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    method = models.CharField(max_length=20, choices=Method.choices, default=Method.CARD)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="USD")
    refunds = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Payment {self.transaction_id} ({self.status})"

    @property
    def refunded_total(self) -> Decimal:
        return sum((Decimal(str(item["amount"])) for item in self.refunds or []), Decimal("0"))

    def add_refund(self, record: dict) -> bool:
        """Append a refund record; returns False if it was already recorded."""

        refund_id = record.get("transactionId")
        if refund_id and any(item.get("transactionId") == refund_id for item in self.refunds or []):
            return False

        self.refunds = [*(self.refunds or []), record]
        self.status = (
            self.Status.REFUNDED
            if self.refunded_total >= self.amount
            else self.Status.PARTIALLY_REFUNDED
        )
        self.refunded_at = timezone.now()
        self.save(update_fields=["refunds", "status", "refunded_at", "updated_at"])
        return True
