"""Serializers for the finance domain (payments)."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    """Платёжная запись с историей возвратов."""

    refunded_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "transaction_id",
            "booking",
            "user",
            "method",
            "status",
            "amount",
            "currency",
            "refunds",
            "refunded_total",
            "paid_at",
            "refunded_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
