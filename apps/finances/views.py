"""API views for the payment ledger.

Payments are written by the booking workflows (payment recording and
refunds on cancellation); the API only reads them. Guests see payments for
their own bookings, staff see all of them.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore

from .models import Payment
from .serializers import PaymentSerializer


class IsPaymentOwnerOrAdmin(permissions.BasePermission):
    """Only allow the booking owner or admins to read payments."""

    def has_object_permission(self, request, view, obj: Payment) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.booking.user_id == user.id

    def has_permission(self, request, view) -> bool:  # type: ignore
        return bool(request.user and request.user.is_authenticated)


class PaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """Viewset for reading payment objects."""

    queryset = Payment.objects.select_related("booking").all()
    serializer_class = PaymentSerializer
    permission_classes = [IsPaymentOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "booking", "method"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return qs
        return qs.filter(booking__user=user)
