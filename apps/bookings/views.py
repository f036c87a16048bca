"""API views for the booking domain.

Guests create and manage their own bookings; staff review, confirm, reject,
cancel with an explicit refund and complete them. Every state change goes
through a command handler, so the calendar and the booking commit together.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from .application.command_handlers import (
    AddBookingNotesCommand,
    AddBookingNotesHandler,
    AddSpecialRequestsCommand,
    AddSpecialRequestsHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingHandler,
    RecordPaymentCommand,
    RecordPaymentHandler,
    RejectBookingCommand,
    RejectBookingHandler,
    SetAddOnsCommand,
    SetAddOnsHandler,
    UpdateGuestInformationCommand,
    UpdateGuestInformationHandler,
)
from . import queries
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    AddOnsSerializer,
    AdminCancelSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    GuestCancelSerializer,
    GuestInformationSerializer,
    NotesSerializer,
    RecordPaymentSerializer,
    RejectSerializer,
    SpecialRequestsSerializer,
)

UUID_LOOKUP = r"[0-9a-fA-F-]{36}"


class IsBookingOwnerOrAdmin(permissions.BasePermission):
    """Гости видят свои бронирования, администраторы видят все."""

    def has_permission(self, request, view):  # type: ignore
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.user_id == user.id


class BookingResponseMixin:
    """Reads the committed row back and renders it."""

    def booking_response(self, booking_id, http_status=status.HTTP_200_OK):  # type: ignore
        record = queries.get_all_bookings().get(pk=booking_id)
        serializer = BookingSerializer(record, context=self.get_serializer_context())
        return Response(serializer.data, status=http_status)


class BookingViewSet(
    BookingResponseMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Viewset для создания и управления бронированиями гостя."""

    serializer_class = BookingSerializer
    permission_classes = [IsBookingOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = BookingFilterSet
    ordering_fields = ["check_in", "created_at"]
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):  # type: ignore
        return queries.get_user_bookings(self.request.user.id)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = CreateBookingHandler().handle(serializer.to_command(request.user.id))
        return self.booking_response(booking.id, status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def upcoming(self, request):  # type: ignore
        qs = queries.get_upcoming_bookings(request.user.id)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = GuestCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CancelBookingHandler().handle(
            CancelBookingCommand(
                booking_id=booking.pk,
                reason=serializer.validated_data["reason"],
                canceled_by=str(request.user.id),
            )
        )
        return self.booking_response(booking.pk)

    @action(detail=True, methods=["patch"], url_path="guest-information")
    def guest_information(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = GuestInformationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        UpdateGuestInformationHandler().handle(
            UpdateGuestInformationCommand(booking_id=booking.pk, **serializer.to_changes())
        )
        return self.booking_response(booking.pk)

    @action(detail=True, methods=["patch"], url_path="special-requests")
    def special_requests(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = SpecialRequestsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AddSpecialRequestsHandler().handle(
            AddSpecialRequestsCommand(
                booking_id=booking.pk,
                special_requests=serializer.validated_data["special_requests"],
            )
        )
        return self.booking_response(booking.pk)

    @action(detail=True, methods=["put"], url_path="add-ons")
    def add_ons(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = AddOnsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        SetAddOnsHandler().handle(
            SetAddOnsCommand(
                booking_id=booking.pk,
                add_ons=[dict(item) for item in serializer.validated_data["add_ons"]],
            )
        )
        return self.booking_response(booking.pk)

    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = RecordPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        RecordPaymentHandler().handle(
            RecordPaymentCommand(booking_id=booking.pk, **serializer.validated_data)
        )
        return self.booking_response(booking.pk)


class AdminBookingViewSet(BookingResponseMixin, viewsets.ReadOnlyModelViewSet):
    """Booking administration for staff."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAdminUser]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = BookingFilterSet
    ordering_fields = ["check_in", "check_out", "created_at", "status"]
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):  # type: ignore
        return queries.get_all_bookings()

    @action(detail=False, methods=["get"])
    def pending(self, request):  # type: ignore
        qs = self.filter_queryset(queries.get_pending_bookings())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=booking.pk))
        return self.booking_response(booking.pk)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        CompleteBookingHandler().handle(CompleteBookingCommand(booking_id=booking.pk))
        return self.booking_response(booking.pk)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = AdminCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CancelBookingHandler().handle(
            CancelBookingCommand(
                booking_id=booking.pk,
                reason=serializer.validated_data["reason"],
                canceled_by=str(request.user.id),
                refund_amount=serializer.validated_data["refund_amount"],
            )
        )
        return self.booking_response(booking.pk)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        RejectBookingHandler().handle(
            RejectBookingCommand(
                booking_id=booking.pk,
                reason=serializer.validated_data["reason"],
                rejected_by=str(request.user.id),
            )
        )
        return self.booking_response(booking.pk)

    @action(detail=True, methods=["patch"])
    def notes(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = NotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AddBookingNotesHandler().handle(
            AddBookingNotesCommand(booking_id=booking.pk, **serializer.validated_data)
        )
        return self.booking_response(booking.pk)
