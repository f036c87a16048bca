"""Property API views."""

from __future__ import annotations

from datetime import timedelta

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.exceptions import NotFound
from shared.domain.value_objects import to_day_key

from . import queries, services
from .filters import PropertyFilterSet
from .models import Property
from .serializers import (
    AvailabilityCalendarSerializer,
    BlockedRangeSerializer,
    DateRangeStatusSerializer,
    DateStatusSerializer,
    PropertySerializer,
    PropertyWriteSerializer,
    PublicCalendarDaySerializer,
    PublicCalendarQuerySerializer,
    SeasonalPricingSerializer,
    StayDatesSerializer,
)


class IsStaffOrReadOnly(permissions.BasePermission):
    """Anyone may read; staff and superusers may write."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        return getattr(user, "is_staff", False) or getattr(user, "is_superuser", False)


class PropertyViewSet(viewsets.ModelViewSet):
    """Viewset для управления объектами размещения."""

    queryset = Property.objects.all()
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = [
        "base_price",
        "created_at",
        "max_guests",
        "name",
    ]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if user.is_authenticated and (
            getattr(user, "is_staff", False) or getattr(user, "is_superuser", False)
        ):
            return qs
        return qs.filter(status=Property.Status.ACTIVE)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def perform_create(self, serializer):  # type: ignore
        property_obj = serializer.save()
        services.initialize_availability(property_obj.id)

    @action(detail=True, methods=["get"], url_path="check-availability")
    def check_availability(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        serializer = StayDatesSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        check_in = serializer.validated_data["check_in"]
        check_out = serializer.validated_data["check_out"]
        available = queries.is_range_available(property_obj.id, check_in, check_out)
        return Response(
            {
                "property_id": property_obj.id,
                "check_in": check_in,
                "check_out": check_out,
                "available": available,
            }
        )


class PropertyPublicCalendarView(APIView):
    """Возвращает календарь объекта для публичного отображения."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, property_id):  # type: ignore
        property_obj = services.get_property(property_id)
        if property_obj is None or not property_obj.is_bookable:
            raise NotFound(f"Property {property_id} not found.")
        query = PublicCalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start = query.validated_data["start"]
        end = query.validated_data["end"]

        calendar = services.get_availability(property_obj.id)
        if calendar is None:
            raise NotFound(f"Availability for property {property_obj.id} not found.")

        result = []
        current = start
        while current <= end:
            entry = calendar.entry(current)
            result.append(
                {
                    "date": current,
                    "is_available": calendar.is_day_available(current),
                    "price": calendar.date_price(current, property_obj.base_price),
                    "minimum_stay": (entry.minimum_stay if entry and entry.minimum_stay else property_obj.min_nights),
                }
            )
            current = current + timedelta(days=1)

        serializer = PublicCalendarDaySerializer(result, many=True)
        return Response(
            {
                "property_id": property_obj.id,
                "unavailable_dates": calendar.unavailable_dates(),
                "dates": serializer.data,
            }
        )


class PropertyCalendarViewSet(viewsets.ViewSet):
    """Staff calendar management: dates, blocked ranges and seasonal prices."""

    permission_classes = [permissions.IsAdminUser]

    def retrieve(self, request, property_id=None):  # type: ignore
        services.require_property(property_id)
        calendar = services.get_availability(property_id)
        if calendar is None:
            raise NotFound(f"Availability for property {property_id} not found.")
        return Response(AvailabilityCalendarSerializer(calendar).data)

    @action(detail=False, methods=["post"])
    def initialize(self, request, property_id=None):  # type: ignore
        calendar = services.initialize_availability(property_id)
        return Response(AvailabilityCalendarSerializer(calendar).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["patch"])
    def date(self, request, property_id=None):  # type: ignore
        serializer = DateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        day, changes = serializer.to_update()
        entry = services.set_date_status(
            property_id,
            day,
            is_available=changes.get("isAvailable"),
            price=changes.get("price"),
            minimum_stay=changes.get("minimumStay"),
            notes=changes.get("notes"),
        )
        return Response({"date": day, **entry.to_document()})

    @action(detail=False, methods=["patch"])
    def dates(self, request, property_id=None):  # type: ignore
        serializer = DateRangeStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        applied = services.set_date_range_status(property_id, serializer.to_updates())
        return Response({"dates": {day: entry.to_document() for day, entry in applied.items()}})

    @action(detail=False, methods=["post"], url_path="blocked-ranges")
    def block(self, request, property_id=None):  # type: ignore
        serializer = BlockedRangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        blocked = services.add_blocked_range(
            property_id,
            data["start_date"],
            data["end_date"],
            data.get("reason") or None,
        )
        return Response(blocked.to_document(), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="blocked-ranges/remove")
    def unblock(self, request, property_id=None):  # type: ignore
        serializer = BlockedRangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        restored = services.remove_blocked_range(property_id, data["start_date"], data["end_date"])
        return Response({"restored_dates": restored})

    @action(detail=False, methods=["post"], url_path="seasonal-pricing")
    def seasonal_pricing(self, request, property_id=None):  # type: ignore
        serializer = SeasonalPricingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        days = services.update_seasonal_pricing(
            property_id,
            data["start_date"],
            data["end_date"],
            data["price"],
        )
        return Response(
            {
                "start_date": to_day_key(data["start_date"]),
                "end_date": to_day_key(data["end_date"]),
                "price": data["price"],
                "days": len(days),
            }
        )
