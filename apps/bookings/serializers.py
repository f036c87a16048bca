"""Serializers for the booking domain."""

from __future__ import annotations

from decimal import Decimal

from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.finances.models import Payment

from .application.command_handlers import CreateBookingCommand
from .models import Booking


def _is_staff(user) -> bool:
    return bool(user and (getattr(user, "is_staff", False) or getattr(user, "is_superuser", False)))


class GuestCountsSerializer(serializers.Serializer):
    adults = serializers.IntegerField(min_value=1, default=1)
    children = serializers.IntegerField(min_value=0, default=0)
    infants = serializers.IntegerField(min_value=0, default=0)
    pets = serializers.IntegerField(min_value=0, default=0)


class GuestCountsUpdateSerializer(serializers.Serializer):
    adults = serializers.IntegerField(min_value=1, required=False)
    children = serializers.IntegerField(min_value=0, required=False)
    infants = serializers.IntegerField(min_value=0, required=False)
    pets = serializers.IntegerField(min_value=0, required=False)


class EmergencyContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32)
    relationship = serializers.CharField(max_length=64, required=False, allow_blank=True)


class ContactInformationSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    emergency_contact = EmergencyContactSerializer(required=False)

    @staticmethod
    def to_document(data: dict) -> dict:
        """camelCase document for the booking record; only keys present are kept."""

        names = {
            "full_name": "fullName",
            "email": "email",
            "phone": "phone",
            "emergency_contact": "emergencyContact",
        }
        return {names[key]: value for key, value in data.items() if key in names}


class ContactInformationUpdateSerializer(ContactInformationSerializer):
    full_name = serializers.CharField(max_length=255, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)


class AddOnSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    quantity = serializers.IntegerField(min_value=1, default=1)


class BookingSerializer(serializers.ModelSerializer):
    """Детальный сериализатор бронирования.

    Private notes are only shown to staff.
    """

    property_id = serializers.ReadOnlyField(source="property.id")
    property_name = serializers.ReadOnlyField(source="property.name")
    user_id = serializers.ReadOnlyField(source="user.id")
    nights = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_number",
            "property_id",
            "property_name",
            "user_id",
            "status",
            "check_in",
            "check_out",
            "nights",
            "guests",
            "contact_information",
            "special_requests",
            "pricing",
            "add_ons",
            "payment",
            "cancellation",
            "notes",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_nights(self, obj: Booking) -> int:
        return (obj.check_out - obj.check_in).days

    def to_representation(self, instance):  # type: ignore
        data = super().to_representation(instance)
        request = self.context.get("request")
        notes = dict(data.get("notes") or {})
        if not _is_staff(getattr(request, "user", None)):
            notes.pop("private", None)
        data["notes"] = notes
        return data


class BookingCreateSerializer(serializers.Serializer):
    """Создание брони гостем."""

    property = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = GuestCountsSerializer()
    contact_information = ContactInformationSerializer()
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")
    add_ons = AddOnSerializer(many=True, required=False, default=list)

    def validate_check_in(self, value):  # type: ignore
        if value < timezone.now().date():
            raise serializers.ValidationError("Дата заезда не может быть в прошлом.")
        return value

    def to_command(self, user_id) -> CreateBookingCommand:
        data = self.validated_data
        return CreateBookingCommand(
            property_id=data["property"],
            user_id=user_id,
            check_in=data["check_in"],
            check_out=data["check_out"],
            guests=dict(data["guests"]),
            contact=ContactInformationSerializer.to_document(data["contact_information"]),
            special_requests=data.get("special_requests", ""),
            add_ons=[dict(item) for item in data.get("add_ons", [])],
        )


class GuestCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class AdminCancelSerializer(GuestCancelSerializer):
    refund_amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0"),
        default=Decimal("0"),
    )


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class NotesSerializer(serializers.Serializer):
    public = serializers.CharField(required=False, allow_blank=True)
    private = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):  # type: ignore
        if "public" not in attrs and "private" not in attrs:
            raise serializers.ValidationError("Provide public or private notes.")
        return attrs


class SpecialRequestsSerializer(serializers.Serializer):
    special_requests = serializers.CharField(allow_blank=True)


class GuestInformationSerializer(serializers.Serializer):
    guests = GuestCountsUpdateSerializer(required=False)
    contact_information = ContactInformationUpdateSerializer(required=False)

    def validate(self, attrs):  # type: ignore
        if not attrs.get("guests") and not attrs.get("contact_information"):
            raise serializers.ValidationError("Provide guests or contact information to update.")
        return attrs

    def to_changes(self) -> dict:
        data = self.validated_data
        return {
            "guests": dict(data["guests"]) if data.get("guests") else None,
            "contact": (
                ContactInformationSerializer.to_document(data["contact_information"])
                if data.get("contact_information")
                else None
            ),
        }


class AddOnsSerializer(serializers.Serializer):
    add_ons = AddOnSerializer(many=True, allow_empty=True)


class RecordPaymentSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=Payment.Method.choices, default=Payment.Method.CARD)
    transaction_id = serializers.CharField(max_length=64, required=False)
