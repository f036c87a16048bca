"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import to_day_key

from .models import Property


class PropertySerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "short_description",
            "property_type",
            "status",
            "max_guests",
            "bedrooms",
            "beds",
            "bathrooms",
            "min_nights",
            "base_price",
            "cleaning_fee",
            "service_fee",
            "tax_rate",
            "currency",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PropertyWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            "name",
            "slug",
            "description",
            "short_description",
            "property_type",
            "status",
            "max_guests",
            "bedrooms",
            "beds",
            "bathrooms",
            "min_nights",
            "base_price",
            "cleaning_fee",
            "service_fee",
            "tax_rate",
            "currency",
        ]
        extra_kwargs = {
            "slug": {"required": False, "allow_blank": True},
        }


class AvailabilityCalendarSerializer(serializers.Serializer):
    """Full calendar document as stored, for staff."""

    property_id = serializers.IntegerField(read_only=True)
    dates = serializers.SerializerMethodField()
    blocked_ranges = serializers.SerializerMethodField()
    last_updated = serializers.DateTimeField(read_only=True)
    version = serializers.IntegerField(read_only=True)

    def get_dates(self, calendar) -> dict:
        return {day: entry.to_document() for day, entry in sorted(calendar.dates.items())}

    def get_blocked_ranges(self, calendar) -> list:
        return [blocked.to_document() for blocked in calendar.blocked_ranges]


class StayDatesSerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs


class PublicCalendarQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["start"] > attrs["end"]:
            raise serializers.ValidationError({"end": "End must not be before start."})
        if (attrs["end"] - attrs["start"]).days > 366:
            raise serializers.ValidationError({"end": "Range is limited to one year."})
        return attrs


class PublicCalendarDaySerializer(serializers.Serializer):
    date = serializers.DateField()
    is_available = serializers.BooleanField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    minimum_stay = serializers.IntegerField()


class DateStatusSerializer(serializers.Serializer):
    date = serializers.DateField()
    is_available = serializers.BooleanField(required=False, allow_null=True, default=None)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=0)
    minimum_stay = serializers.IntegerField(required=False, min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def to_update(self) -> tuple[str, dict]:
        return day_update(self.validated_data)


def day_update(data) -> tuple[str, dict]:
    """(day key, partial day document) for the calendar."""

    changes = {"isAvailable": data.get("is_available")}
    if "price" in data:
        changes["price"] = data["price"]
    if "minimum_stay" in data:
        changes["minimumStay"] = data["minimum_stay"]
    if "notes" in data:
        changes["notes"] = data["notes"]
    return to_day_key(data["date"]), changes


class DateRangeStatusSerializer(serializers.Serializer):
    updates = DateStatusSerializer(many=True)

    def validate_updates(self, value):  # type: ignore
        if not value:
            raise serializers.ValidationError("At least one date is required.")
        days = [item["date"] for item in value]
        if len(days) != len(set(days)):
            raise serializers.ValidationError("Each date may appear only once.")
        return value

    def to_updates(self) -> dict[str, dict]:
        return dict(day_update(item) for item in self.validated_data["updates"])


class BlockedRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class SeasonalPricingSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
