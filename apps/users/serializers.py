"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Основной сериализатор пользователя."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone",
            "booking_history",
            "is_staff",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "booking_history",
            "is_staff",
            "created_at",
            "updated_at",
        ]


class RegisterSerializer(serializers.ModelSerializer):
    """Регистрация гостя по email."""

    password = serializers.CharField(write_only=True, min_length=8)
    phone = serializers.CharField(validators=[PHONE_VALIDATOR], required=False, allow_blank=True)

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "phone",
            "first_name",
            "last_name",
        ]
        extra_kwargs = {
            "first_name": {"required": False, "allow_blank": True},
            "last_name": {"required": False, "allow_blank": True},
        }

    def create(self, validated_data):  # type: ignore
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)
