"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

User = get_user_model()


class UserShortSerializer(serializers.ModelSerializer):
    """Public part of a profile embedded in bookings, listings and reviews."""

    class Meta:
        model = User
        fields = ["id", "name", "email", "user_type"]


class UserSerializer(serializers.ModelSerializer):
    """Main user serializer."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "name",
            "bio",
            "user_type",
            "role",
            "credits",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "email",
            "role",
            "credits",
            "created_at",
            "updated_at",
        ]


class RegisterSerializer(serializers.ModelSerializer):
    """Sign-up by email; the side of the market can be chosen later."""

    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ["email", "password", "name", "user_type"]
        extra_kwargs = {
            "name": {"required": False, "allow_blank": True},
            "user_type": {"required": False},
        }

    def create(self, validated_data):  # type: ignore
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)


class UserTypeSerializer(serializers.Serializer):
    user_type = serializers.ChoiceField(choices=User.UserTypeChoices.choices)
