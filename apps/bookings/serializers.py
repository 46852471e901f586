"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .domain.state_machine import BookingStatus
from .models import Booking, ReminderJob


class BookingCreateSerializer(serializers.Serializer):
    """Booking request by a project creator."""

    PAYMENT_CASH = "cash"
    PAYMENT_CREDITS = "credits"

    listing_id = serializers.IntegerField()
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    payment_method = serializers.ChoiceField(
        choices=[PAYMENT_CASH, PAYMENT_CREDITS],
        default=PAYMENT_CASH,
    )


class BookingTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.choices)


class BookingListingSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    title = serializers.CharField()
    owner = UserShortSerializer()


class BookingSerializer(serializers.ModelSerializer):
    """Detailed booking serializer."""

    booker = UserShortSerializer(read_only=True)
    listing = BookingListingSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booker",
            "listing",
            "start_at",
            "end_at",
            "status",
            "price_cents",
            "credits_used",
            "reminder_sent",
            "confirmed_at",
            "cancelled_at",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ReminderJobSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReminderJob
        fields = ["key", "kind", "fire_at", "status", "attempts", "last_error", "sent_at"]
        read_only_fields = fields
