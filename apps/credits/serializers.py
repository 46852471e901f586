"""Serializers for the credits API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import CreditTransaction


class CreditTransactionSerializer(serializers.ModelSerializer):
    booking_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = CreditTransaction
        fields = ["id", "amount", "reason", "booking_id", "created_at"]
        read_only_fields = fields


class TransferSerializer(serializers.Serializer):
    recipient_id = serializers.IntegerField()
    amount = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class TopUpSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    amount = serializers.IntegerField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_amount(self, value: int) -> int:
        if value == 0:
            raise serializers.ValidationError("Amount must not be zero.")
        return value
