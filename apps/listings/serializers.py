"""Serializers for the listings domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Listing


class ListingSerializer(serializers.ModelSerializer):
    owner = UserShortSerializer(read_only=True)
    credit_cost = serializers.IntegerField(read_only=True)
    # only set on "near" searches
    distance_km = serializers.FloatField(read_only=True, default=None)

    class Meta:
        model = Listing
        fields = [
            "id",
            "owner",
            "title",
            "description",
            "skill_tags",
            "price_cents",
            "credit_cost",
            "duration_mins",
            "lat",
            "lng",
            "distance_km",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ListingWriteSerializer(serializers.ModelSerializer):
    title = serializers.CharField(min_length=3, max_length=100)
    description = serializers.CharField(min_length=10)
    skill_tags = serializers.ListField(
        child=serializers.CharField(max_length=50),
        min_length=1,
    )
    duration_mins = serializers.IntegerField(min_value=1)

    class Meta:
        model = Listing
        fields = [
            "title",
            "description",
            "skill_tags",
            "price_cents",
            "duration_mins",
            "lat",
            "lng",
            "is_active",
        ]

    def validate_skill_tags(self, value: list[str]) -> list[str]:
        tags: list[str] = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in tags:
                tags.append(tag)
        if not tags:
            raise serializers.ValidationError("At least one skill tag is required.")
        return tags

    def to_representation(self, instance):  # type: ignore
        return ListingSerializer(instance, context=self.context).data
