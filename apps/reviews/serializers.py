"""Serializers for reviews.

The reviewer is taken from the request in the view; the serializer checks
the relationships between reviewer, subject and listing.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.listings.models import Listing
from apps.users.serializers import UserShortSerializer

from .models import Review

User = get_user_model()


class ReviewSerializer(serializers.ModelSerializer):
    reviewer = UserShortSerializer(read_only=True)
    subject_id = serializers.PrimaryKeyRelatedField(
        source='subject', queryset=User.objects.all()
    )
    listing_id = serializers.PrimaryKeyRelatedField(
        source='listing', queryset=Listing.objects.all(), required=False, allow_null=True
    )
    listing_title = serializers.CharField(source='listing.title', read_only=True, default=None)

    class Meta:
        model = Review
        fields = [
            'id',
            'reviewer',
            'subject_id',
            'listing_id',
            'listing_title',
            'rating',
            'comment',
            'created_at',
        ]
        read_only_fields = ['id', 'reviewer', 'listing_title', 'created_at']
        # Checked in validate() so the error message names the listing.
        validators = []

    def validate_rating(self, value: int) -> int:
        if value < 1 or value > 5:
            raise serializers.ValidationError('Rating must be between 1 and 5.')
        return value

    def validate_comment(self, value: str) -> str:
        if len(value) > 1000:
            raise serializers.ValidationError('Comment must be at most 1000 characters.')
        return value

    def validate(self, attrs):  # type: ignore
        reviewer = self.context['request'].user
        subject = attrs['subject']
        listing = attrs.get('listing')

        if subject.pk == reviewer.pk:
            raise serializers.ValidationError({'subject_id': 'You cannot review yourself.'})
        if listing is not None:
            if listing.owner_id != subject.pk:
                raise serializers.ValidationError(
                    {'listing_id': 'Listing does not belong to the reviewed user.'}
                )
            if Review.objects.filter(reviewer=reviewer, listing=listing).exists():
                raise serializers.ValidationError(
                    {'listing_id': 'You have already reviewed this listing.'}
                )
        return attrs
