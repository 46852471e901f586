"""FilterSet for booking lists."""

from __future__ import annotations

import django_filters  # type: ignore

from .domain.state_machine import BookingStatus
from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=BookingStatus.choices)
    listing = django_filters.NumberFilter(field_name="listing_id")
    starts_after = django_filters.IsoDateTimeFilter(field_name="start_at", lookup_expr="gte")
    starts_before = django_filters.IsoDateTimeFilter(field_name="start_at", lookup_expr="lt")

    class Meta:
        model = Booking
        fields = ["status", "listing"]
