"""FilterSet definitions for listing search."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Case, FloatField, Value, When  # type: ignore

from .geo import bounding_box, validate_coordinates, within_radius
from .models import Listing


class ListingFilterSet(django_filters.FilterSet):
    """Owner, skill tags and radius search."""

    owner = django_filters.NumberFilter(field_name="owner_id", lookup_expr="exact")
    price_max = django_filters.NumberFilter(field_name="price_cents", lookup_expr="lte")
    # CSV of tags, matches listings having any of them
    tags = django_filters.CharFilter(method="filter_tags")
    # "lat,lng,radius_km"
    near = django_filters.CharFilter(method="filter_near")

    class Meta:
        model = Listing
        fields = ["owner", "is_active"]

    def filter_tags(self, queryset, name, value):  # type: ignore
        wanted = {tag.strip().lower() for tag in str(value).split(",") if tag.strip()}
        if not wanted:
            return queryset
        # JSON containment lookups differ per backend; match in Python.
        ids = [
            pk
            for pk, tags in queryset.values_list("pk", "skill_tags")
            if wanted & {str(tag).lower() for tag in tags or []}
        ]
        return queryset.filter(pk__in=ids)

    def filter_near(self, queryset, name, value):  # type: ignore
        try:
            lat, lng, radius = (float(part) for part in str(value).split(","))
        except ValueError:
            return queryset.none()
        if not validate_coordinates(lat, lng) or radius <= 0:
            return queryset.none()
        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius)
        candidates = queryset.filter(lat__gte=min_lat, lat__lte=max_lat)
        if min_lng >= -180 and max_lng <= 180:
            candidates = candidates.filter(lng__gte=min_lng, lng__lte=max_lng)
        nearby = within_radius(candidates, lat, lng, radius)
        if not nearby:
            return queryset.none()
        distance = Case(
            *(When(pk=item.pk, then=Value(item.distance_km)) for item in nearby),
            output_field=FloatField(),
        )
        return (
            queryset.filter(pk__in=[item.pk for item in nearby])
            .annotate(distance_km=distance)
            .order_by("distance_km", "pk")
        )
