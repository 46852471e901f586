"""Great-circle distance helpers for "near me" listing search."""

from __future__ import annotations

import math
from typing import Iterable

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(a))


def validate_coordinates(lat: float, lng: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) enclosing the search circle."""
    d_lat = math.degrees(radius_km / EARTH_RADIUS_KM)
    cos_lat = math.cos(math.radians(lat))
    if cos_lat < 1e-9:
        d_lng = 180.0
    else:
        d_lng = min(180.0, math.degrees(radius_km / (EARTH_RADIUS_KM * cos_lat)))
    return lat - d_lat, lat + d_lat, lng - d_lng, lng + d_lng


def within_radius(listings: Iterable, lat: float, lng: float, radius_km: float) -> list:
    """Listings inside the radius, nearest first, each with ``distance_km`` set."""
    found = []
    for listing in listings:
        distance = haversine_km(lat, lng, listing.lat, listing.lng)
        if distance <= radius_km:
            listing.distance_km = round(distance, 2)
            found.append(listing)
    found.sort(key=lambda item: item.distance_km)
    return found
