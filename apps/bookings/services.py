"""Domain services for booking workflows."""

from __future__ import annotations

import logging
from datetime import datetime

from shared.domain.errors import InactiveListing, NotFound
from shared.domain.value_objects import TimeSlot
from shared.infrastructure.locking import lock_queryset_if_possible

from .domain.state_machine import BookingStatus
from .models import Booking

logger = logging.getLogger(__name__)


def lock_listing(listing_id: int, require_active: bool = True):
    """
    Load (and lock, inside a transaction) the listing that bookings are
    checked against. Serializes concurrent confirmations per listing.
    """
    from apps.listings.models import Listing

    listing = lock_queryset_if_possible(
        Listing.objects.select_related("owner").filter(pk=listing_id)
    ).first()
    if listing is None:
        raise NotFound(f"Listing {listing_id} not found", listing_id=listing_id)
    if require_active and not listing.is_active:
        raise InactiveListing(listing_id=listing_id)
    return listing


def lock_booking(booking_id: int) -> Booking:
    booking = lock_queryset_if_possible(
        Booking.objects.select_related("listing", "listing__owner", "booker").filter(pk=booking_id)
    ).first()
    if booking is None:
        raise NotFound(f"Booking {booking_id} not found", booking_id=booking_id)
    return booking


def overlapping_bookings(
    listing_id: int,
    start_at: datetime,
    end_at: datetime,
    exclude_booking_id: int | None = None,
):
    """
    CONFIRMED bookings of the listing that overlap ``[start_at, end_at)``.

    ``[a, b)`` and ``[c, d)`` overlap iff ``a < d and c < b``; back-to-back
    sessions do not. PENDING bookings never block a slot.
    """
    slot = TimeSlot(start_at, end_at)
    qs = Booking.objects.filter(
        listing_id=listing_id,
        status=BookingStatus.CONFIRMED,
        start_at__lt=slot.end_at,
        end_at__gt=slot.start_at,
    )
    if exclude_booking_id is not None:
        qs = qs.exclude(pk=exclude_booking_id)
    return lock_queryset_if_possible(qs)


def has_conflict(
    listing_id: int,
    start_at: datetime,
    end_at: datetime,
    exclude_booking_id: int | None = None,
) -> bool:
    conflict = overlapping_bookings(listing_id, start_at, end_at, exclude_booking_id).exists()
    if conflict:
        logger.info(
            "Slot %s - %s of listing %s overlaps a confirmed booking",
            start_at.isoformat(),
            end_at.isoformat(),
            listing_id,
        )
    return conflict
