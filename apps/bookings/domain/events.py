"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new booking request was made (-> PENDING)

    Triggers:
    - Email the provider about the request
    - In-app notification for the provider
    """
    booking_id: int
    listing_id: int
    booker_id: int
    provider_id: int


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: Provider accepted the booking (PENDING -> CONFIRMED)

    Triggers:
    - Schedule the 24h and 1h reminders
    - Email the booker
    """
    booking_id: int
    listing_id: int
    booker_id: int
    provider_id: int
    start_at: datetime


@dataclass(kw_only=True)
class BookingDeclined(DomainEvent):
    """
    Event: Provider rejected the booking (PENDING -> DECLINED)

    Triggers:
    - Drop any reminders
    - Email the booker
    """
    booking_id: int
    booker_id: int
    provider_id: int


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: Either party cancelled (CONFIRMED -> CANCELLED)

    Triggers:
    - Drop pending reminders
    - Email the other party
    """
    booking_id: int
    booker_id: int
    provider_id: int
    cancelled_by_id: int | None


@dataclass(kw_only=True)
class BookingCompleted(DomainEvent):
    """
    Event: Session took place (CONFIRMED -> COMPLETED)

    Triggers:
    - Ask the booker for a review
    """
    booking_id: int
    booker_id: int
    provider_id: int
    credits_transferred: int
