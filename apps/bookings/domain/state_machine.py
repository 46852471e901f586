"""
Booking State Machine

PENDING ──► CONFIRMED ──► COMPLETED
   │            │
   ▼            ▼
DECLINED    CANCELLED

The transition table maps each allowed ``(current, requested)`` edge to the
actor roles that may take it. Anything not in the table is rejected.
"""

from __future__ import annotations

import enum
from datetime import datetime

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.errors import Forbidden, InvalidTransition, TooEarly


class BookingStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    CONFIRMED = "CONFIRMED", _("Confirmed")
    DECLINED = "DECLINED", _("Declined")
    CANCELLED = "CANCELLED", _("Cancelled")
    COMPLETED = "COMPLETED", _("Completed")


class ActorRole(enum.Enum):
    BOOKER = "booker"
    PROVIDER = "provider"
    SYSTEM = "system"


TRANSITIONS: dict[tuple[str, str], frozenset[ActorRole]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): frozenset({ActorRole.PROVIDER}),
    (BookingStatus.PENDING, BookingStatus.DECLINED): frozenset({ActorRole.PROVIDER}),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): frozenset({ActorRole.BOOKER, ActorRole.PROVIDER}),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): frozenset(
        {ActorRole.BOOKER, ActorRole.PROVIDER, ActorRole.SYSTEM}
    ),
}

TERMINAL_STATUSES = frozenset({BookingStatus.DECLINED, BookingStatus.CANCELLED, BookingStatus.COMPLETED})


def parse_status(value: str) -> BookingStatus:
    try:
        return BookingStatus(str(value).upper())
    except ValueError:
        raise InvalidTransition(f"Unknown booking status: {value}", status=value) from None


def allowed_targets(current: str) -> list[str]:
    return [target for (source, target) in TRANSITIONS if source == current]


def is_allowed(current: str, requested: str) -> bool:
    return (current, requested) in TRANSITIONS


def ensure_transition(current: str, requested: str, role: ActorRole) -> None:
    """
    Validate the edge first, then the actor's right to take it.

    Raises ``InvalidTransition`` for edges outside the table, listing the
    statuses still reachable from ``current``, and
    ``Forbidden`` when the edge exists but ``role`` may not take it.
    """
    if not is_allowed(current, requested):
        if current in TERMINAL_STATUSES:
            message = f"Booking is already {current} and can no longer change"
        else:
            message = f"Cannot change booking status from {current} to {requested}"
        raise InvalidTransition(
            message,
            current=str(current),
            requested=str(requested),
            allowed=[str(target) for target in allowed_targets(current)],
        )
    roles = TRANSITIONS[(current, requested)]
    if role not in roles:
        raise Forbidden(
            f"The {role.value} cannot change booking status from {current} to {requested}",
        )


def ensure_completable(end_at: datetime, now: datetime) -> None:
    if now < end_at:
        raise TooEarly()
