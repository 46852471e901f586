"""Notification services: e-mail and in-app messages.

Every function here logs and swallows its own failures and reports
success as a bool, so callers on the booking path never fail because a
message could not be delivered. Celery tasks that need retries check the
return value.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils import timezone  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# CHANNELS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """
    Send a plain-text e-mail.

    Returns:
        bool: True if the message was handed to the mail backend
    """
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def create_in_app_notification(user: "CustomUser", title: str, message: str) -> bool:
    try:
        from .models import Notification

        Notification.objects.create(
            user=user,
            title=title,
            message=message,
        )

        logger.info(f"In-app notification created for user {user.pk}: {title}")
        return True

    except Exception as e:
        logger.error(f"Failed to create in-app notification for user {user.pk}: {e}", exc_info=True)
        return False


def notify_user(user: "CustomUser", title: str, message: str, *, in_app: bool = True) -> dict[str, bool]:
    """
    Deliver over every channel; returns the result per channel.

    ``in_app=False`` sends the e-mail only, for retries of a delivery whose
    in-app row already exists.
    """
    results = {"email": False, "in_app": False}

    if user.email:
        results["email"] = send_email_notification(user.email, title, message)

    if in_app:
        results["in_app"] = create_in_app_notification(user, title, message)

    return results


# ============================================================================
# BOOKING NOTIFICATIONS
# ============================================================================

def _when(booking: "Booking") -> str:
    start = timezone.localtime(booking.start_at)
    end = timezone.localtime(booking.end_at)
    return f"{start:%Y-%m-%d %H:%M} - {end:%H:%M}"


def _booking_url(booking: "Booking") -> str:
    return f"{settings.FRONTEND_URL}/bookings/{booking.pk}"


def notify_booking_requested(booking: "Booking", *, in_app: bool = True) -> dict[str, bool]:
    """Tell the provider a new request is waiting."""
    provider = booking.listing.owner
    title = f"New booking request: {booking.listing.title}"
    message = (
        f"{booking.booker.display_name} requested a session of "
        f"\"{booking.listing.title}\" on {_when(booking)}.\n"
        f"Review it at {_booking_url(booking)}"
    )
    return notify_user(provider, title, message, in_app=in_app)


def notify_booking_confirmed(booking: "Booking", *, in_app: bool = True) -> dict[str, bool]:
    title = f"Booking confirmed: {booking.listing.title}"
    message = (
        f"{booking.listing.owner.display_name} confirmed your session of "
        f"\"{booking.listing.title}\" on {_when(booking)}.\n"
        f"Details: {_booking_url(booking)}"
    )
    return notify_user(booking.booker, title, message, in_app=in_app)


def notify_booking_declined(booking: "Booking", *, in_app: bool = True) -> dict[str, bool]:
    title = f"Booking declined: {booking.listing.title}"
    message = (
        f"Your request for \"{booking.listing.title}\" on {_when(booking)} "
        f"was declined by the provider."
    )
    return notify_user(booking.booker, title, message, in_app=in_app)


def notify_booking_cancelled(
    booking: "Booking", cancelled_by_id: int | None, *, in_app: bool = True
) -> dict[str, bool]:
    """Tell the party that did not cancel."""
    if cancelled_by_id == booking.booker_id:
        recipient, canceller = booking.listing.owner, booking.booker
    else:
        recipient, canceller = booking.booker, booking.listing.owner
    title = f"Booking cancelled: {booking.listing.title}"
    message = (
        f"{canceller.display_name} cancelled the session of "
        f"\"{booking.listing.title}\" on {_when(booking)}."
    )
    return notify_user(recipient, title, message, in_app=in_app)


def send_booking_reminder(booking: "Booking", kind: str) -> bool:
    """Reminder e-mail to the booker; ``kind`` is ``24h`` or ``1h``."""
    if kind == "1h":
        title = f"Starting in 1 hour: {booking.listing.title}"
    else:
        title = f"Tomorrow: {booking.listing.title}"
    message = (
        f"Your session of \"{booking.listing.title}\" with "
        f"{booking.listing.owner.display_name} is on {_when(booking)}.\n"
        f"Details: {_booking_url(booking)}"
    )
    sent = send_email_notification(booking.booker.email, title, message)
    if sent:
        create_in_app_notification(booking.booker, title, message)
    return sent


def send_review_request(booking: "Booking") -> bool:
    title = f"How was {booking.listing.title}?"
    message = (
        f"Your session with {booking.listing.owner.display_name} is complete. "
        f"Leave a review at {settings.FRONTEND_URL}/listings/{booking.listing_id}"
    )
    return send_email_notification(booking.booker.email, title, message)
