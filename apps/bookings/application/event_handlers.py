"""
Booking Event Handlers

Run after the transaction that produced the event has committed. Each
handler does its own work (reminder rows, queued e-mails); a failure is
logged by the message bus and never reaches the caller of the command.
"""

import logging

from shared.application.message_bus import message_bus
from apps.bookings import reminders
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
    BookingDeclined,
)

logger = logging.getLogger(__name__)


def on_booking_created(event: BookingCreated):
    from apps.bookings.tasks import notify_booking_requested

    notify_booking_requested.delay(event.booking_id)


def on_booking_confirmed(event: BookingConfirmed):
    from apps.bookings.tasks import notify_booking_confirmed

    reminders.schedule_reminders(event.booking_id, event.start_at)
    notify_booking_confirmed.delay(event.booking_id)


def on_booking_declined(event: BookingDeclined):
    from apps.bookings.tasks import notify_booking_declined

    reminders.cancel_reminders(event.booking_id)
    notify_booking_declined.delay(event.booking_id)


def on_booking_cancelled(event: BookingCancelled):
    from apps.bookings.tasks import notify_booking_cancelled

    reminders.cancel_reminders(event.booking_id)
    notify_booking_cancelled.delay(event.booking_id, event.cancelled_by_id)


def on_booking_completed(event: BookingCompleted):
    from apps.bookings.tasks import send_review_request

    send_review_request.delay(event.booking_id)


def register_handlers():
    """Subscribe the booking handlers. Safe to call more than once."""
    message_bus.register_event_handler(BookingCreated, on_booking_created)
    message_bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    message_bus.register_event_handler(BookingDeclined, on_booking_declined)
    message_bus.register_event_handler(BookingCancelled, on_booking_cancelled)
    message_bus.register_event_handler(BookingCompleted, on_booking_completed)
    logger.debug("Booking event handlers registered")
