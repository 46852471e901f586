"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.notifications import services as notifications
from shared.domain.errors import DomainError

from . import reminders
from .domain.state_machine import BookingStatus
from .models import Booking

logger = logging.getLogger(__name__)

EMAIL_TASK_OPTIONS = {"bind": True, "max_retries": 3, "default_retry_delay": 300}


def _load_booking(booking_id: int) -> Booking | None:
    booking = (
        Booking.objects.select_related("listing", "listing__owner", "booker")
        .filter(pk=booking_id)
        .first()
    )
    if booking is None:
        logger.warning("Booking %s not found, notification dropped", booking_id)
    return booking


def _first_attempt(task) -> bool:
    # the in-app row is written once; retries only resend the e-mail
    return not task.request.retries


def _retry_unless_sent(task, results: dict[str, bool], booking_id: int) -> dict[str, bool]:
    if not results.get("email"):
        logger.warning("Email for booking %s not sent, retrying", booking_id)
        raise task.retry()
    return results


# ============================================================================
# NOTIFICATION TASKS (queued by booking event handlers)
# ============================================================================

@shared_task(name="bookings.notify_booking_requested", **EMAIL_TASK_OPTIONS)
def notify_booking_requested(self, booking_id: int):
    booking = _load_booking(booking_id)
    if booking is None:
        return None
    results = notifications.notify_booking_requested(booking, in_app=_first_attempt(self))
    return _retry_unless_sent(self, results, booking_id)


@shared_task(name="bookings.notify_booking_confirmed", **EMAIL_TASK_OPTIONS)
def notify_booking_confirmed(self, booking_id: int):
    booking = _load_booking(booking_id)
    if booking is None:
        return None
    results = notifications.notify_booking_confirmed(booking, in_app=_first_attempt(self))
    return _retry_unless_sent(self, results, booking_id)


@shared_task(name="bookings.notify_booking_declined", **EMAIL_TASK_OPTIONS)
def notify_booking_declined(self, booking_id: int):
    booking = _load_booking(booking_id)
    if booking is None:
        return None
    results = notifications.notify_booking_declined(booking, in_app=_first_attempt(self))
    return _retry_unless_sent(self, results, booking_id)


@shared_task(name="bookings.notify_booking_cancelled", **EMAIL_TASK_OPTIONS)
def notify_booking_cancelled(self, booking_id: int, cancelled_by_id: int | None = None):
    booking = _load_booking(booking_id)
    if booking is None:
        return None
    results = notifications.notify_booking_cancelled(
        booking, cancelled_by_id, in_app=_first_attempt(self)
    )
    return _retry_unless_sent(self, results, booking_id)


def _has_reviewed(booking: Booking) -> bool:
    from apps.reviews.models import Review

    return Review.objects.filter(reviewer_id=booking.booker_id, listing_id=booking.listing_id).exists()


def request_review(booking: Booking) -> bool:
    """Send the review request once per booking; False if nothing was sent."""
    if booking.status != BookingStatus.COMPLETED or booking.review_requested_at:
        return False
    if _has_reviewed(booking):
        return False
    if not notifications.send_review_request(booking):
        return False
    Booking.objects.filter(pk=booking.pk).update(review_requested_at=timezone.now())
    return True


@shared_task(name="bookings.send_review_request")
def send_review_request(booking_id: int) -> bool:
    booking = _load_booking(booking_id)
    if booking is None:
        return False
    return request_review(booking)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.process_reminder_queue")
def process_reminder_queue() -> dict[str, int]:
    """
    Hand every due reminder job to its own delivery task.

    Runs every minute via Celery Beat.

    Returns:
        dict: {"claimed": jobs handed out, "requeued": stale jobs put back}
    """
    requeued = reminders.requeue_stale_jobs()
    job_ids = reminders.claim_due_jobs()

    for job_id in job_ids:
        send_booking_reminder.delay(job_id)

    if job_ids:
        logger.info("Dispatched %d reminder jobs", len(job_ids))
    return {"claimed": len(job_ids), "requeued": requeued}


@shared_task(name="bookings.send_booking_reminder")
def send_booking_reminder(job_id: int) -> str:
    return reminders.deliver_reminder(job_id)


@shared_task(name="bookings.complete_past_bookings")
def complete_past_bookings() -> dict[str, int]:
    """
    Complete every CONFIRMED booking whose session has ended.

    Goes through the state machine as the system actor so credits settle
    through the ledger. A booking that cannot complete (e.g. the booker can
    no longer cover it) is logged and left CONFIRMED.
    """
    from .application.command_handlers import transition_booking

    now = timezone.now()
    due_ids = list(
        Booking.objects.filter(status=BookingStatus.CONFIRMED, end_at__lte=now)
        .order_by("end_at")
        .values_list("pk", flat=True)
    )

    completed = 0
    failed = 0
    for booking_id in due_ids:
        try:
            transition_booking(booking_id, BookingStatus.COMPLETED, as_system=True, now=now)
            completed += 1
        except DomainError as e:
            failed += 1
            logger.warning("Could not complete booking %s: %s (%s)", booking_id, e.message, e.code)

    logger.info("Completed %d past bookings (%d failed)", completed, failed)
    return {"completed": completed, "failed": failed}


@shared_task(name="bookings.send_review_requests")
def send_review_requests() -> dict[str, int]:
    """Review requests for bookings completed within the request window."""
    since = timezone.now() - timedelta(days=settings.REVIEW_REQUEST_WINDOW_DAYS)
    bookings = Booking.objects.select_related("listing", "listing__owner", "booker").filter(
        status=BookingStatus.COMPLETED,
        completed_at__gte=since,
        review_requested_at__isnull=True,
    )

    sent = sum(1 for booking in bookings if request_review(booking))

    logger.info("Sent %d review request emails", sent)
    return {"emails_sent": sent}


@shared_task(name="bookings.run_daily_cleanup")
def run_daily_cleanup() -> dict[str, dict[str, int]]:
    """
    Daily maintenance, 02:00 via Celery Beat.

    Completes past bookings first so the review requests include them.
    """
    return {
        "complete_past_bookings": complete_past_bookings(),
        "send_review_requests": send_review_requests(),
    }
