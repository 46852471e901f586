"""
Reminder scheduler

Confirmed bookings get one ``ReminderJob`` per offset in
``BOOKING_REMINDER_OFFSETS`` (24h and 1h before the start). Jobs are keyed
``"{booking_id}-{kind}"``, so scheduling twice updates the same rows and
cancelling removes exactly those rows.

The Celery beat task claims due jobs in batches; each job is delivered by
its own task, which re-checks the booking, commits the job as ``sending``
and only then talks to the mail server. A delivery that fails is retried
``REMINDER_MAX_ATTEMPTS`` times, ``REMINDER_RETRY_DELAY`` apart, then
marked failed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Count  # type: ignore
from django.utils import timezone  # type: ignore

from shared.infrastructure.locking import lock_queryset_if_possible

from .domain.state_machine import BookingStatus
from .models import Booking, ReminderJob

logger = logging.getLogger(__name__)


def reminder_key(booking_id: int, kind: str) -> str:
    return f"{booking_id}-{kind}"


def reminder_keys(booking_id: int) -> list[str]:
    return [reminder_key(booking_id, kind) for kind in settings.BOOKING_REMINDER_OFFSETS]


def compute_fire_times(start_at: datetime, now: datetime | None = None) -> dict[str, datetime]:
    """Fire time per reminder kind, keeping only those strictly in the future."""
    now = now or timezone.now()
    fire_times = {}
    for kind, offset in settings.BOOKING_REMINDER_OFFSETS.items():
        fire_at = start_at - offset
        if fire_at > now:
            fire_times[kind] = fire_at
    return fire_times


def schedule_reminders(booking_id: int, start_at: datetime, now: datetime | None = None) -> list[ReminderJob]:
    """
    Upsert the keyed reminder jobs of a confirmed booking.

    Jobs that already went out are left alone; everything else is reset to
    pending with the new fire time.
    """
    fire_times = compute_fire_times(start_at, now)
    jobs = []

    with transaction.atomic():
        for kind, fire_at in fire_times.items():
            key = reminder_key(booking_id, kind)
            existing = lock_queryset_if_possible(ReminderJob.objects.filter(key=key)).first()
            if existing and existing.status == ReminderJob.Status.SENT:
                continue
            job, _ = ReminderJob.objects.update_or_create(
                key=key,
                defaults={
                    "booking_id": booking_id,
                    "kind": kind,
                    "fire_at": fire_at,
                    "status": ReminderJob.Status.PENDING,
                    "attempts": 0,
                    "last_error": "",
                },
            )
            jobs.append(job)

    logger.info(
        "Scheduled %d reminders for booking %s: %s",
        len(jobs),
        booking_id,
        ", ".join(job.key for job in jobs) or "none (starts too soon)",
    )
    return jobs


def cancel_reminders(booking_id: int) -> int:
    """Remove the booking's unsent reminder jobs. No-op when there are none."""
    deleted, _ = (
        ReminderJob.objects.filter(key__in=reminder_keys(booking_id))
        .exclude(status=ReminderJob.Status.SENT)
        .delete()
    )
    logger.info("Cancelled %d reminders for booking %s", deleted, booking_id)
    return deleted


def claim_due_jobs(now: datetime | None = None, limit: int | None = None) -> list[int]:
    """Move due pending jobs to processing and return their ids."""
    now = now or timezone.now()
    limit = limit or settings.REMINDER_BATCH_SIZE

    with transaction.atomic():
        due = lock_queryset_if_possible(
            ReminderJob.objects.filter(
                status=ReminderJob.Status.PENDING,
                fire_at__lte=now,
            ).order_by("fire_at")
        )
        ids = list(due.values_list("pk", flat=True)[:limit])
        if ids:
            ReminderJob.objects.filter(pk__in=ids).update(
                status=ReminderJob.Status.PROCESSING,
                updated_at=now,
            )

    return ids


def requeue_stale_jobs(now: datetime | None = None, older_than: timedelta = timedelta(minutes=10)) -> int:
    """Return jobs stuck in processing or sending (worker died mid-delivery) to pending."""
    now = now or timezone.now()
    requeued = ReminderJob.objects.filter(
        status__in=[ReminderJob.Status.PROCESSING, ReminderJob.Status.SENDING],
        updated_at__lt=now - older_than,
    ).update(status=ReminderJob.Status.PENDING, updated_at=now)
    if requeued:
        logger.warning("Requeued %d stale reminder jobs", requeued)
    return requeued


def _is_still_relevant(booking: Booking, now: datetime) -> bool:
    return booking.status == BookingStatus.CONFIRMED and booking.start_at > now


def _lock_job(job_id: int) -> ReminderJob | None:
    return lock_queryset_if_possible(
        ReminderJob.objects.select_related(
            "booking", "booking__listing", "booking__listing__owner", "booking__booker"
        ).filter(pk=job_id)
    ).first()


def _claim_for_sending(job_id: int, now: datetime) -> tuple[ReminderJob | None, str]:
    """Move a deliverable job to sending; returns ``(job, status)``, job None if not to send."""
    with transaction.atomic():
        job = _lock_job(job_id)

        if job is None:
            logger.info("Reminder job %s no longer exists, nothing to send", job_id)
            return None, "missing"

        if job.status not in (ReminderJob.Status.PENDING, ReminderJob.Status.PROCESSING):
            logger.info("Reminder %s already %s", job.key, job.status)
            return None, job.status

        booking = job.booking
        if not _is_still_relevant(booking, now):
            job.status = ReminderJob.Status.SKIPPED
            job.save(update_fields=["status", "updated_at"])
            logger.info(
                "Skipped reminder %s: booking %s is %s, starts %s",
                job.key,
                booking.pk,
                booking.status,
                booking.start_at.isoformat(),
            )
            return None, job.status

        job.attempts += 1
        job.status = ReminderJob.Status.SENDING
        job.save(update_fields=["attempts", "status", "updated_at"])

    return job, job.status


def _record_result(job_id: int, sent: bool, now: datetime) -> str:
    with transaction.atomic():
        job = lock_queryset_if_possible(ReminderJob.objects.filter(pk=job_id)).first()
        if job is None:
            logger.warning("Reminder job %s was removed while sending (sent=%s)", job_id, sent)
            return "missing"
        if job.status != ReminderJob.Status.SENDING:
            # rescheduled or swept back while the mail was in flight
            logger.warning("Reminder %s changed to %s while sending", job.key, job.status)
            return job.status

        if sent:
            job.status = ReminderJob.Status.SENT
            job.sent_at = now
            job.last_error = ""
            Booking.objects.filter(pk=job.booking_id).update(reminder_sent=True)
            logger.info("Sent reminder %s", job.key)
        elif job.attempts >= settings.REMINDER_MAX_ATTEMPTS:
            job.status = ReminderJob.Status.FAILED
            job.last_error = "Email delivery failed"
            logger.error("Reminder %s failed after %d attempts", job.key, job.attempts)
        else:
            job.status = ReminderJob.Status.PENDING
            job.fire_at = now + settings.REMINDER_RETRY_DELAY
            job.last_error = "Email delivery failed"
            logger.warning("Reminder %s failed (attempt %d), retrying at %s", job.key, job.attempts, job.fire_at)

        job.save()
    return job.status


def deliver_reminder(job_id: int, now: datetime | None = None) -> str:
    """
    Send one reminder job and return the job's resulting status.

    A job that vanished (cancelled) returns ``"missing"``; a job for a
    booking that is no longer confirmed or already started is skipped
    without sending; a job already sent is never sent again.

    The job is claimed and committed as ``sending`` before the e-mail goes
    out, so no row lock is held while talking to the mail server.
    """
    from apps.notifications.services import send_booking_reminder

    now = now or timezone.now()

    job, status = _claim_for_sending(job_id, now)
    if job is None:
        return status

    sent = send_booking_reminder(job.booking, job.kind)
    return _record_result(job.pk, sent, now)


def queue_stats() -> dict[str, int]:
    """Job counts per status."""
    counts = {status: 0 for status in ReminderJob.Status.values}
    for row in ReminderJob.objects.order_by().values("status").annotate(total=Count("id")):
        counts[row["status"]] = row["total"]
    counts["total"] = sum(counts.values())
    return counts
