"""Booking domain models for LocalGrid."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import TimeSlot

from .domain.state_machine import BookingStatus


class Booking(models.Model):
    """A session of a listing reserved by a booker for ``[start_at, end_at)``."""

    Status = BookingStatus

    booker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
    )
    price_cents = models.PositiveIntegerField(null=True, blank=True)
    credits_used = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Credits moved from booker to provider on completion."),
    )
    reminder_sent = models.BooleanField(
        default=False,
        help_text=_("Set once any reminder for this booking went out."),
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    review_requested_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-start_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_at__gt=F("start_at")),
                name="booking_end_after_start",
            ),
        ]
        indexes = [
            models.Index(fields=["listing", "status", "start_at"], name="booking_listing_status_idx"),
            models.Index(fields=["booker", "status"], name="booking_booker_status_idx"),
            models.Index(fields=["status", "end_at"], name="booking_status_end_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} of listing {self.listing_id} ({self.status})"

    @property
    def provider_id(self) -> int:
        return self.listing.owner_id

    def clean(self) -> None:
        if self.start_at and self.end_at and self.end_at <= self.start_at:
            raise ValidationError({"end_at": _("End time must be after start time.")})

    def save(self, *args, **kwargs):  # type: ignore
        # Raises InvalidInterval before the database constraint would.
        TimeSlot(self.start_at, self.end_at)
        super().save(*args, **kwargs)


class ReminderJob(models.Model):
    """
    Durable, keyed reminder for a confirmed booking.

    ``key`` is ``"{booking_id}-{kind}"`` so rescheduling updates the same
    row and cancelling can find it again.
    """

    class Kind(models.TextChoices):
        DAY_BEFORE = "24h", _("24 hours before")
        HOUR_BEFORE = "1h", _("1 hour before")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        PROCESSING = "processing", _("Processing")
        SENDING = "sending", _("Sending")
        SENT = "sent", _("Sent")
        SKIPPED = "skipped", _("Skipped")
        FAILED = "failed", _("Failed")

    key = models.CharField(max_length=64, unique=True)
    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="reminder_jobs",
    )
    kind = models.CharField(max_length=8, choices=Kind.choices)
    fire_at = models.DateTimeField(db_index=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    attempts = models.PositiveSmallIntegerField(default=0)
    last_error = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Reminder job")
        verbose_name_plural = _("Reminder jobs")
        ordering = ["fire_at"]
        indexes = [
            models.Index(fields=["status", "fire_at"], name="reminder_status_fire_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.key} ({self.status})"
