"""Listing domain models for LocalGrid."""

from __future__ import annotations

import math

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ListingQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Listing(models.Model):
    """A skill offered by a provider at a location."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listings",
    )
    title = models.CharField(max_length=100)
    description = models.TextField()
    skill_tags = models.JSONField(default=list, blank=True)
    price_cents = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Price in cents; one credit per started 100 cents."),
    )
    duration_mins = models.PositiveIntegerField(default=60)
    lat = models.FloatField(validators=[MinValueValidator(-90), MaxValueValidator(90)])
    lng = models.FloatField(validators=[MinValueValidator(-180), MaxValueValidator(180)])
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ListingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Listing")
        verbose_name_plural = _("Listings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "is_active"], name="listing_owner_active_idx"),
            models.Index(fields=["lat", "lng"], name="listing_lat_lng_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def credit_cost(self) -> int:
        """Credits a booking of this listing costs."""
        if not self.price_cents:
            return 0
        return math.ceil(self.price_cents / 100)

    def deactivate(self) -> None:
        """Soft delete."""
        if not self.is_active:
            return
        self.is_active = False
        self.save(update_fields=["is_active", "updated_at"])
