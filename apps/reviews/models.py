"""Models for the review domain.

A ``Review`` is feedback one user leaves about another, optionally tied to
one of the reviewed user's listings. A reviewer reviews a given listing at
most once.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Avg, Count  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ReviewQuerySet(models.QuerySet):
    def rating_summary(self) -> dict:
        summary = self.aggregate(average_rating=Avg('rating'), review_count=Count('id'))
        if summary['average_rating'] is not None:
            summary['average_rating'] = round(summary['average_rating'], 2)
        return summary


class Review(models.Model):
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews_written'
    )
    subject = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews_received'
    )
    listing = models.ForeignKey(
        'listings.Listing',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviews',
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_('Rating from 1 to 5'),
    )
    comment = models.TextField(max_length=1000, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ReviewQuerySet.as_manager()

    class Meta:
        verbose_name = _('Review')
        verbose_name_plural = _('Reviews')
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['reviewer', 'listing'], name='review_one_per_listing'),
            models.CheckConstraint(
                condition=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                name='review_rating_range',
            ),
        ]
        indexes = [
            models.Index(fields=['subject', '-created_at'], name='review_subject_created_idx'),
        ]

    def __str__(self) -> str:
        return f"Review by {self.reviewer_id} for user {self.subject_id} (Rating: {self.rating})"
