"""Credit ledger models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class CreditTransaction(models.Model):
    """One signed movement of a user's credits. Rows are never updated."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="credit_transactions",
    )
    amount = models.IntegerField(help_text=_("Positive for income, negative for spending."))
    reason = models.CharField(max_length=255)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="credit_transactions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Credit transaction")
        verbose_name_plural = _("Credit transactions")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="credit_tx_user_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}: {self.amount:+d} ({self.reason})"
