"""
Credit ledger

Every balance change appends ``CreditTransaction`` rows and moves the
cached ``User.credits`` by the same amounts inside one
``transaction.atomic()`` block. User rows are locked in primary-key order
before they are read so concurrent transfers cannot deadlock or
double-spend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import F, Q, Sum  # type: ignore

from shared.domain.errors import InsufficientCredits, InvalidCreditOperation, NotFound
from shared.infrastructure.locking import lock_queryset_if_possible

from .models import CreditTransaction

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass(frozen=True)
class LedgerEntry:
    user_id: int
    amount: int
    reason: str


@dataclass(frozen=True)
class LedgerStats:
    total_earned: int
    total_spent: int
    net_balance: int

    def to_dict(self) -> dict:
        return {
            "total_earned": self.total_earned,
            "total_spent": self.total_spent,
            "net_balance": self.net_balance,
        }


def lock_users(user_ids: Iterable[int]) -> dict:
    """Lock the given users (ascending pk) and return them by id."""
    ids = sorted(set(user_ids))
    qs = lock_queryset_if_possible(User.objects.filter(pk__in=ids).order_by("pk"))
    users = {user.pk: user for user in qs}
    missing = [pk for pk in ids if pk not in users]
    if missing:
        raise NotFound(f"User {missing[0]} not found", user_id=missing[0])
    return users


def ensure_can_cover(user, amount: int) -> None:
    if amount > 0 and user.credits < amount:
        raise InsufficientCredits(
            f"Insufficient credits. Required: {amount}, available: {user.credits}",
            required=amount,
            available=user.credits,
        )


def apply_entries(entries: list[LedgerEntry], booking=None) -> list[CreditTransaction]:
    """
    Append ledger rows and move cached balances.

    Must be called inside ``transaction.atomic()``; raises
    ``InsufficientCredits`` before writing anything if any resulting
    balance would be negative.
    """
    totals: dict[int, int] = {}
    for entry in entries:
        totals[entry.user_id] = totals.get(entry.user_id, 0) + entry.amount

    users = lock_users(totals)
    for user_id, delta in totals.items():
        if delta < 0:
            ensure_can_cover(users[user_id], -delta)

    for user_id, delta in totals.items():
        if delta:
            User.objects.filter(pk=user_id).update(credits=F("credits") + delta)

    rows = CreditTransaction.objects.bulk_create(
        [
            CreditTransaction(
                user_id=entry.user_id,
                amount=entry.amount,
                reason=entry.reason,
                booking=booking,
            )
            for entry in entries
        ]
    )
    return rows


def transfer(
    sender_id: int,
    recipient_id: int,
    amount: int,
    debit_reason: str,
    credit_reason: str,
    booking=None,
) -> list[CreditTransaction]:
    """Move ``amount`` credits between two users as a pair of rows summing to zero."""
    if amount <= 0:
        raise InvalidCreditOperation("Amount must be positive")
    if sender_id == recipient_id:
        raise InvalidCreditOperation("Cannot transfer credits to yourself")

    with transaction.atomic():
        rows = apply_entries(
            [
                LedgerEntry(sender_id, -amount, debit_reason),
                LedgerEntry(recipient_id, amount, credit_reason),
            ],
            booking=booking,
        )

    logger.info(
        "Transferred %s credits from user %s to user %s",
        amount,
        sender_id,
        recipient_id,
        extra={"booking_id": getattr(booking, "pk", None)},
    )
    return rows


def settle_booking(booking) -> list[CreditTransaction]:
    """Pay the provider for a completed booking out of the booker's balance."""
    amount = booking.credits_used or 0
    if amount <= 0:
        return []
    title = booking.listing.title
    return transfer(
        booking.booker_id,
        booking.listing.owner_id,
        amount,
        debit_reason=f"Booking completed: {title}",
        credit_reason=f"Booking payment received: {title}",
        booking=booking,
    )


def transfer_between_users(sender_id: int, recipient_id: int, amount: int, reason: str | None = None):
    """User-initiated transfer."""
    reason = (reason or "").strip()
    if not User.objects.filter(pk=recipient_id).exists():
        raise NotFound("Recipient not found", user_id=recipient_id)
    return transfer(
        sender_id,
        recipient_id,
        amount,
        debit_reason=reason or f"Transfer to user {recipient_id}",
        credit_reason=reason or f"Transfer from user {sender_id}",
    )


def top_up(user_id: int, amount: int, reason: str = "Admin credit adjustment") -> CreditTransaction:
    """
    Admin grant. Negative amounts are corrections and may not take the
    balance below zero.
    """
    if amount == 0:
        raise InvalidCreditOperation("Amount must not be zero")

    with transaction.atomic():
        [row] = apply_entries([LedgerEntry(user_id, amount, reason)])

    logger.info("Adjusted credits of user %s by %s", user_id, amount)
    return row


def ledger_balance(user_id: int) -> int:
    """Sum of the user's ledger rows."""
    total = CreditTransaction.objects.filter(user_id=user_id).aggregate(total=Sum("amount"))["total"]
    return total or 0


def ledger_stats(user_id: int) -> LedgerStats:
    totals = CreditTransaction.objects.filter(user_id=user_id).aggregate(
        earned=Sum("amount", filter=Q(amount__gt=0)),
        spent=Sum("amount", filter=Q(amount__lt=0)),
    )
    earned = totals["earned"] or 0
    spent = abs(totals["spent"] or 0)
    return LedgerStats(total_earned=earned, total_spent=spent, net_balance=earned - spent)


def verify_balance(user_id: int) -> bool:
    """True when the cached balance matches the ledger."""
    cached = User.objects.filter(pk=user_id).values_list("credits", flat=True).first()
    if cached is None:
        raise NotFound("User not found", user_id=user_id)
    consistent = cached == ledger_balance(user_id)
    if not consistent:
        logger.warning("Cached credits of user %s diverge from ledger", user_id)
    return consistent
