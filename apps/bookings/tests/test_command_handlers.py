"""Booking creation and status transitions through the command handlers."""

from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from apps.bookings.application.command_handlers import create_booking, transition_booking
from apps.bookings.models import Booking
from apps.credits import ledger
from apps.credits.models import CreditTransaction
from shared.domain.errors import (
    Conflict,
    Forbidden,
    InactiveListing,
    InsufficientCredits,
    InvalidAmount,
    InvalidInterval,
    InvalidTransition,
    NotFound,
    TooEarly,
)

pytestmark = pytest.mark.django_db


def test_create_booking_starts_pending(listing, booker, slot):
    start, end = slot
    booking = create_booking(listing.pk, booker.pk, start, end)

    assert booking.status == Booking.Status.PENDING
    assert booking.price_cents == listing.price_cents
    assert booking.credits_used is None
    assert booking.provider_id == listing.owner_id


def test_create_booking_rejects_bad_interval(listing, booker, slot):
    start, _ = slot
    with pytest.raises(InvalidInterval):
        create_booking(listing.pk, booker.pk, start, start)
    with pytest.raises(InvalidInterval):
        create_booking(listing.pk, booker.pk, start, start - timedelta(minutes=5))
    assert not Booking.objects.exists()


def test_create_booking_rejects_negative_amounts(listing, booker, slot):
    start, end = slot
    with pytest.raises(InvalidAmount) as excinfo:
        create_booking(listing.pk, booker.pk, start, end, credits_used=-5)
    assert excinfo.value.to_dict()["credits_used"] == -5
    with pytest.raises(InvalidAmount):
        create_booking(listing.pk, booker.pk, start, end, price_cents=-1)
    assert not Booking.objects.exists()

    booking = create_booking(listing.pk, booker.pk, start, end, price_cents=0, credits_used=0)
    assert booking.price_cents == 0
    assert booking.credits_used is None


def test_model_refuses_inverted_interval(listing, booker, slot):
    start, end = slot
    booking = Booking(listing=listing, booker=booker, start_at=end, end_at=start)
    with pytest.raises(ValidationError):
        booking.clean()
    with pytest.raises(InvalidInterval):
        booking.save()


def test_database_constraint_on_interval(listing, booker, slot):
    start, end = slot
    with pytest.raises(IntegrityError), transaction.atomic():
        Booking.objects.bulk_create([Booking(listing=listing, booker=booker, start_at=end, end_at=start)])


def test_create_booking_unknown_listing(booker, slot):
    with pytest.raises(NotFound):
        create_booking(9999, booker.pk, *slot)


def test_create_booking_inactive_listing(listing, booker, slot):
    listing.deactivate()
    with pytest.raises(InactiveListing):
        create_booking(listing.pk, booker.pk, *slot)


def test_cannot_book_own_listing(listing, provider, slot):
    with pytest.raises(Forbidden):
        create_booking(listing.pk, provider.pk, *slot)


def test_skill_provider_cannot_book(listing, slot, django_user_model):
    other_provider = django_user_model.objects.create_user(
        email="other@example.com",
        password="OtherPass123",
        user_type=django_user_model.UserTypeChoices.SKILL_PROVIDER,
    )
    with pytest.raises(Forbidden):
        create_booking(listing.pk, other_provider.pk, *slot)


def test_create_booking_over_confirmed_slot_conflicts(listing, booker, slot):
    start, end = slot
    Booking.objects.create(listing=listing, booker=booker, start_at=start, end_at=end, status=Booking.Status.CONFIRMED)
    with pytest.raises(Conflict):
        create_booking(listing.pk, booker.pk, start, end)


def test_create_booking_requires_credits(listing, booker, slot):
    with pytest.raises(InsufficientCredits) as excinfo:
        create_booking(listing.pk, booker.pk, *slot, credits_used=booker.credits + 1)
    assert excinfo.value.context == {"required": booker.credits + 1, "available": booker.credits}


def test_confirm_sets_timestamp(listing, booker, provider, slot):
    booking = create_booking(listing.pk, booker.pk, *slot)
    booking = transition_booking(booking.pk, "CONFIRMED", actor_id=provider.pk)

    assert booking.status == Booking.Status.CONFIRMED
    assert booking.confirmed_at is not None


def test_booker_cannot_confirm(listing, booker, slot):
    booking = create_booking(listing.pk, booker.pk, *slot)
    with pytest.raises(Forbidden):
        transition_booking(booking.pk, "CONFIRMED", actor_id=booker.pk)


def test_outsider_is_rejected_before_anything_else(listing, booker, outsider, slot):
    booking = create_booking(listing.pk, booker.pk, *slot)
    # Even an invalid edge answers Forbidden for a non-party.
    with pytest.raises(Forbidden):
        transition_booking(booking.pk, "COMPLETED", actor_id=outsider.pk)


def test_unknown_booking(provider):
    with pytest.raises(NotFound):
        transition_booking(424242, "CONFIRMED", actor_id=provider.pk)


def test_pending_to_completed_is_invalid(listing, booker, provider, slot):
    booking = create_booking(listing.pk, booker.pk, *slot)
    with pytest.raises(InvalidTransition):
        transition_booking(booking.pk, "COMPLETED", actor_id=provider.pk, now=slot[1] + timedelta(hours=1))
    booking.refresh_from_db()
    assert booking.status == Booking.Status.PENDING


def test_decline_and_terminal_state(listing, booker, provider, slot):
    booking = create_booking(listing.pk, booker.pk, *slot)
    booking = transition_booking(booking.pk, "DECLINED", actor_id=provider.pk)
    assert booking.status == Booking.Status.DECLINED

    with pytest.raises(InvalidTransition):
        transition_booking(booking.pk, "CONFIRMED", actor_id=provider.pk)


def test_booker_cancels_confirmed_booking(listing, booker, provider, slot):
    booking = create_booking(listing.pk, booker.pk, *slot)
    transition_booking(booking.pk, "CONFIRMED", actor_id=provider.pk)
    booking = transition_booking(booking.pk, "CANCELLED", actor_id=booker.pk)

    assert booking.status == Booking.Status.CANCELLED
    assert booking.cancelled_at is not None


def test_pending_cannot_be_cancelled(listing, booker, slot):
    booking = create_booking(listing.pk, booker.pk, *slot)
    with pytest.raises(InvalidTransition):
        transition_booking(booking.pk, "CANCELLED", actor_id=booker.pk)


def test_completion_before_end_is_too_early(listing, booker, provider, slot):
    start, end = slot
    booking = create_booking(listing.pk, booker.pk, start, end)
    transition_booking(booking.pk, "CONFIRMED", actor_id=provider.pk)

    with pytest.raises(TooEarly):
        transition_booking(booking.pk, "COMPLETED", actor_id=booker.pk, now=end - timedelta(minutes=1))
    booking.refresh_from_db()
    assert booking.status == Booking.Status.CONFIRMED


def test_completion_moves_credits(listing, booker, provider, slot):
    start, end = slot
    booking = create_booking(listing.pk, booker.pk, start, end, credits_used=25)
    transition_booking(booking.pk, "CONFIRMED", actor_id=provider.pk)

    booking = transition_booking(booking.pk, "COMPLETED", actor_id=provider.pk, now=end)

    booker.refresh_from_db()
    provider.refresh_from_db()
    assert booking.status == Booking.Status.COMPLETED
    assert booking.completed_at == end
    assert booker.credits == 75
    assert provider.credits == 25

    rows = CreditTransaction.objects.filter(booking=booking)
    assert rows.count() == 2
    assert sum(row.amount for row in rows) == 0
    assert {row.reason for row in rows} == {
        f"Booking completed: {listing.title}",
        f"Booking payment received: {listing.title}",
    }
    assert ledger.verify_balance(booker.pk)
    assert ledger.verify_balance(provider.pk)


def test_completion_without_credits_writes_no_ledger_rows(listing, booker, provider, slot):
    start, end = slot
    booking = create_booking(listing.pk, booker.pk, start, end)
    transition_booking(booking.pk, "CONFIRMED", actor_id=provider.pk)
    transition_booking(booking.pk, "COMPLETED", as_system=True, now=end)

    assert not CreditTransaction.objects.filter(booking=booking).exists()


def test_completion_rolls_back_when_booker_is_short(listing, booker, provider, outsider, slot):
    start, end = slot
    booking = create_booking(listing.pk, booker.pk, start, end, credits_used=80)
    transition_booking(booking.pk, "CONFIRMED", actor_id=provider.pk)
    ledger.transfer_between_users(booker.pk, outsider.pk, 50)

    with pytest.raises(InsufficientCredits):
        transition_booking(booking.pk, "COMPLETED", actor_id=booker.pk, now=end)

    booking.refresh_from_db()
    booker.refresh_from_db()
    provider.refresh_from_db()
    assert booking.status == Booking.Status.CONFIRMED
    assert booker.credits == 50
    assert provider.credits == 0
    assert not CreditTransaction.objects.filter(booking=booking).exists()


def test_confirmation_rechecks_credits(listing, booker, provider, outsider, slot):
    booking = create_booking(listing.pk, booker.pk, *slot, credits_used=60)
    ledger.transfer_between_users(booker.pk, outsider.pk, 50)

    with pytest.raises(InsufficientCredits):
        transition_booking(booking.pk, "CONFIRMED", actor_id=provider.pk)
    booking.refresh_from_db()
    assert booking.status == Booking.Status.PENDING


def test_unknown_status_is_an_invalid_transition(listing, booker, provider, slot):
    booking = create_booking(listing.pk, booker.pk, *slot)
    with pytest.raises(InvalidTransition):
        transition_booking(booking.pk, "ARCHIVED", actor_id=provider.pk)
