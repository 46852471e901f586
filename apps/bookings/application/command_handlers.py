"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Request a session of a listing (-> PENDING)
- TransitionBookingCommand: Move a booking along the state graph
"""

from dataclasses import dataclass
from datetime import datetime
import logging

from django.contrib.auth import get_user_model
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import Conflict, Forbidden, InvalidAmount, NotFound
from shared.domain.value_objects import TimeSlot
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
    BookingDeclined,
)
from apps.bookings.domain.state_machine import (
    ActorRole,
    BookingStatus,
    ensure_completable,
    ensure_transition,
    parse_status,
)
from apps.bookings.models import Booking
from apps.bookings.services import has_conflict, lock_booking, lock_listing
from apps.credits import ledger
from apps.users.permissions import can_book_session

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to request a booking

    ``price_cents`` and ``credits_used`` default to the listing's price
    and nothing (paid outside the platform) respectively.
    """
    listing_id: int
    booker_id: int
    start_at: datetime
    end_at: datetime
    price_cents: int | None = None
    credits_used: int | None = None


@dataclass
class TransitionBookingCommand:
    """
    Command to change a booking's status

    ``actor_id`` is the requesting user; ``as_system`` marks scheduled
    jobs acting without a user. ``now`` pins the clock for the completion
    time check.
    """
    booking_id: int
    requested_status: str
    actor_id: int | None = None
    as_system: bool = False
    now: datetime | None = None


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Validate the interval (InvalidInterval)
    2. Lock the listing row; it must exist and be active
    3. Check the booker may book it and can cover the credits
    4. Reject slots overlapping a CONFIRMED booking
    5. Persist as PENDING and publish BookingCreated after commit
    """

    def handle(self, command: CreateBookingCommand) -> Booking:
        logger.info(
            f"Creating booking for listing {command.listing_id}, "
            f"booker {command.booker_id}, slot {command.start_at} - {command.end_at}"
        )

        slot = TimeSlot(command.start_at, command.end_at)
        for field_name in ("price_cents", "credits_used"):
            value = getattr(command, field_name)
            if value is not None and value < 0:
                raise InvalidAmount(f"{field_name} must not be negative", **{field_name: value})
        User = get_user_model()

        with DjangoUnitOfWork() as uow:
            listing = lock_listing(command.listing_id)

            try:
                booker = User.objects.get(pk=command.booker_id)
            except User.DoesNotExist:
                raise NotFound(f"User {command.booker_id} not found", user_id=command.booker_id)

            if listing.owner_id == booker.pk:
                raise Forbidden("You cannot book your own listing")
            if not can_book_session(booker):
                raise Forbidden("Only project creators can book sessions")

            credits_used = command.credits_used or 0
            ledger.ensure_can_cover(booker, credits_used)

            if has_conflict(listing.pk, slot.start_at, slot.end_at):
                raise Conflict("This time slot is already booked. Please choose a different time.")

            booking = Booking.objects.create(
                booker=booker,
                listing=listing,
                start_at=slot.start_at,
                end_at=slot.end_at,
                price_cents=command.price_cents if command.price_cents is not None else listing.price_cents,
                credits_used=credits_used or None,
            )

            uow.add_event(
                BookingCreated(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    listing_id=listing.pk,
                    booker_id=booker.pk,
                    provider_id=listing.owner_id,
                )
            )

        logger.info(f"Booking {booking.pk} created (PENDING)")
        return booking


class TransitionBookingHandler:
    """
    Handler for TransitionBooking command

    Check order: booking exists, actor is a party, the edge exists, the
    actor may take it, completion is not early. Confirmation then re-runs
    the conflict check under lock; completion settles credits. All writes
    share one transaction.
    """

    def handle(self, command: TransitionBookingCommand) -> Booking:
        requested = parse_status(command.requested_status)
        now = command.now or timezone.now()

        with DjangoUnitOfWork() as uow:
            booking = lock_booking(command.booking_id)
            role = self._resolve_role(booking, command)
            current = booking.status

            ensure_transition(current, requested, role)
            if requested == BookingStatus.COMPLETED:
                ensure_completable(booking.end_at, now)

            logger.info(
                f"Booking {booking.pk}: {current} -> {requested} "
                f"by {role.value} (actor {command.actor_id})"
            )

            if requested == BookingStatus.CONFIRMED:
                self._confirm(booking, now)
                uow.add_event(
                    BookingConfirmed(
                        aggregate_id=booking.pk,
                        booking_id=booking.pk,
                        listing_id=booking.listing_id,
                        booker_id=booking.booker_id,
                        provider_id=booking.provider_id,
                        start_at=booking.start_at,
                    )
                )
            elif requested == BookingStatus.DECLINED:
                booking.status = BookingStatus.DECLINED
                booking.cancelled_at = now
                booking.save(update_fields=["status", "cancelled_at", "updated_at"])
                uow.add_event(
                    BookingDeclined(
                        aggregate_id=booking.pk,
                        booking_id=booking.pk,
                        booker_id=booking.booker_id,
                        provider_id=booking.provider_id,
                    )
                )
            elif requested == BookingStatus.CANCELLED:
                booking.status = BookingStatus.CANCELLED
                booking.cancelled_at = now
                booking.save(update_fields=["status", "cancelled_at", "updated_at"])
                uow.add_event(
                    BookingCancelled(
                        aggregate_id=booking.pk,
                        booking_id=booking.pk,
                        booker_id=booking.booker_id,
                        provider_id=booking.provider_id,
                        cancelled_by_id=command.actor_id,
                    )
                )
            elif requested == BookingStatus.COMPLETED:
                rows = ledger.settle_booking(booking)
                booking.status = BookingStatus.COMPLETED
                booking.completed_at = now
                booking.save(update_fields=["status", "completed_at", "updated_at"])
                uow.add_event(
                    BookingCompleted(
                        aggregate_id=booking.pk,
                        booking_id=booking.pk,
                        booker_id=booking.booker_id,
                        provider_id=booking.provider_id,
                        credits_transferred=booking.credits_used if rows else 0,
                    )
                )

        return booking

    def _resolve_role(self, booking: Booking, command: TransitionBookingCommand) -> ActorRole:
        if command.as_system:
            return ActorRole.SYSTEM
        if command.actor_id == booking.listing.owner_id:
            return ActorRole.PROVIDER
        if command.actor_id == booking.booker_id:
            return ActorRole.BOOKER
        raise Forbidden("You are not a party to this booking")

    def _confirm(self, booking: Booking, now: datetime) -> None:
        # Lock the listing so concurrent confirmations of the same slot serialize.
        lock_listing(booking.listing_id, require_active=False)
        if has_conflict(booking.listing_id, booking.start_at, booking.end_at, exclude_booking_id=booking.pk):
            raise Conflict("This time slot was booked in the meantime")

        if booking.credits_used:
            ledger.ensure_can_cover(booking.booker, booking.credits_used)

        booking.status = BookingStatus.CONFIRMED
        booking.confirmed_at = now
        booking.save(update_fields=["status", "confirmed_at", "updated_at"])


# ===== Entry points =====

def create_booking(
    listing_id: int,
    booker_id: int,
    start_at: datetime,
    end_at: datetime,
    price_cents: int | None = None,
    credits_used: int | None = None,
) -> Booking:
    return CreateBookingHandler().handle(
        CreateBookingCommand(
            listing_id=listing_id,
            booker_id=booker_id,
            start_at=start_at,
            end_at=end_at,
            price_cents=price_cents,
            credits_used=credits_used,
        )
    )


def transition_booking(
    booking_id: int,
    requested_status: str,
    actor_id: int | None = None,
    *,
    as_system: bool = False,
    now: datetime | None = None,
) -> Booking:
    return TransitionBookingHandler().handle(
        TransitionBookingCommand(
            booking_id=booking_id,
            requested_status=requested_status,
            actor_id=actor_id,
            as_system=as_system,
            now=now,
        )
    )
