"""
Transactional boundary for booking commands.

Writes happen inside ``transaction.atomic()``; the domain events recorded
along the way reach the message bus only once the outermost transaction
has committed.
"""

import logging
from typing import List

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Usage:
        with DjangoUnitOfWork() as uow:
            booking = lock_booking(booking_id)
            booking.status = BookingStatus.CONFIRMED
            booking.save(update_fields=["status"])
            uow.add_event(BookingConfirmed(...))

    Leaving the block with an exception rolls the transaction back and
    drops the recorded events. A nested unit joins the outer transaction.
    """

    def __init__(self):
        self._atomic = transaction.atomic()
        self._pending: List[DomainEvent] = []

    def __enter__(self):
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None and self._pending:
            batch = list(self._pending)
            transaction.on_commit(lambda: _dispatch(batch))
        elif exc_type is not None and self._pending:
            logger.warning(
                "%s raised, dropping %d unpublished events", exc_type.__name__, len(self._pending)
            )
        self._pending = []
        return self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent):
        self._pending.append(event)
        logger.debug("Recorded %s for aggregate %s", type(event).__name__, event.aggregate_id)

    @property
    def pending_events(self) -> List[DomainEvent]:
        return list(self._pending)


def _dispatch(events: List[DomainEvent]):
    from shared.application.message_bus import message_bus

    logger.info("Dispatching %d committed events", len(events))
    try:
        message_bus.publish_events(events)
    except Exception:
        # Data is committed at this point; only the notification side is lost.
        logger.exception("Dispatching committed events failed")
