"""
In-process event routing.

Each app subscribes its handlers from ``AppConfig.ready()``; the unit of
work hands committed events over through :func:`MessageBus.publish_events`.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Type

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """One event type fans out to any number of handlers, called in subscription order."""

    def __init__(self):
        self._subscribers: Dict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        # ready() can run more than once in tests
        subscribers = self._subscribers[event_type]
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug("%s subscribed to %s", getattr(handler, "__name__", handler), event_type.__name__)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._subscribers.get(event_type, ()))

    def publish_events(self, events: Iterable[DomainEvent]):
        """A handler that raises is logged and skipped; the rest still run."""
        for event in events:
            name = type(event).__name__
            subscribers = self.handlers_for(type(event))
            if not subscribers:
                logger.debug("Nobody subscribed to %s", name)
                continue

            logger.info("Delivering %s %s to %d handlers", name, event.event_id, len(subscribers))
            for handler in subscribers:
                try:
                    handler(event)
                except Exception:
                    logger.exception("%s failed while handling %s", getattr(handler, "__name__", handler), name)


message_bus = MessageBus()
