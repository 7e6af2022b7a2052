"""
Message Bus

Routes lifecycle events to the collaborators subscribed to them
(notifications, payment bookkeeping). One bus is built per application and
handed to the services; there is no process-wide instance.
"""

from typing import Callable, Dict, Iterable, List, Type
import logging

from reservation_engine.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class MessageBus:
    """Events only: several handlers per event type, called in registration order."""

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[Handler]] = {}

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler):
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to {event_type.__name__}")

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[Handler]:
        return list(self._handlers.get(event_type, []))

    def publish(self, event: DomainEvent):
        """
        Deliver one event

        A failing handler is logged and skipped; the state change it reports
        has already been committed.
        """
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug(f"No handlers registered for {event.event_type}")
            return

        logger.debug(f"Publishing {event.event_type} (ID: {event.event_id})")
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Error in handler {getattr(handler, '__name__', handler)} "
                    f"for {event.event_type}: {e}",
                    exc_info=True,
                )

    def publish_events(self, events: Iterable[DomainEvent]):
        for event in events:
            self.publish(event)
