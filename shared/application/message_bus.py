"""
Message Bus

Routes domain events published after commit to their subscribers:
secondary indexes (user booking history), the refund ledger and the
notification log. Subscribers never run inside the primary transaction.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Message bus for domain events

    Events: Multiple handlers per event (1:N). Handlers registered for a base
    class also receive its subclasses.
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """
        Register an event handler

        Registering the same handler twice for one event type is a no-op, so
        app ``ready()`` hooks may run more than once.
        """
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Registered event handler {handler.__name__} for {event_type.__name__}")

    def handlers_for(self, event: DomainEvent) -> List[EventHandler]:
        """Handlers subscribed to the event's type or any of its base classes"""
        handlers: List[EventHandler] = []
        for event_type in type(event).__mro__:
            for handler in self._event_handlers.get(event_type, []):
                if handler not in handlers:
                    handlers.append(handler)
        return handlers

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event type will be called.
        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            event_name = type(event).__name__
            handlers = self.handlers_for(event)

            if not handlers:
                logger.debug(f"No handlers registered for event {event_name}")
                continue

            logger.info(f"Publishing event: {event_name} (ID: {event.event_id})")

            for handler in handlers:
                try:
                    handler(event)
                    logger.debug(f"Event {event_name} handled by {handler.__name__}")
                except Exception as e:
                    logger.error(
                        f"Error in event handler {handler.__name__} "
                        f"for event {event_name}: {e}",
                        exc_info=True
                    )
                    # Don't raise - other handlers should still run

    def clear(self):
        """Drop every registration"""
        self._event_handlers.clear()


# Global message bus instance
message_bus = MessageBus()
