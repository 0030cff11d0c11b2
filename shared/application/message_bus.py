"""
Message Bus

Central hub for routing domain events to their handlers.
Events are delivered after the originating transaction has committed;
handlers are fire-and-forget and never abort the operation that raised
the event.
"""

from typing import Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Message bus for domain events

    Multiple handlers per event (1:N). A handler registered for a base
    event class also receives its subclasses.
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: EventHandler
    ):
        """
        Register an event handler

        Registering the same handler twice for one event type is a no-op,
        so app ``ready()`` hooks may run more than once.
        """
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Registered event handler {handler.__name__} for {event_type.__name__}")

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        handlers: List[EventHandler] = []
        for klass in event_type.__mro__:
            for handler in self._event_handlers.get(klass, []):
                if handler not in handlers:
                    handlers.append(handler)
        return handlers

    def publish_events(self, events: Iterable[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event type will be called.
        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            event_type = type(event)
            handlers = self.handlers_for(event_type)

            if not handlers:
                logger.debug(f"No handlers registered for event {event_type.__name__}")
                continue

            logger.info(f"Publishing event {event_type.__name__}", extra={"event": event.to_dict()})

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Error in event handler {handler.__name__} "
                        f"for event {event_type.__name__}: {e}",
                        exc_info=True
                    )


# Global message bus instance
message_bus = MessageBus()
