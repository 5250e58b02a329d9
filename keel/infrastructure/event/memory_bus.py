import logging
from collections import defaultdict
from typing import Callable, Type

from keel.domain.shared.event import Event, EventBus

logger = logging.getLogger(__name__)

EventHandlerFunc = Callable[[Event], None]


class InMemoryEventBus(EventBus):
    """Synchronous in-process bus. Handlers run in subscription order."""

    def __init__(self) -> None:
        self._subscribers: dict[Type[Event], list[EventHandlerFunc]] = defaultdict(list)

    def subscribe(self, event_type: Type[Event], handler: EventHandlerFunc) -> None:
        self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: Type[Event], handler: EventHandlerFunc) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Event) -> None:
        handlers = [
            handler
            for event_type, subscribed in self._subscribers.items()
            if isinstance(event, event_type)
            for handler in subscribed
        ]

        if not handlers:
            logger.debug("No handlers for event %s", type(event).__name__)
            return

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                # Listener failures are logged, never raised to the publisher
                logger.exception("Handler %r failed for %s", handler, type(event).__name__)
