"""In-process event bus used by the outbox dispatcher."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

from skilltrack.core.events.event_models import EventRecord

logger = logging.getLogger(__name__)

EventHandler = Callable[[EventRecord], None]


class EventBus:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._subscribers.setdefault(event_type, [])
        handlers.append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: EventRecord) -> None:
        handlers = self._subscribers.get(event.event_type, [])
        logger.debug("Publishing %s to %d handler(s)", event.event_type, len(handlers))
        for handler in handlers:
            handler(event)


# Global singleton
event_bus = EventBus()
