"""
Event Bus Infrastructure

Architectural Intent:
- In-memory event bus implementation for publishing domain events
- Supports async subscription handlers
- Subscribing to DomainEvent receives every event
"""

import logging
from typing import Callable, Awaitable, Iterable
from shellenv.domain.events.event_base import DomainEvent

logger = logging.getLogger(__name__)


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[DomainEvent], Awaitable[None]]]] = {}

    async def publish(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            for event_type in type(event).__mro__:
                for handler in self._handlers.get(event_type, []):
                    await handler(event)

    def subscribe(
        self, event_type: type, handler: Callable[[DomainEvent], Awaitable[None]]
    ) -> None:
        self._handlers.setdefault(event_type, []).append(handler)


async def log_event(event: DomainEvent) -> None:
    logger.info("%s %s", event.event_type, event.aggregate_id)
