"""
Event Bus Port

Architectural Intent:
- Abstract interface for publishing domain events
- Decouples activation use cases from logging and telemetry subscribers
"""

from typing import Protocol, Callable, Awaitable, Iterable, runtime_checkable
from shellenv.domain.events.event_base import DomainEvent


@runtime_checkable
class EventBusPort(Protocol):
    async def publish(self, events: Iterable[DomainEvent]) -> None: ...

    def subscribe(
        self, event_type: type, handler: Callable[[DomainEvent], Awaitable[None]]
    ) -> None: ...
