"""
Domain Events Package

Architectural Intent:
- Contains domain events and event bus infrastructure
- Events are the primary mechanism for cross-boundary communication
"""

from shellenv.domain.events.event_base import DomainEvent
from shellenv.domain.events.activation_events import (
    ActivationStartedEvent,
    PackagesResolvedEvent,
    ActivationCompletedEvent,
    ActivationFailedEvent,
)

__all__ = [
    "DomainEvent",
    "ActivationStartedEvent",
    "PackagesResolvedEvent",
    "ActivationCompletedEvent",
    "ActivationFailedEvent",
]
