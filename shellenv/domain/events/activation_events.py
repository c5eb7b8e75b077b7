"""
Activation Events

Architectural Intent:
- Events recorded by the Activation aggregate as it moves through its lifecycle
- Carry only primitive values so subscribers never hold domain objects
"""

from dataclasses import dataclass
from typing import Optional

from shellenv.domain.events.event_base import DomainEvent


@dataclass(frozen=True)
class ActivationStartedEvent(DomainEvent):
    environment: str = ""
    source: str = ""
    package_count: int = 0


@dataclass(frozen=True)
class PackagesResolvedEvent(DomainEvent):
    environment: str = ""
    store_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class ActivationCompletedEvent(DomainEvent):
    environment: str = ""
    exit_code: int = 0


@dataclass(frozen=True)
class ActivationFailedEvent(DomainEvent):
    environment: str = ""
    error_message: str = ""
    # None when the failure happened before the hook ran
    exit_code: Optional[int] = None
