"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from shellenv.domain.ports.catalog_port import CatalogPort
from shellenv.domain.ports.resolver_port import ResolverPort
from shellenv.domain.ports.hook_runner_port import HookRunnerPort
from shellenv.domain.ports.session_port import SessionPort
from shellenv.domain.ports.event_bus_port import EventBusPort
from shellenv.domain.ports.overlay_source_port import OverlaySourcePort

__all__ = [
    "CatalogPort",
    "ResolverPort",
    "HookRunnerPort",
    "SessionPort",
    "EventBusPort",
    "OverlaySourcePort",
]
