"""
Composition Root

Architectural Intent:
- Dependency injection composition root for shellenv
- Single place where all adapters and use cases are wired together
- No adapter instantiation should occur outside this module

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Factory function creates and wires all dependencies from ShellenvConfig
- The tmux adapter is built on first use; only session commands need it
"""

from dataclasses import dataclass, field
from typing import Optional

from shellenv.application.use_cases.activate_environment import ActivateEnvironment
from shellenv.application.use_cases.activate_in_session import ActivateInSession
from shellenv.application.use_cases.load_descriptor import LoadDescriptor
from shellenv.application.use_cases.resolve_environment import ResolveEnvironment
from shellenv.domain.events.event_base import DomainEvent
from shellenv.domain.ports.catalog_port import CatalogPort
from shellenv.domain.ports.session_port import SessionPort
from shellenv.infrastructure.adapters.catalogs import NixCatalog, StaticCatalog
from shellenv.infrastructure.adapters.hook_runner import BashHookRunner
from shellenv.infrastructure.adapters.nix_resolver import NixResolver
from shellenv.infrastructure.adapters.tmux_adapter import TmuxAdapter
from shellenv.infrastructure.config import ShellenvConfig
from shellenv.infrastructure.descriptor_parser import load_descriptor, parse_descriptor
from shellenv.infrastructure.event_bus import EventBus, log_event
from shellenv.infrastructure.overlay_loader import OverlayLoader
from shellenv.infrastructure.telemetry.otel_exporter import OTELExporter, create_exporter


@dataclass
class ShellenvContainer:
    """DI container holding all wired dependencies."""

    config: ShellenvConfig
    catalog: CatalogPort
    resolver: NixResolver
    hook_runner: BashHookRunner
    event_bus: EventBus
    telemetry: OTELExporter
    load_descriptor: LoadDescriptor
    resolve: ResolveEnvironment
    activate: ActivateEnvironment
    _tmux: Optional[SessionPort] = field(default=None, repr=False)

    @property
    def tmux_adapter(self) -> SessionPort:
        if self._tmux is None:
            self._tmux = TmuxAdapter()
        return self._tmux

    @property
    def activate_in_session(self) -> ActivateInSession:
        return ActivateInSession(
            self.activate,
            self.hook_runner,
            self.tmux_adapter,
            prefix=self.config.session.prefix,
        )


def create_catalog(config: ShellenvConfig) -> CatalogPort:
    if config.catalog.backend == "static":
        if not config.catalog.index_path:
            raise ValueError("catalog.backend=static needs catalog.index_path")
        return StaticCatalog.from_file(config.catalog.index_path)
    if config.catalog.backend != "nix":
        raise ValueError(f"Unknown catalog backend: {config.catalog.backend}")
    return NixCatalog(config.nix.nixpkgs, config.nix.nix_instantiate)


def create_container(config: Optional[ShellenvConfig] = None) -> ShellenvContainer:
    """Create and wire all dependencies."""
    config = config or ShellenvConfig()

    catalog = create_catalog(config)
    resolver = NixResolver(
        nixpkgs=config.nix.nixpkgs,
        nix_build=config.nix.nix_build,
        timeout=config.nix.build_timeout or None,
    )
    hook_runner = BashHookRunner(
        shell=config.shell.executable, rc_dir=config.shell.rc_dir or None
    )
    overlay_loader = OverlayLoader(
        config.overlays.directory if config.overlays.enabled else None
    )

    event_bus = EventBus()
    telemetry = create_exporter(config.telemetry.endpoint, config.telemetry.insecure)
    event_bus.subscribe(DomainEvent, log_event)
    event_bus.subscribe(DomainEvent, telemetry.on_event)

    resolve = ResolveEnvironment(catalog, resolver, overlay_loader)
    activate = ActivateEnvironment(resolve, hook_runner, event_bus)
    loader = LoadDescriptor(
        read_file=load_descriptor,
        parse_text=parse_descriptor,
        default_path=config.shell.descriptor,
    )

    return ShellenvContainer(
        config=config,
        catalog=catalog,
        resolver=resolver,
        hook_runner=hook_runner,
        event_bus=event_bus,
        telemetry=telemetry,
        load_descriptor=loader,
        resolve=resolve,
        activate=activate,
    )
