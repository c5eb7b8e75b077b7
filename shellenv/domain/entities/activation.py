"""
Activation Module

Architectural Intent:
- Activation aggregate is the consistency boundary for entering an environment
- Lifecycle managed through state transitions enforced by domain methods
- All state changes produce new instances so the history stays auditable
- Domain events are published for logging and telemetry subscribers
- ActivationPlan is the loader's output: artifacts in declaration order,
  merged environment, hook text left unevaluated

Domain Events:
- ActivationStartedEvent: resolution of a descriptor begins
- PackagesResolvedEvent: every package is realised and the plan is ready
- ActivationCompletedEvent: hook (and shell or command) exited zero
- ActivationFailedEvent: any step failed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Mapping, Optional

from shellenv.domain.entities.descriptor import Descriptor
from shellenv.domain.events.activation_events import (
    ActivationStartedEvent,
    PackagesResolvedEvent,
    ActivationCompletedEvent,
    ActivationFailedEvent,
)
from shellenv.domain.events.event_base import DomainEvent
from shellenv.domain.value_objects.store_path import StorePath


class ActivationStatus(Enum):
    PENDING = auto()
    RESOLVING = auto()
    RESOLVED = auto()
    COMPLETED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class ResolvedPackage:
    name: str
    store_path: StorePath

    def __str__(self) -> str:
        return f"{self.name} -> {self.store_path}"


@dataclass(frozen=True)
class ActivationPlan:
    name: str
    artifacts: tuple[ResolvedPackage, ...]
    environment: Mapping[str, str] = field(default_factory=dict)
    shell_hook: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "environment", MappingProxyType(dict(self.environment)))

    @property
    def store_paths(self) -> tuple[StorePath, ...]:
        return tuple(a.store_path for a in self.artifacts)

    @property
    def path_entries(self) -> tuple[str, ...]:
        return tuple(p.bin_dir for p in self.store_paths)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "packages": [
                {"name": a.name, "store_path": str(a.store_path)} for a in self.artifacts
            ],
            "environment": dict(self.environment),
            "shell_hook": self.shell_hook,
        }


class Activation:
    __slots__ = (
        "_descriptor",
        "_status",
        "_plan",
        "_exit_code",
        "_error_message",
        "_domain_events",
    )

    def __init__(
        self,
        descriptor: Descriptor,
        status: ActivationStatus = ActivationStatus.PENDING,
        plan: Optional[ActivationPlan] = None,
        exit_code: Optional[int] = None,
        error_message: Optional[str] = None,
        domain_events: tuple = (),
    ):
        self._descriptor = descriptor
        self._status = status
        self._plan = plan
        self._exit_code = exit_code
        self._error_message = error_message
        self._domain_events = domain_events

    @property
    def descriptor(self) -> Descriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def status(self) -> ActivationStatus:
        return self._status

    @property
    def plan(self) -> Optional[ActivationPlan]:
        return self._plan

    @property
    def exit_code(self) -> Optional[int]:
        return self._exit_code

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def domain_events(self) -> tuple:
        return self._domain_events

    def _next(self, status: ActivationStatus, event: DomainEvent, **changes) -> "Activation":
        values = {
            "plan": self._plan,
            "exit_code": self._exit_code,
            "error_message": self._error_message,
        }
        values.update(changes)
        return Activation(
            descriptor=self._descriptor,
            status=status,
            domain_events=self._domain_events + (event,),
            **values,
        )

    def start_resolution(self) -> "Activation":
        if self._status != ActivationStatus.PENDING:
            raise ValueError("Activation can only start from PENDING state")
        return self._next(
            ActivationStatus.RESOLVING,
            ActivationStartedEvent(
                aggregate_id=self.name,
                environment=self.name,
                source=str(self._descriptor.source or "<inline>"),
                package_count=len(self._descriptor.packages),
            ),
        )

    def resolved(self, plan: ActivationPlan) -> "Activation":
        if self._status != ActivationStatus.RESOLVING:
            raise ValueError("Activation must be RESOLVING to record a plan")
        return self._next(
            ActivationStatus.RESOLVED,
            PackagesResolvedEvent(
                aggregate_id=self.name,
                environment=self.name,
                store_paths=tuple(str(p) for p in plan.store_paths),
            ),
            plan=plan,
        )

    def complete(self, exit_code: int = 0) -> "Activation":
        if self._status != ActivationStatus.RESOLVED:
            raise ValueError("Activation must be RESOLVED to complete")
        if exit_code != 0:
            return self.fail(f"exited with code {exit_code}", exit_code=exit_code)
        return self._next(
            ActivationStatus.COMPLETED,
            ActivationCompletedEvent(
                aggregate_id=self.name, environment=self.name, exit_code=exit_code
            ),
            exit_code=exit_code,
        )

    def fail(self, message: str, exit_code: Optional[int] = None) -> "Activation":
        exit_code = exit_code if exit_code is not None else self._exit_code
        return self._next(
            ActivationStatus.FAILED,
            ActivationFailedEvent(
                aggregate_id=self.name,
                environment=self.name,
                error_message=message,
                exit_code=exit_code,
            ),
            error_message=message,
            exit_code=exit_code,
        )

    def __repr__(self) -> str:
        return (
            f"Activation(name={self.name}, status={self._status}, "
            f"exit_code={self._exit_code}, error_message={self._error_message})"
        )
