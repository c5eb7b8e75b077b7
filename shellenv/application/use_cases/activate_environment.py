"""
Activate Environment Use Case

Architectural Intent:
- Drives the Activation aggregate: resolve the descriptor, then run the
  hook followed by an interactive shell or a single command
- Resolution always completes before the hook starts
- Domain events are published whether the activation succeeds or fails

Failure semantics:
- Resolution errors mark the activation FAILED and propagate
- A non-zero hook/command exit marks it FAILED and is returned, not raised;
  the caller turns the exit code into the process status
"""

import logging
from typing import Mapping, Optional

from shellenv.application.use_cases.resolve_environment import ResolveEnvironment
from shellenv.domain.entities.activation import Activation
from shellenv.domain.entities.descriptor import Descriptor
from shellenv.domain.errors import ShellenvError
from shellenv.domain.ports.event_bus_port import EventBusPort
from shellenv.domain.ports.hook_runner_port import HookRunnerPort

logger = logging.getLogger(__name__)


class ActivateEnvironment:
    def __init__(
        self,
        resolve: ResolveEnvironment,
        hook_runner: HookRunnerPort,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.resolve = resolve
        self.hook_runner = hook_runner
        self.event_bus = event_bus

    async def _publish(self, activation: Activation, already: int = 0) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish(activation.domain_events[already:])

    async def plan(
        self, descriptor: Descriptor, inherited: Mapping[str, str]
    ) -> Activation:
        """Resolve without entering the environment. Returns a RESOLVED activation."""
        activation = Activation(descriptor).start_resolution()
        try:
            plan = await self.resolve.execute(descriptor, inherited)
        except ShellenvError as e:
            activation = activation.fail(str(e))
            await self._publish(activation)
            raise
        activation = activation.resolved(plan)
        await self._publish(activation)
        return activation

    async def execute(
        self,
        descriptor: Descriptor,
        inherited: Mapping[str, str],
        command: Optional[str] = None,
    ) -> Activation:
        activation = await self.plan(descriptor, inherited)
        published = len(activation.domain_events)

        try:
            exit_code = await self.hook_runner.run(activation.plan, command)
        except ShellenvError as e:
            activation = activation.fail(str(e))
            await self._publish(activation, published)
            raise

        activation = activation.complete(exit_code)
        if exit_code != 0:
            logger.warning("Activation of %s exited with code %d", descriptor.name, exit_code)
        await self._publish(activation, published)
        return activation
