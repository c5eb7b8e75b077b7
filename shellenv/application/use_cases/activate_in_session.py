"""
Activate In Session Use Case

Architectural Intent:
- Persistent activation: resolve once, then start the activated shell
  inside a detached tmux session the user can attach to later
- Coordinates resolution, session creation, and command dispatch
"""

import logging
from typing import Mapping, Optional

from shellenv.application.use_cases.activate_environment import ActivateEnvironment
from shellenv.domain.entities.descriptor import Descriptor
from shellenv.domain.errors import ShellenvError
from shellenv.domain.ports.hook_runner_port import HookRunnerPort
from shellenv.domain.ports.session_port import SessionPort
from shellenv.domain.value_objects.session_id import SessionId

logger = logging.getLogger(__name__)


class ActivateInSession:
    def __init__(
        self,
        activate: ActivateEnvironment,
        hook_runner: HookRunnerPort,
        session_port: SessionPort,
        prefix: str = "shellenv",
    ):
        self.activate = activate
        self.hook_runner = hook_runner
        self.session_port = session_port
        self.prefix = prefix

    async def execute(
        self,
        descriptor: Descriptor,
        inherited: Mapping[str, str],
        session_name: Optional[str] = None,
    ) -> SessionId:
        session_id = (
            SessionId(session_name)
            if session_name
            else SessionId.for_environment(descriptor.name, self.prefix)
        )
        activation = await self.activate.plan(descriptor, inherited)

        if session_id in await self.session_port.list_sessions():
            raise ShellenvError(f"tmux session '{session_id}' already exists")
        if not await self.session_port.create_session(session_id):
            raise ShellenvError(f"tmux session '{session_id}' could not be created")

        command = self.hook_runner.shell_command(activation.plan)
        if not await self.session_port.run_command(session_id, command):
            # never leave a session behind without an activation in it
            await self.session_port.kill_session(session_id)
            raise ShellenvError(f"Failed to send activation to tmux session '{session_id}'")

        logger.info("Environment %s active in session %s", descriptor.name, session_id)
        return session_id
