"""
Hook Runner Port

Architectural Intent:
- Port interface for entering a resolved environment
- Runs the entry hook, then either an interactive shell or one command
- Implemented by BashHookRunner
"""

from abc import ABC, abstractmethod
from typing import Optional

from shellenv.domain.entities.activation import ActivationPlan


class HookRunnerPort(ABC):
    @abstractmethod
    async def run(self, plan: ActivationPlan, command: Optional[str] = None) -> int:
        """
        Runs the plan's hook with the plan's environment, then `command` or an
        interactive shell. Returns the exit code.
        """
        pass

    @abstractmethod
    def shell_command(self, plan: ActivationPlan) -> str:
        """
        Returns a single shell command line that enters the environment,
        for handing to a terminal multiplexer.
        """
        pass
