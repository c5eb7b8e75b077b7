"""
Bash Hook Runner

Architectural Intent:
- Infrastructure adapter implementing HookRunnerPort with bash
- Interactive activation writes an rc file (hook under `set -e`) and starts
  `bash --rcfile`; a failing hook exits the shell with its status
- One-off activation runs `bash -e -c "<hook>\n<command>"`
- The plan's environment is passed explicitly; os.environ is never mutated
"""

import asyncio
import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from shellenv.domain.entities.activation import ActivationPlan
from shellenv.domain.entities.descriptor import is_variable_name
from shellenv.domain.errors import ShellenvError
from shellenv.domain.ports.hook_runner_port import HookRunnerPort

logger = logging.getLogger(__name__)


def render_rcfile(plan: ActivationPlan, export_environment: bool = False) -> str:
    lines = [f"# shellenv activation for {plan.name}"]
    if export_environment:
        lines.extend(
            f"export {key}={shlex.quote(value)}"
            for key, value in sorted(plan.environment.items())
            # inherited names like BASH_FUNC_x%% cannot be exported
            if is_variable_name(key)
        )
    lines.append("set -e")
    if plan.shell_hook:
        lines.append(plan.shell_hook.rstrip("\n"))
    lines.append("set +e")
    return "\n".join(lines) + "\n"


class BashHookRunner(HookRunnerPort):
    def __init__(self, shell: str = "bash", rc_dir: Optional[str] = None):
        self.shell = shell
        self.rc_dir = rc_dir

    def command_argv(self, plan: ActivationPlan, command: str) -> list[str]:
        script = f"{plan.shell_hook.rstrip()}\n{command}" if plan.shell_hook else command
        return [self.shell, "--noprofile", "--norc", "-e", "-c", script]

    def write_rcfile(self, plan: ActivationPlan, export_environment: bool = False) -> Path:
        fd, path = tempfile.mkstemp(prefix=f"shellenv-{plan.name}-", suffix=".rc", dir=self.rc_dir)
        with os.fdopen(fd, "w") as f:
            f.write(render_rcfile(plan, export_environment))
        return Path(path)

    async def run(self, plan: ActivationPlan, command: Optional[str] = None) -> int:
        def _run():
            rcfile = None
            if command is not None:
                argv = self.command_argv(plan, command)
            else:
                rcfile = self.write_rcfile(plan)
                argv = [self.shell, "--noprofile", "--rcfile", str(rcfile), "-i"]
            logger.debug("Activating %s: %s", plan.name, argv[:3])
            try:
                result = subprocess.run(argv, env=dict(plan.environment))
            except FileNotFoundError:
                raise ShellenvError(f"shell '{self.shell}' not found") from None
            finally:
                if rcfile is not None:
                    rcfile.unlink(missing_ok=True)
            logger.info("Environment %s exited with code %d", plan.name, result.returncode)
            return result.returncode

        return await asyncio.get_running_loop().run_in_executor(None, _run)

    def shell_command(self, plan: ActivationPlan) -> str:
        # the rc file outlives this process; the session shell reads it later
        rcfile = self.write_rcfile(plan, export_environment=True)
        # env -i drops PATH, so the shell must be absolute
        shell = shutil.which(self.shell, path=plan.environment.get("PATH")) or self.shell
        return f"exec env -i {shlex.quote(shell)} --noprofile --rcfile {shlex.quote(str(rcfile))} -i"
