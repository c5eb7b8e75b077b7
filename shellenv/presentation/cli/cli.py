"""
CLI Module

Architectural Intent:
- Command-line interface for shellenv
- Entry point for all user interactions
- Delegates to application use cases via composition root
- Supports --verbose/--debug flags for log level control
- The only place that reads os.environ for activation; it is handed to the
  use cases as the inherited environment

Output:
- Status lines go to stderr, prefixed [*], [+] or [-]; stdout belongs to
  the hook, the command, or `plan` JSON
"""

import argparse
import asyncio
import json
import logging
import os
import shlex
import sys
import traceback

from shellenv.application.dtos.activation_dtos import ActivationRequest
from shellenv.domain.errors import (
    DescriptorError,
    OverlayError,
    ResolverUnavailableError,
    ShellenvError,
    SourceHashMismatchError,
    UnknownPackageError,
)
from shellenv.domain.value_objects.session_id import SessionId
from shellenv.infrastructure.config import load_config
from shellenv.infrastructure.logging import configure_logging, level_from_name


def _say(message: str) -> None:
    print(message, file=sys.stderr)


def _add_descriptor_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--file", "-f", help="Path to descriptor (default: shell.json)"
    )
    source.add_argument(
        "--expr", "-E", help="Descriptor given inline as JSON text"
    )
    parser.add_argument(
        "--package",
        "-p",
        action="append",
        default=[],
        metavar="PKG",
        help="Add a package; without -f/-E builds an ad-hoc environment",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shellenv",
        description="shellenv: declarative shell environments backed by Nix",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit logs as JSON lines"
    )
    parser.add_argument(
        "--config", help="Path to shellenv.json application config"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    shell_parser = subparsers.add_parser(
        "shell", help="Enter an interactive shell with the environment active"
    )
    _add_descriptor_args(shell_parser)

    run_parser = subparsers.add_parser(
        "run", help="Run the hook, then one command, inside the environment"
    )
    _add_descriptor_args(run_parser)
    run_parser.add_argument("script_cmd", nargs="+", help="Command to run")

    plan_parser = subparsers.add_parser(
        "plan", help="Resolve the environment and print the activation plan"
    )
    _add_descriptor_args(plan_parser)

    session_parser = subparsers.add_parser(
        "session", help="Activate the environment in a detached tmux session"
    )
    _add_descriptor_args(session_parser)
    session_parser.add_argument("--session", "-s", help="Tmux session name")

    attach_parser = subparsers.add_parser(
        "attach", help="Attach to a session started with `shellenv session`"
    )
    attach_parser.add_argument("session_id", help="Session ID to attach to")

    subparsers.add_parser("sessions", help="List tmux sessions")

    kill_parser = subparsers.add_parser("kill", help="Kill a persistent session")
    kill_parser.add_argument("session_id", help="Session ID to kill")

    return parser


def _request(args: argparse.Namespace, command=None) -> ActivationRequest:
    return ActivationRequest(
        descriptor_path=args.file,
        inline=args.expr,
        packages=tuple(args.package),
        command=command,
        session_name=getattr(args, "session", None),
    )


def _report_failure(e: Exception, verbose: bool) -> None:
    if isinstance(e, FileNotFoundError):
        _say(f"[-] Descriptor not found: {e.filename or e}")
    elif isinstance(e, DescriptorError):
        _say(f"[-] Invalid descriptor: {e}")
    elif isinstance(e, UnknownPackageError):
        _say(f"[-] Unknown package(s): {', '.join(e.names)}")
    elif isinstance(e, SourceHashMismatchError):
        _say(f"[-] Source hash mismatch for '{e.package}'")
        _say(f"    specified: {e.expected}")
        _say(f"    got:       {e.actual}")
    elif isinstance(e, OverlayError):
        _say(f"[-] Overlay error: {e}")
    elif isinstance(e, ResolverUnavailableError):
        _say(f"[-] {e}")
    else:
        _say(f"[-] Activation Failed: {e}")
    if verbose:
        traceback.print_exc()


async def async_main():
    parser = build_parser()
    args = parser.parse_args()

    config = load_config(args.config)

    # Configure logging based on flags
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = level_from_name(config.log_level)
    configure_logging(level=level, json_format=args.json_logs)

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return

    if args.command == "sessions":
        from shellenv import composition_root

        container = composition_root.create_container(config)
        for session_id in await container.tmux_adapter.list_sessions():
            print(session_id)
        return

    if args.command in ("attach", "kill"):
        from shellenv import composition_root

        container = composition_root.create_container(config)
        try:
            session_id = SessionId(args.session_id)
        except ValueError as e:
            _say(f"[-] {e}")
            sys.exit(1)

        if args.command == "kill":
            if not await container.tmux_adapter.kill_session(session_id):
                _say(f"[-] No session named {session_id}")
                sys.exit(1)
            _say(f"[+] Killed {session_id}")
            return

        cmd = container.tmux_adapter.attach_command(session_id)
        _say(f"[*] Attaching to {session_id}...")
        try:
            os.execvp(cmd[0], cmd)
        except FileNotFoundError:
            _say("[-] Error: tmux not found. Install tmux and try again.")
            sys.exit(1)
        return

    command = None
    if args.command == "run":
        parts = args.script_cmd
        command = parts[0] if len(parts) == 1 else shlex.join(parts)

    try:
        request = _request(args, command)
    except ValueError as e:
        _say(f"[-] {e}")
        sys.exit(1)

    from shellenv import composition_root

    try:
        container = composition_root.create_container(config)
    except (ValueError, OSError) as e:
        _say(f"[-] Configuration error: {e}")
        sys.exit(1)

    inherited = dict(os.environ)

    try:
        descriptor = container.load_descriptor.execute(request)

        if args.command == "plan":
            activation = await container.activate.plan(descriptor, inherited)
            print(json.dumps(activation.plan.to_dict(), indent=2, sort_keys=True))
            return

        if args.command == "session":
            _say(f"[*] Resolving {descriptor.name}...")
            session_id = await container.activate_in_session.execute(
                descriptor, inherited, request.session_name
            )
            _say(f"[+] Environment '{descriptor.name}' is active in session '{session_id}'.")
            _say(f"[*] To attach: shellenv attach {session_id}")
            return

        _say(f"[*] Resolving {descriptor.name} ({len(descriptor.packages)} package(s))...")
        activation = await container.activate.execute(
            descriptor, inherited, request.command
        )
    except (FileNotFoundError, ShellenvError) as e:
        _report_failure(e, verbose)
        sys.exit(1)
    except KeyboardInterrupt:
        _say("\n[*] Activation interrupted.")
        sys.exit(130)

    if activation.exit_code:
        _say(f"[-] {descriptor.name} exited with code {activation.exit_code}")
        sys.exit(activation.exit_code)


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
