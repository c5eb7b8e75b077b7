"""
Environment Merge Service

Architectural Intent:
- Computes the variables an activated shell sees, as an explicit value
- Never reads or writes os.environ; the inherited environment is passed in

Domain Rules (applied in order):
1. start from the inherited environment
2. drop every variable the descriptor unsets
3. prepend each artifact's bin directory to PATH, in declaration order
4. mark the shell the way nix-shell does (IN_NIX_SHELL, name)
5. descriptor variables override everything above
"""

from __future__ import annotations

from typing import Iterable, Mapping

PATH_SEPARATOR = ":"


def merge_environment(
    inherited: Mapping[str, str],
    path_entries: Iterable[str],
    variables: Mapping[str, str],
    unset: Iterable[str] = (),
    name: str = "",
) -> dict[str, str]:
    env = dict(inherited)
    for key in unset:
        env.pop(key, None)

    entries = list(path_entries)
    if entries:
        existing = env.get("PATH", "")
        env["PATH"] = PATH_SEPARATOR.join(entries + ([existing] if existing else []))

    env["IN_NIX_SHELL"] = "impure"
    if name:
        env["name"] = name

    env.update(variables)
    return env
