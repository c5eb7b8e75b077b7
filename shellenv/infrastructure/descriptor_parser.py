"""
Descriptor Parser

Architectural Intent:
- Decodes shell.json descriptors and overlay files into domain objects
- Field names follow mkShell / stdenv.mkDerivation (buildInputs, shellHook,
  installPhase, ...) so a shell.nix translates line for line
- Fails fast: any syntax or shape error aborts before a package is looked up

Design Decisions:
- JSON, parsed with the stdlib json module like the application config
- Unknown keys are rejected; a typo in a descriptor should not be silent
- Relative paths (patches, overlays) resolve against the descriptor's directory
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
import json
import logging
import re

from shellenv.domain.entities.descriptor import Descriptor, DEFAULT_NAME
from shellenv.domain.entities.overlay import (
    OverlayAction,
    OverlayRef,
    OverlayRefKind,
    OverlayRule,
)
from shellenv.domain.entities.package import (
    GitSource,
    Package,
    PackageOverride,
    PackageRef,
)
from shellenv.domain.errors import (
    DescriptorError,
    DescriptorSyntaxError,
    DescriptorValidationError,
)
from shellenv.domain.value_objects.nix_hash import SourceHash

logger = logging.getLogger(__name__)

PYTHON_OVERLAY = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_]\w*$")

_TOP_LEVEL_ALIASES = {
    "name": "name",
    "buildInputs": "packages",
    "packages": "packages",
    "env": "variables",
    "variables": "variables",
    "unset": "unset",
    "shellHook": "shell_hook",
    "overlays": "overlays",
    "derivations": "derivations",
}

_RECIPE_KEYS = {
    "version": "version",
    "src": "src",
    "phases": "phases",
    "patches": "patches",
    "buildPhase": "build_phase",
    "installPhase": "install_phase",
}


class ParseContext:
    """Where the data came from, for error messages and relative paths."""

    def __init__(self, source: Optional[Path], base_dir: Path) -> None:
        self.source = source
        self.base_dir = base_dir

    @property
    def label(self) -> Optional[str]:
        return str(self.source) if self.source else None

    def invalid(self, message: str) -> DescriptorValidationError:
        return DescriptorValidationError(message, self.label)


def _decode(text: str, ctx: ParseContext) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DescriptorSyntaxError(
            f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}", ctx.label
        ) from e


def _expect(value: Any, kind: type, what: str, ctx: ParseContext) -> Any:
    if not isinstance(value, kind) or isinstance(value, bool) and kind is not bool:
        raise ctx.invalid(f"{what} must be a {kind.__name__}, got {type(value).__name__}")
    return value


def _string_list(value: Any, what: str, ctx: ParseContext) -> tuple[str, ...]:
    _expect(value, list, what, ctx)
    for i, item in enumerate(value):
        _expect(item, str, f"{what}[{i}]", ctx)
    return tuple(value)


def parse_git_source(data: Any, ctx: ParseContext, what: str = "src") -> GitSource:
    _expect(data, dict, what, ctx)
    unknown = set(data) - {"url", "rev", "sha256"}
    if unknown:
        raise ctx.invalid(f"{what}: unknown keys {', '.join(sorted(unknown))}")
    for key in ("url", "sha256"):
        if key not in data:
            raise ctx.invalid(f"{what}: missing '{key}'")
    try:
        return GitSource(
            url=_expect(data["url"], str, f"{what}.url", ctx),
            sha256=SourceHash(_expect(data["sha256"], str, f"{what}.sha256", ctx)),
            rev=_expect(data["rev"], str, f"{what}.rev", ctx) if "rev" in data else None,
        )
    except ValueError as e:
        raise ctx.invalid(f"{what}: {e}") from e


def _recipe_fields(data: dict, ctx: ParseContext, what: str) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, attr in _RECIPE_KEYS.items():
        if key not in data:
            continue
        value = data[key]
        if attr == "src":
            values[attr] = parse_git_source(value, ctx, f"{what}.src")
        elif attr == "phases":
            values[attr] = _string_list(value, f"{what}.phases", ctx)
        elif attr == "patches":
            values[attr] = tuple(
                str((ctx.base_dir / p).resolve())
                for p in _string_list(value, f"{what}.patches", ctx)
            )
        else:
            values[attr] = _expect(value, str, f"{what}.{key}", ctx)
    return values


def parse_override(data: Any, ctx: ParseContext, what: str) -> PackageOverride:
    _expect(data, dict, what, ctx)
    unknown = set(data) - set(_RECIPE_KEYS)
    if unknown:
        raise ctx.invalid(f"{what}: unknown keys {', '.join(sorted(unknown))}")
    return PackageOverride(**_recipe_fields(data, ctx, what))


def parse_derivation(name: str, data: Any, ctx: ParseContext) -> Package:
    what = f"derivations.{name}"
    _expect(data, dict, what, ctx)
    unknown = set(data) - set(_RECIPE_KEYS) - {"pname"}
    if unknown:
        raise ctx.invalid(f"{what}: unknown keys {', '.join(sorted(unknown))}")
    pname = _expect(data.get("pname", name), str, f"{what}.pname", ctx)
    try:
        return Package(name=pname, **_recipe_fields(data, ctx, what))
    except ValueError as e:
        raise ctx.invalid(f"{what}: {e}") from e


def _parse_package_ref(item: Any, index: int, ctx: ParseContext) -> PackageRef:
    what = f"buildInputs[{index}]"
    if isinstance(item, str):
        if not item:
            raise ctx.invalid(f"{what} cannot be empty")
        return PackageRef(item)
    _expect(item, dict, what, ctx)
    unknown = set(item) - {"name", "override"}
    if unknown:
        raise ctx.invalid(f"{what}: unknown keys {', '.join(sorted(unknown))}")
    name = _expect(item.get("name"), str, f"{what}.name", ctx)
    if not name:
        raise ctx.invalid(f"{what}.name cannot be empty")
    override = None
    if "override" in item:
        override = parse_override(item["override"], ctx, f"{what}.override")
    return PackageRef(name, override)


def _parse_overlay_ref(item: Any, index: int, ctx: ParseContext) -> OverlayRef:
    what = f"overlays[{index}]"
    if isinstance(item, dict):
        # validated now so inline mistakes fail with the descriptor
        parse_overlay_rules(item, ctx, what)
        return OverlayRef(OverlayRefKind.INLINE, what, ctx.base_dir, inline=item)
    _expect(item, str, what, ctx)
    if PYTHON_OVERLAY.match(item):
        return OverlayRef(OverlayRefKind.PYTHON, item, ctx.base_dir)
    kind = OverlayRefKind.FILE if item.endswith(".json") else OverlayRefKind.DIRECTORY
    return OverlayRef(kind, item, ctx.base_dir)


def parse_overlay_rules(data: Any, ctx: ParseContext, what: str = "overlay") -> list[OverlayRule]:
    """Decode `{"attr": {"derivation"|"override"|"alias": ...}}` into rules."""
    _expect(data, dict, what, ctx)
    rules = []
    for attribute, body in data.items():
        where = f"{what}.{attribute}"
        _expect(body, dict, where, ctx)
        if len(body) != 1:
            raise ctx.invalid(
                f"{where} must have exactly one of: derivation, override, alias"
            )
        (key, value), = body.items()
        try:
            action = OverlayAction(key)
        except ValueError:
            raise ctx.invalid(f"{where}: unknown overlay action '{key}'") from None
        if action is OverlayAction.DEFINE:
            rules.append(OverlayRule(attribute, action, package=parse_derivation(attribute, value, ctx)))
        elif action is OverlayAction.OVERRIDE:
            rules.append(OverlayRule(attribute, action, override=parse_override(value, ctx, where)))
        else:
            rules.append(OverlayRule(attribute, action, target=_expect(value, str, where, ctx)))
    return rules


def parse_descriptor(
    text: str,
    source: Optional[Path] = None,
    base_dir: Optional[Path] = None,
) -> Descriptor:
    """Parse descriptor text. `source` is used for messages and relative paths."""
    ctx = ParseContext(source, base_dir or (source.parent if source else Path.cwd()))
    data = _decode(text, ctx)
    _expect(data, dict, "descriptor", ctx)

    unknown = set(data) - set(_TOP_LEVEL_ALIASES)
    if unknown:
        raise ctx.invalid(f"unknown fields: {', '.join(sorted(unknown))}")
    fields: dict[str, Any] = {}
    for key, value in data.items():
        attr = _TOP_LEVEL_ALIASES[key]
        if attr in fields:
            raise ctx.invalid(f"field '{key}' given twice under different names")
        fields[attr] = value

    name = _expect(fields.get("name", DEFAULT_NAME), str, "name", ctx)
    packages = tuple(
        _parse_package_ref(item, i, ctx)
        for i, item in enumerate(_expect(fields.get("packages", []), list, "buildInputs", ctx))
    )

    variables = _expect(fields.get("variables", {}), dict, "env", ctx)
    for key, value in variables.items():
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ctx.invalid(f"env.{key} must be a string or number")
    variables = {k: str(v) for k, v in variables.items()}

    derivations = {
        name_: parse_derivation(name_, body, ctx)
        for name_, body in _expect(fields.get("derivations", {}), dict, "derivations", ctx).items()
    }
    overlays = tuple(
        _parse_overlay_ref(item, i, ctx)
        for i, item in enumerate(_expect(fields.get("overlays", []), list, "overlays", ctx))
    )

    try:
        descriptor = Descriptor(
            name=name,
            packages=packages,
            variables=variables,
            unset=_string_list(fields.get("unset", []), "unset", ctx),
            shell_hook=_expect(fields.get("shell_hook", ""), str, "shellHook", ctx),
            overlays=overlays,
            derivations=derivations,
            source=source,
        )
    except DescriptorError:
        raise
    except ValueError as e:
        raise ctx.invalid(str(e)) from e

    logger.debug(
        "Parsed descriptor %s: %d package(s), %d overlay(s)",
        descriptor.name,
        len(descriptor.packages),
        len(descriptor.overlays),
    )
    return descriptor


def _read_text(path: Path, ctx: ParseContext) -> str:
    """File contents as text; only FileNotFoundError escapes unconverted."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except UnicodeDecodeError as e:
        raise DescriptorSyntaxError(
            f"not valid UTF-8 at byte {e.start}", ctx.label
        ) from e
    except OSError as e:
        raise ctx.invalid(f"cannot read {path}: {e.strerror or e}") from e


def load_descriptor(path: str | Path) -> Descriptor:
    """Read and parse a descriptor file.

    Raises FileNotFoundError when the file is absent, like the other
    config loaders' callers expect. Unreadable or non-UTF-8 files are
    descriptor errors.
    """
    path = Path(path).expanduser().resolve()
    text = _read_text(path, ParseContext(path, path.parent))
    return parse_descriptor(text, source=path)


def load_overlay_rules(path: Path) -> list[OverlayRule]:
    ctx = ParseContext(path, path.parent)
    try:
        text = _read_text(path, ctx)
    except FileNotFoundError:
        raise ctx.invalid(f"overlay file not found: {path}") from None
    return parse_overlay_rules(_decode(text, ctx), ctx)
