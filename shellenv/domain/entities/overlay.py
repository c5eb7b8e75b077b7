"""
Overlay Entities

Architectural Intent:
- Declarative overlay rules, the JSON rendition of `self: super: { ... }`
- An OverlayRef records where an overlay comes from before it is loaded

Domain Rules:
- define: bind an attribute to a new package (no existing attribute needed)
- override: patch the package already bound to the attribute in prev
- alias: bind the attribute to prev.<target>
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from shellenv.domain.entities.package import Package, PackageOverride


class OverlayAction(Enum):
    DEFINE = "derivation"
    OVERRIDE = "override"
    ALIAS = "alias"


@dataclass(frozen=True)
class OverlayRule:
    attribute: str
    action: OverlayAction
    package: Optional[Package] = None
    override: Optional[PackageOverride] = None
    target: Optional[str] = None

    def __post_init__(self) -> None:
        required = {
            OverlayAction.DEFINE: self.package,
            OverlayAction.OVERRIDE: self.override,
            OverlayAction.ALIAS: self.target,
        }[self.action]
        if required is None:
            raise ValueError(
                f"overlay rule for '{self.attribute}' is missing its "
                f"{self.action.value} value"
            )


class OverlayRefKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    PYTHON = "python"
    INLINE = "inline"


@dataclass(frozen=True)
class OverlayRef:
    """Where an overlay lives: a JSON file, a directory of them,
    a `module:function` callable, or rules written inline."""

    kind: OverlayRefKind
    target: str
    base_dir: Optional[Path] = None
    inline: Optional[dict[str, Any]] = None

    @property
    def path(self) -> Path:
        path = Path(self.target).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path

    def __str__(self) -> str:
        return self.target
