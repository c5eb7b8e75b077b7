"""
Descriptor Entity

Architectural Intent:
- Immutable in-memory form of a shell.json environment descriptor
- Created once per load, consumed once per activation, never persisted
- Invariants are checked on construction so a bad descriptor fails before
  any package lookup or build

Domain Rules:
- Package names are unique within a descriptor
- Variable names are shell identifiers
- The shell hook is opaque text; it is never parsed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional
import re

from shellenv.domain.entities.overlay import OverlayRef
from shellenv.domain.entities.package import Package, PackageRef
from shellenv.domain.errors import DescriptorValidationError

_VARIABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_variable_name(name: str) -> bool:
    """True when `name` can be assigned and exported by a POSIX shell."""
    return bool(_VARIABLE_NAME.match(name))


DEFAULT_NAME = "shell"


@dataclass(frozen=True)
class Descriptor:
    name: str
    packages: tuple[PackageRef, ...] = ()
    variables: Mapping[str, str] = field(default_factory=dict)
    unset: tuple[str, ...] = ()
    shell_hook: str = ""
    overlays: tuple[OverlayRef, ...] = ()
    derivations: Mapping[str, Package] = field(default_factory=dict)
    source: Optional[Path] = None

    def __post_init__(self) -> None:
        origin = str(self.source) if self.source else None
        if not self.name:
            raise DescriptorValidationError("name cannot be empty", origin)

        seen: set[str] = set()
        for ref in self.packages:
            if ref.name in seen:
                raise DescriptorValidationError(
                    f"package '{ref.name}' is listed more than once", origin
                )
            seen.add(ref.name)

        for key in list(self.variables) + list(self.unset):
            if not is_variable_name(key):
                raise DescriptorValidationError(
                    f"invalid environment variable name '{key}'", origin
                )

        clash = set(self.variables) & set(self.unset)
        if clash:
            raise DescriptorValidationError(
                f"variables both set and unset: {', '.join(sorted(clash))}", origin
            )

        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))
        object.__setattr__(self, "derivations", MappingProxyType(dict(self.derivations)))

    @property
    def package_names(self) -> tuple[str, ...]:
        return tuple(ref.name for ref in self.packages)

    @property
    def base_dir(self) -> Path:
        return self.source.parent if self.source else Path.cwd()

    @classmethod
    def ad_hoc(cls, packages: list[str], name: str = DEFAULT_NAME) -> "Descriptor":
        """Descriptor for `shell -p a -p b` style invocations."""
        return cls(name=name, packages=tuple(PackageRef(p) for p in packages))
