"""
Package Module

Architectural Intent:
- Value types for everything a descriptor or overlay can say about a package
- A Package is either a base attribute looked up in nixpkgs (attr_path set)
  or a local derivation recipe (attr_path None), as written with
  stdenv.mkDerivation in a shell.nix let-binding
- Overrides never mutate; they produce a new Package and remember which
  fields were touched so the resolver can render overrideAttrs

Domain Rules:
- A local derivation needs a src or an installPhase to be buildable
- Only recipe fields (version, src, phases, patches, build and install
  phases) can be overridden
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Optional

from shellenv.domain.value_objects.nix_hash import SourceHash


@dataclass(frozen=True)
class GitSource:
    """A source pinned to a git revision, fetched with fetchgit."""

    url: str
    sha256: SourceHash
    rev: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("git source url cannot be empty")


@dataclass(frozen=True)
class PackageOverride:
    """Attribute changes applied on top of an existing package.

    Every field left as None means "keep what the package already has".
    """

    version: Optional[str] = None
    src: Optional[GitSource] = None
    phases: Optional[tuple[str, ...]] = None
    patches: Optional[tuple[str, ...]] = None
    build_phase: Optional[str] = None
    install_phase: Optional[str] = None

    @property
    def changed_fields(self) -> tuple[str, ...]:
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)

    def is_empty(self) -> bool:
        return not self.changed_fields


@dataclass(frozen=True)
class Package:
    """A buildable package in a package set."""

    name: str
    version: str = ""
    attr_path: Optional[str] = None
    src: Optional[GitSource] = None
    phases: tuple[str, ...] = ()
    patches: tuple[str, ...] = ()
    build_phase: Optional[str] = None
    install_phase: Optional[str] = None
    overridden: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("package name cannot be empty")
        if self.attr_path is None and self.src is None and self.install_phase is None:
            raise ValueError(
                f"local derivation '{self.name}' needs a src or an installPhase"
            )

    @classmethod
    def from_attribute(cls, attr_path: str, version: str = "") -> "Package":
        return cls(name=attr_path.rsplit(".", 1)[-1], version=version, attr_path=attr_path)

    @property
    def is_local(self) -> bool:
        return self.attr_path is None

    @property
    def is_overridden(self) -> bool:
        return bool(self.overridden)

    def apply(self, override: PackageOverride) -> "Package":
        if override.is_empty():
            return self
        changes = {name: getattr(override, name) for name in override.changed_fields}
        touched = tuple(dict.fromkeys(self.overridden + override.changed_fields))
        return replace(self, overridden=touched, **changes)


@dataclass(frozen=True)
class PackageRef:
    """A package reference as listed in a descriptor's buildInputs."""

    name: str
    override: Optional[PackageOverride] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("package reference cannot be empty")

    def __str__(self) -> str:
        return self.name
