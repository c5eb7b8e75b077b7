"""
Domain Errors

Architectural Intent:
- Single exception hierarchy for every failure a loader or activation can report
- Adapters translate subprocess and filesystem failures into these types
- The CLI maps them onto user-facing messages and exit codes

Domain Rules:
- Syntax and validation errors are raised before any package lookup
- Unknown packages, hash mismatches and missing overlay attributes are never retried
"""

from __future__ import annotations

from typing import Iterable, Optional


class ShellenvError(Exception):
    """Base class for all shellenv errors."""


class DescriptorError(ShellenvError):
    """The descriptor could not be turned into a valid Descriptor."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{message}")


class DescriptorSyntaxError(DescriptorError):
    """The descriptor text is not well-formed."""


class DescriptorValidationError(DescriptorError):
    """A descriptor field has the wrong shape or violates an invariant."""


class OverlayError(ShellenvError):
    """An overlay could not be loaded or evaluated."""


class MissingAttributeError(OverlayError, KeyError):
    """An overlay referenced an attribute absent from the package set it extends."""

    def __init__(self, name: str, overlay: str = "") -> None:
        self.name = name
        self.overlay = overlay
        where = f" (overlay {overlay})" if overlay else ""
        OverlayError.__init__(self, f"attribute '{name}' missing{where}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownPackageError(ShellenvError):
    """One or more package references do not exist in the package set."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(names)
        super().__init__(f"unknown package(s): {', '.join(self.names)}")


class ResolutionError(ShellenvError):
    """The package manager failed to realise a package."""

    def __init__(self, package: str, detail: str) -> None:
        self.package = package
        self.detail = detail
        super().__init__(f"failed to build '{package}': {detail}")


class SourceHashMismatchError(ResolutionError):
    """A pinned source fetched with a different hash than declared."""

    def __init__(self, package: str, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            package,
            f"hash mismatch: specified {expected}, got {actual}; "
            "update the pinned sha256",
        )


class ResolverUnavailableError(ShellenvError):
    """The package manager executables are not installed."""

