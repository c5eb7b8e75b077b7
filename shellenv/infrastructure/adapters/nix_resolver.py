"""
Nix Resolver

Architectural Intent:
- Infrastructure adapter implementing ResolverPort with nix-build
- Base packages build from the nixpkgs attribute; local or overridden
  packages build from a rendered expression
- Uses subprocess for Nix CLI operations wrapped in async
- Translates nix-build failures into domain errors (hash mismatch,
  missing attribute, generic build failure)
"""

import asyncio
import logging
import re
import subprocess
from typing import Optional

from shellenv.domain.entities.package import Package
from shellenv.domain.errors import (
    ResolutionError,
    ResolverUnavailableError,
    SourceHashMismatchError,
    UnknownPackageError,
)
from shellenv.domain.ports.resolver_port import ResolverPort
from shellenv.domain.value_objects.store_path import StorePath
from shellenv.infrastructure.adapters.nix_expression import render_package

logger = logging.getLogger(__name__)

_HASH_MISMATCH = re.compile(
    r"hash mismatch.*?(?:specified|wanted):\s*(\S+)\s+got:\s*(\S+)", re.DOTALL
)
_MISSING_ATTRIBUTE = re.compile(r"attribute '([^']+)' missing")


class NixResolver(ResolverPort):
    def __init__(
        self,
        nixpkgs: str = "<nixpkgs>",
        nix_build: str = "nix-build",
        timeout: Optional[int] = None,
    ):
        self.nixpkgs = nixpkgs
        self.nix_build = nix_build
        self.timeout = timeout

    def build_command(self, package: Package) -> list[str]:
        if package.is_local or package.is_overridden:
            return [
                self.nix_build,
                "--no-out-link",
                "-E",
                render_package(package, self.nixpkgs),
            ]
        return [self.nix_build, self.nixpkgs, "-A", package.attr_path, "--no-out-link"]

    async def realise(self, package: Package) -> StorePath:
        cmd = self.build_command(package)

        def _build():
            logger.info("Building %s", package.name)
            logger.debug("Running %s", cmd)
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    check=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError:
                raise ResolverUnavailableError(
                    f"'{self.nix_build}' not found; is Nix installed?"
                ) from None
            except subprocess.TimeoutExpired:
                raise ResolutionError(
                    package.name, f"timed out after {self.timeout}s"
                ) from None
            except subprocess.CalledProcessError as e:
                raise self._translate_failure(package, e.stderr or "") from e
            return self._parse_output(package, result.stdout)

        return await asyncio.get_running_loop().run_in_executor(None, _build)

    @staticmethod
    def _translate_failure(package: Package, stderr: str) -> Exception:
        mismatch = _HASH_MISMATCH.search(stderr)
        if mismatch:
            return SourceHashMismatchError(
                package.name, mismatch.group(1), mismatch.group(2)
            )
        missing = _MISSING_ATTRIBUTE.search(stderr)
        if missing and not package.is_local:
            return UnknownPackageError([package.name])
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "nix-build failed"
        return ResolutionError(package.name, detail)

    @staticmethod
    def _parse_output(package: Package, stdout: str) -> StorePath:
        # one line per output; the first is the default output
        lines = [line.strip() for line in stdout.splitlines() if line.strip()]
        if not lines:
            raise ResolutionError(package.name, "nix-build printed no store path")
        try:
            return StorePath(lines[0])
        except ValueError as e:
            raise ResolutionError(package.name, str(e)) from e
