"""
Package Catalogs

Architectural Intent:
- Infrastructure adapters implementing CatalogPort
- NixCatalog asks nix-instantiate whether nixpkgs binds an attribute and
  caches the answer for the life of the process
- StaticCatalog serves a JSON index of attribute -> version, for offline
  planning and for pinning the set of allowed packages
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional
import json
import logging
import subprocess

from shellenv.domain.entities.package import Package
from shellenv.domain.errors import ResolutionError, ResolverUnavailableError
from shellenv.domain.ports.catalog_port import CatalogPort
from shellenv.infrastructure.adapters.nix_expression import is_attr_path, render_lookup

logger = logging.getLogger(__name__)


class NixCatalog(CatalogPort):
    def __init__(self, nixpkgs: str = "<nixpkgs>", nix_instantiate: str = "nix-instantiate"):
        self.nixpkgs = nixpkgs
        self.nix_instantiate = nix_instantiate
        self._cache: dict[str, Optional[Package]] = {}

    def lookup(self, name: str) -> Optional[Package]:
        if name in self._cache:
            return self._cache[name]
        if not is_attr_path(name):
            logger.debug("Rejecting invalid attribute path %r", name)
            return None

        cmd = [
            self.nix_instantiate,
            "--eval",
            "--json",
            "--strict",
            "-E",
            render_lookup(name, self.nixpkgs),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        except FileNotFoundError:
            raise ResolverUnavailableError(
                f"'{self.nix_instantiate}' not found; is Nix installed?"
            ) from None
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise ResolutionError(name, stderr.splitlines()[-1] if stderr else "evaluation failed") from e

        data = json.loads(result.stdout)
        package = Package.from_attribute(name, data["version"]) if data else None
        self._cache[name] = package
        logger.debug("Catalog lookup %s -> %s", name, package)
        return package


class StaticCatalog(CatalogPort):
    def __init__(self, versions: Mapping[str, str]):
        self._versions = dict(versions)

    @classmethod
    def from_file(cls, path: str | Path) -> "StaticCatalog":
        """Load an index: either {"attr": "version"} or ["attr", ...]."""
        with open(Path(path).expanduser()) as f:
            data = json.load(f)
        if isinstance(data, list):
            data = {name: "" for name in data}
        if not isinstance(data, dict):
            raise ValueError(f"catalog index {path} must be an object or a list")
        return cls({str(k): str(v) for k, v in data.items()})

    def lookup(self, name: str) -> Optional[Package]:
        if name not in self._versions:
            return None
        return Package.from_attribute(name, self._versions[name])
