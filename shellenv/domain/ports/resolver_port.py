"""
Resolver Port

Architectural Intent:
- Port interface for realising packages into store artifacts
- Abstracts the package manager's fetch/build/cache machinery entirely
- Implemented by NixResolver
"""

from abc import ABC, abstractmethod

from shellenv.domain.entities.package import Package
from shellenv.domain.value_objects.store_path import StorePath


class ResolverPort(ABC):
    """
    Port interface for turning a Package into a realised store path.
    """

    @abstractmethod
    async def realise(self, package: Package) -> StorePath:
        """
        Builds (or fetches from cache) the package and returns its output path.
        Raises ResolutionError, SourceHashMismatchError or UnknownPackageError.
        """
        pass
