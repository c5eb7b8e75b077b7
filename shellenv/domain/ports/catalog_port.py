"""
Catalog Port

Architectural Intent:
- Port interface answering "does the base package set bind this attribute"
- Synchronous because overlays evaluate synchronously against a PackageSet
- Implemented by NixCatalog (nix-instantiate) and StaticCatalog (JSON index)
"""

from abc import ABC, abstractmethod
from typing import Optional

from shellenv.domain.entities.package import Package


class CatalogPort(ABC):
    """
    Port interface for looking up base packages by attribute name.
    """

    @abstractmethod
    def lookup(self, name: str) -> Optional[Package]:
        """
        Returns the base package bound to `name`, or None when absent.
        """
        pass
