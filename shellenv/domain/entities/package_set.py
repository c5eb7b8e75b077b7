"""
Package Set

Architectural Intent:
- Immutable snapshot of name -> Package, the value overlays transform
- The base set is not enumerable (nixpkgs is far too large); attributes not
  bound explicitly are looked up through a catalog function on first access
- extend() returns a new snapshot; the receiver never changes

Domain Rules:
- A missing attribute raises MissingAttributeError (a KeyError), so Mapping
  helpers like `in` and get() behave as expected
"""

from __future__ import annotations

from typing import Callable, Iterator, Mapping, Optional

from shellenv.domain.entities.package import Package
from shellenv.domain.errors import MissingAttributeError

Lookup = Callable[[str], Optional[Package]]


class PackageSet(Mapping[str, Package]):
    __slots__ = ("_packages", "_lookup", "_cache")

    def __init__(
        self,
        packages: Optional[Mapping[str, Package]] = None,
        lookup: Optional[Lookup] = None,
        _cache: Optional[dict[str, Optional[Package]]] = None,
    ) -> None:
        self._packages = dict(packages or {})
        self._lookup = lookup
        self._cache = _cache if _cache is not None else {}

    def __getitem__(self, name: str) -> Package:
        if name in self._packages:
            return self._packages[name]
        if self._lookup is not None:
            if name not in self._cache:
                self._cache[name] = self._lookup(name)
            found = self._cache[name]
            if found is not None:
                return found
        raise MissingAttributeError(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._packages)

    def __len__(self) -> int:
        return len(self._packages)

    def extend(self, updates: Mapping[str, Package]) -> "PackageSet":
        merged = dict(self._packages)
        merged.update(updates)
        return PackageSet(merged, self._lookup, self._cache)

    def __repr__(self) -> str:
        return f"PackageSet({sorted(self._packages)})"
