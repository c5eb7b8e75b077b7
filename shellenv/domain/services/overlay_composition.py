"""
Overlay Composition Service

Architectural Intent:
- An overlay is a pure function from the previous package set to the
  attributes it rebinds, i.e. `self: super: { ... }` restricted to super
- Overlays compose by left fold; later overlays observe earlier results
- Declarative overlay rules compile into the same callable shape as
  Python overlays so both kinds mix freely in one list
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Callable, Iterable, Mapping
import logging

from shellenv.domain.entities.overlay import OverlayAction, OverlayRule
from shellenv.domain.entities.package import Package
from shellenv.domain.entities.package_set import PackageSet
from shellenv.domain.errors import MissingAttributeError, OverlayError

logger = logging.getLogger(__name__)

OverlayFn = Callable[[PackageSet], Mapping[str, Package]]


@dataclass(frozen=True)
class Overlay:
    label: str
    fn: OverlayFn

    def __call__(self, prev: PackageSet) -> Mapping[str, Package]:
        return self.fn(prev)


def rules_overlay(label: str, rules: Iterable[OverlayRule]) -> Overlay:
    """Build an Overlay from declarative rules.

    Every rule reads from prev, never from attributes bound by a sibling
    rule in the same overlay.

    The binding name is the set key; a package keeps its own pname, so
    `foo = mkDerivation { pname = "bar"; }` still builds `bar`.
    """
    rules = tuple(rules)

    def apply_rules(prev: PackageSet) -> Mapping[str, Package]:
        updates: dict[str, Package] = {}
        for rule in rules:
            if rule.action is OverlayAction.DEFINE:
                updates[rule.attribute] = rule.package
            elif rule.action is OverlayAction.OVERRIDE:
                updates[rule.attribute] = prev[rule.attribute].apply(rule.override)
            else:
                updates[rule.attribute] = prev[rule.target]
        return updates

    return Overlay(label, apply_rules)


def apply_overlay(prev: PackageSet, overlay: Overlay) -> PackageSet:
    try:
        updates = overlay(prev)
    except MissingAttributeError as e:
        raise MissingAttributeError(e.name, overlay.label) from e
    if not isinstance(updates, Mapping):
        raise OverlayError(
            f"overlay {overlay.label} returned {type(updates).__name__}, expected a mapping"
        )
    for name, package in updates.items():
        if not isinstance(package, Package):
            raise OverlayError(
                f"overlay {overlay.label} bound '{name}' to "
                f"{type(package).__name__}, expected a Package"
            )
    logger.debug("Overlay %s rebinds %s", overlay.label, ", ".join(updates) or "nothing")
    return prev.extend(updates)


def compose_overlays(base: PackageSet, overlays: Iterable[Overlay]) -> PackageSet:
    return reduce(apply_overlay, overlays, base)
