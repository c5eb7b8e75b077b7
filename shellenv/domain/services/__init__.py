"""
Domain Services Package

Architectural Intent:
- Contains domain services implementing the loader's pure logic
- Overlay folding and environment merging have no side effects
"""

from shellenv.domain.services.environment import merge_environment
from shellenv.domain.services.overlay_composition import (
    Overlay,
    apply_overlay,
    compose_overlays,
    rules_overlay,
)

__all__ = [
    "merge_environment",
    "Overlay",
    "apply_overlay",
    "compose_overlays",
    "rules_overlay",
]
