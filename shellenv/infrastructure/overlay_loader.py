"""
Overlay Loader

Architectural Intent:
- Turns OverlayRefs into Overlay callables, in order
- JSON overlay files compile to declarative rules; `module:function` refs
  import a Python callable taking the previous PackageSet
- Directories load every *.json file in lexical order, the way Nix reads
  ~/.config/nixpkgs/overlays

Design Decisions:
- Loading reads files and imports modules but never touches the package set,
  so every overlay error surfaces before any catalog lookup
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional
import importlib
import logging

from shellenv.domain.entities.overlay import OverlayRef, OverlayRefKind
from shellenv.domain.errors import DescriptorError, OverlayError
from shellenv.domain.services.overlay_composition import Overlay, rules_overlay
from shellenv.infrastructure.descriptor_parser import (
    ParseContext,
    load_overlay_rules,
    parse_overlay_rules,
)

logger = logging.getLogger(__name__)


class OverlayLoader:
    def __init__(self, user_directory: Optional[str] = None) -> None:
        self.user_directory = Path(user_directory).expanduser() if user_directory else None

    def user_overlays(self) -> list[Overlay]:
        """Overlays from the configured user directory; absent directory means none."""
        if self.user_directory is None or not self.user_directory.is_dir():
            return []
        return self._load_directory(self.user_directory)

    def load(self, ref: OverlayRef) -> list[Overlay]:
        if ref.kind is OverlayRefKind.INLINE:
            ctx = ParseContext(None, ref.base_dir or Path.cwd())
            return [rules_overlay(ref.target, parse_overlay_rules(ref.inline, ctx, ref.target))]
        if ref.kind is OverlayRefKind.PYTHON:
            return [self._load_python(ref.target)]

        path = ref.path
        if ref.kind is OverlayRefKind.DIRECTORY or path.is_dir():
            if not path.is_dir():
                raise OverlayError(f"overlay directory not found: {path}")
            return self._load_directory(path)
        return [self._load_file(path)]

    def load_all(self, refs: Iterable[OverlayRef], include_user: bool = True) -> list[Overlay]:
        overlays = self.user_overlays() if include_user else []
        for ref in refs:
            overlays.extend(self.load(ref))
        logger.debug("Loaded %d overlay(s): %s", len(overlays), [o.label for o in overlays])
        return overlays

    def _load_directory(self, directory: Path) -> list[Overlay]:
        return [self._load_file(path) for path in sorted(directory.glob("*.json"))]

    def _load_file(self, path: Path) -> Overlay:
        try:
            rules = load_overlay_rules(path)
        except DescriptorError as e:
            raise OverlayError(str(e)) from e
        return rules_overlay(str(path), rules)

    def _load_python(self, target: str) -> Overlay:
        module_name, attr = target.split(":", 1)
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise OverlayError(f"cannot import overlay module '{module_name}': {e}") from e
        fn = getattr(module, attr, None)
        if not callable(fn):
            raise OverlayError(f"overlay '{target}' is not a callable")
        return Overlay(target, fn)
