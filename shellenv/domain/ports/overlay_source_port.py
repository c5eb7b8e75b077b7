"""
Overlay Source Port

Architectural Intent:
- Abstract interface for turning overlay references into Overlay callables
- Implemented by OverlayLoader (JSON files, directories, Python callables)
"""

from typing import Iterable, Protocol, runtime_checkable

from shellenv.domain.entities.overlay import OverlayRef
from shellenv.domain.services.overlay_composition import Overlay


@runtime_checkable
class OverlaySourcePort(Protocol):
    def load_all(
        self, refs: Iterable[OverlayRef], include_user: bool = True
    ) -> list[Overlay]: ...
