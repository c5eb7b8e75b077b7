"""
Activation DTOs

Architectural Intent:
- Data Transfer Objects for activation use case boundaries
- Input validation at the application boundary
- Decouples CLI arguments from the domain model
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ActivationRequest:
    """Where the descriptor comes from and what to do once activated.

    With neither a path nor inline text, `packages` alone forms an ad-hoc
    descriptor; with nothing at all the default descriptor file is used.
    """

    descriptor_path: Optional[str] = None
    inline: Optional[str] = None
    packages: tuple[str, ...] = ()
    command: Optional[str] = None
    session_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.descriptor_path is not None and self.inline is not None:
            raise ValueError("give a descriptor path or inline text, not both")
        if self.descriptor_path == "":
            raise ValueError("descriptor_path cannot be empty")
        if self.command is not None and not self.command.strip():
            raise ValueError("command cannot be empty")
        if any(not p for p in self.packages):
            raise ValueError("package names cannot be empty")

    @property
    def is_ad_hoc(self) -> bool:
        return self.descriptor_path is None and self.inline is None and bool(self.packages)
