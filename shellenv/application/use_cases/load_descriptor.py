"""
Load Descriptor Use Case

Architectural Intent:
- Turns an ActivationRequest into a validated Descriptor
- Reading and parsing are injected so the use case stays free of file formats
- Extra `-p` packages are appended after the descriptor's own, keeping order
"""

from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional
import logging

from shellenv.application.dtos.activation_dtos import ActivationRequest
from shellenv.domain.entities.descriptor import Descriptor
from shellenv.domain.entities.package import PackageRef

logger = logging.getLogger(__name__)


class LoadDescriptor:
    def __init__(
        self,
        read_file: Callable[[Path], Descriptor],
        parse_text: Callable[..., Descriptor],
        default_path: str = "shell.json",
    ):
        self.read_file = read_file
        self.parse_text = parse_text
        self.default_path = default_path

    def execute(self, request: ActivationRequest, cwd: Optional[Path] = None) -> Descriptor:
        if request.is_ad_hoc:
            logger.debug("Ad-hoc descriptor with %s", ", ".join(request.packages))
            return Descriptor.ad_hoc(list(request.packages))

        if request.inline is not None:
            descriptor = self.parse_text(request.inline, base_dir=cwd or Path.cwd())
        else:
            path = Path(request.descriptor_path or self.default_path)
            if cwd is not None and not path.is_absolute():
                path = cwd / path
            descriptor = self.read_file(path)

        if request.packages:
            extra = tuple(PackageRef(name) for name in request.packages)
            descriptor = replace(descriptor, packages=descriptor.packages + extra)
        return descriptor
