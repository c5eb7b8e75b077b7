from dataclasses import dataclass
from pathlib import PurePosixPath

from shellenv.domain.value_objects.nix_hash import NixHash

STORE_DIR = "/nix/store"


@dataclass(frozen=True)
class StorePath:
    """
    Value Object for a realised artifact in the Nix store,
    e.g. /nix/store/<hash>-figlet-2.2.5.
    """
    value: str

    def __post_init__(self):
        path = PurePosixPath(self.value)
        if str(path.parent) != STORE_DIR or "-" not in path.name:
            raise ValueError(f"Not a store path: {self.value}")
        # validates the hash part
        NixHash(path.name.split("-", 1)[0])

    @property
    def hash(self) -> NixHash:
        return NixHash(PurePosixPath(self.value).name.split("-", 1)[0])

    @property
    def name(self) -> str:
        return PurePosixPath(self.value).name.split("-", 1)[1]

    @property
    def bin_dir(self) -> str:
        return f"{self.value}/bin"

    def __str__(self):
        return self.value
