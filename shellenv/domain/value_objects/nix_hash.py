from dataclasses import dataclass
import re

# Nix base32 omits e, o, t and u
_BASE32 = "0-9a-df-np-sv-z"


@dataclass(frozen=True)
class NixHash:
    """
    Value Object representing the hash part of a Nix store path.
    Ensures that the hash format is valid.
    """
    value: str

    def __post_init__(self):
        if not self._is_valid(self.value):
            raise ValueError(f"Invalid Nix hash format: {self.value}")

    @staticmethod
    def _is_valid(value: str) -> bool:
        return bool(re.match(rf'^[{_BASE32}]{{32}}$', value))

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class SourceHash:
    """
    Value Object for the sha256 pinned on a fetched source.
    Accepts the Nix base32 form (52 chars), hex (64 chars) or SRI (sha256-...).
    """
    value: str

    def __post_init__(self):
        if not self._is_valid(self.value):
            raise ValueError(f"Invalid sha256 format: {self.value}")

    @staticmethod
    def _is_valid(value: str) -> bool:
        return bool(
            re.match(rf'^[{_BASE32}]{{52}}$', value)
            or re.match(r'^[0-9a-f]{64}$', value)
            or re.match(r'^sha256-[A-Za-z0-9+/]{43}=$', value)
        )

    @property
    def is_sri(self) -> bool:
        return self.value.startswith("sha256-")

    def __str__(self):
        return self.value
