from dataclasses import dataclass


@dataclass(frozen=True)
class SessionId:
    """
    Value Object naming the tmux session that holds a persistent activation.
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Session ID cannot be empty")
        # tmux uses these as target separators
        if any(ch in self.value for ch in ".:"):
            raise ValueError(f"Session ID cannot contain '.' or ':': {self.value}")

    @classmethod
    def for_environment(cls, name: str, prefix: str = "shellenv") -> "SessionId":
        return cls(f"{prefix}-{name.replace('.', '-').replace(':', '-')}")

    def __str__(self):
        return self.value
