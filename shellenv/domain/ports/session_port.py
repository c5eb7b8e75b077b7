"""
Session Port

Architectural Intent:
- Port interface for persistent sessions holding an activated environment
- Abstracts session lifecycle and command execution within sessions
- Implemented by TmuxAdapter
"""

from abc import ABC, abstractmethod
from typing import List
from shellenv.domain.value_objects.session_id import SessionId


class SessionPort(ABC):
    """
    Port interface for managing persistent sessions (e.g., Tmux).
    """

    @abstractmethod
    async def create_session(self, session_id: SessionId) -> bool:
        """
        Creates a new session. Returns False if it exists or tmux refused it.
        """
        pass

    @abstractmethod
    async def list_sessions(self) -> List[SessionId]:
        pass

    @abstractmethod
    async def kill_session(self, session_id: SessionId) -> bool:
        pass

    @abstractmethod
    async def run_command(self, session_id: SessionId, command: str) -> bool:
        """
        Types a command into the session's active pane.
        """
        pass

    @abstractmethod
    def attach_command(self, session_id: SessionId) -> list[str]:
        """
        Returns the argv that attaches the current terminal to a session.
        """
        pass
