"""
Tmux Adapter

Architectural Intent:
- Infrastructure adapter implementing SessionPort via Tmux
- Holds activated environments in detached sessions, attachable later
- Provides session lifecycle management using libtmux
"""

import asyncio
import logging
from typing import List, Optional

import libtmux

from shellenv.domain.ports.session_port import SessionPort
from shellenv.domain.value_objects.session_id import SessionId

logger = logging.getLogger(__name__)


class TmuxAdapter(SessionPort):
    def __init__(self, server: Optional[libtmux.Server] = None):
        self.server = server or libtmux.Server()

    def _find(self, session_id: SessionId):
        matches = self.server.sessions.filter(session_name=str(session_id))
        return matches[0] if matches else None

    async def create_session(self, session_id: SessionId) -> bool:
        def _create():
            try:
                if self.server.has_session(str(session_id)):
                    return False
                self.server.new_session(
                    session_name=str(session_id), kill_session=False, attach=False
                )
                return True
            except Exception as e:
                logger.warning("Could not create tmux session %s: %s", session_id, e)
                return False

        return await asyncio.get_running_loop().run_in_executor(None, _create)

    async def list_sessions(self) -> List[SessionId]:
        def _list():
            try:
                return [
                    SessionId(s.session_name)
                    for s in self.server.sessions
                    if s.session_name
                ]
            except Exception as e:
                logger.warning("Could not list tmux sessions: %s", e)
                return []

        return await asyncio.get_running_loop().run_in_executor(None, _list)

    async def kill_session(self, session_id: SessionId) -> bool:
        def _kill():
            try:
                session = self._find(session_id)
                if session:
                    session.kill()
                    return True
                return False
            except Exception as e:
                logger.warning("Could not kill tmux session %s: %s", session_id, e)
                return False

        return await asyncio.get_running_loop().run_in_executor(None, _kill)

    async def run_command(self, session_id: SessionId, command: str) -> bool:
        def _run():
            try:
                session = self._find(session_id)
                if not session:
                    return False
                pane = session.active_window.active_pane
                pane.send_keys(command)
                return True
            except Exception as e:
                logger.warning("Could not send keys to %s: %s", session_id, e)
                return False

        return await asyncio.get_running_loop().run_in_executor(None, _run)

    def attach_command(self, session_id: SessionId) -> list[str]:
        return ["tmux", "attach-session", "-t", str(session_id)]
