"""Tests for TmuxAdapter."""

from unittest.mock import MagicMock

import pytest

from shellenv.domain.value_objects.session_id import SessionId
from shellenv.infrastructure.adapters.tmux_adapter import TmuxAdapter


def _server(sessions=()):
    server = MagicMock()
    server.sessions = MagicMock()
    server.sessions.__iter__ = MagicMock(return_value=iter(list(sessions)))
    server.sessions.filter = MagicMock(return_value=list(sessions))
    server.has_session = MagicMock(return_value=bool(sessions))
    return server


def _session(name):
    session = MagicMock()
    session.session_name = name
    return session


class TestTmuxAdapter:
    @pytest.mark.asyncio
    async def test_create_session(self):
        server = _server()
        created = await TmuxAdapter(server).create_session(SessionId("shellenv-demo"))
        assert created is True
        server.new_session.assert_called_once_with(
            session_name="shellenv-demo", kill_session=False, attach=False
        )

    @pytest.mark.asyncio
    async def test_create_existing_session(self):
        server = _server([_session("shellenv-demo")])
        assert await TmuxAdapter(server).create_session(SessionId("shellenv-demo")) is False
        server.new_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_failure_logged(self):
        server = _server()
        server.new_session.side_effect = RuntimeError("no server running")
        assert await TmuxAdapter(server).create_session(SessionId("x")) is False

    @pytest.mark.asyncio
    async def test_list_sessions(self):
        server = _server([_session("a"), _session("b")])
        sessions = await TmuxAdapter(server).list_sessions()
        assert sessions == [SessionId("a"), SessionId("b")]

    @pytest.mark.asyncio
    async def test_kill_session(self):
        session = _session("a")
        server = _server([session])
        assert await TmuxAdapter(server).kill_session(SessionId("a")) is True
        session.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_kill_missing_session(self):
        assert await TmuxAdapter(_server()).kill_session(SessionId("a")) is False

    @pytest.mark.asyncio
    async def test_run_command(self):
        session = _session("a")
        server = _server([session])
        ok = await TmuxAdapter(server).run_command(SessionId("a"), "exec env -i bash")
        assert ok is True
        session.active_window.active_pane.send_keys.assert_called_once_with("exec env -i bash")

    @pytest.mark.asyncio
    async def test_run_command_missing_session(self):
        assert await TmuxAdapter(_server()).run_command(SessionId("a"), "ls") is False

    def test_attach_command(self):
        assert TmuxAdapter(_server()).attach_command(SessionId("a")) == [
            "tmux", "attach-session", "-t", "a"
        ]
