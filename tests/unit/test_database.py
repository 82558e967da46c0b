"""Unit tests for the session dependency and DB probe (ai_tools/database.py)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from ai_tools import database
from ai_tools.exceptions import DatabaseConnectionError


def _session_factory(session: AsyncMock) -> MagicMock:
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session)


async def test_get_async_db_commits_on_clean_exit(mock_db_session):
    with patch.object(database, "AsyncSessionLocal", _session_factory(mock_db_session)):
        dependency = database.get_async_db()
        assert await dependency.__anext__() is mock_db_session
        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()

    mock_db_session.commit.assert_awaited_once()
    mock_db_session.rollback.assert_not_awaited()
    mock_db_session.close.assert_awaited_once()


async def test_get_async_db_rolls_back_and_reraises(mock_db_session):
    with patch.object(database, "AsyncSessionLocal", _session_factory(mock_db_session)):
        dependency = database.get_async_db()
        await dependency.__anext__()
        with pytest.raises(RuntimeError, match="boom"):
            await dependency.athrow(RuntimeError("boom"))

    mock_db_session.rollback.assert_awaited_once()
    mock_db_session.commit.assert_not_awaited()


async def test_connection_failures_become_database_connection_error(mock_db_session):
    failure = OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))

    with patch.object(database, "AsyncSessionLocal", _session_factory(mock_db_session)):
        dependency = database.get_async_db()
        await dependency.__anext__()
        with pytest.raises(DatabaseConnectionError, match="connection refused"):
            await dependency.athrow(failure)

    mock_db_session.rollback.assert_awaited_once()


async def test_check_db_connection_reports_ok(mock_db_session):
    with patch.object(database, "AsyncSessionLocal", _session_factory(mock_db_session)):
        assert await database.check_db_connection() == {"status": "ok"}


async def test_check_db_connection_reports_error_detail(mock_db_session):
    mock_db_session.execute.side_effect = OSError("no route to host")

    with patch.object(database, "AsyncSessionLocal", _session_factory(mock_db_session)):
        health = await database.check_db_connection()

    assert health == {"status": "error", "detail": "no route to host"}


async def test_init_db_creates_all_tables():
    conn = AsyncMock()
    begin = MagicMock()
    begin.__aenter__ = AsyncMock(return_value=conn)
    begin.__aexit__ = AsyncMock(return_value=False)
    fake_engine = MagicMock()
    fake_engine.begin.return_value = begin

    with patch.object(database, "engine", fake_engine):
        await database.init_db()

    conn.run_sync.assert_awaited_once_with(database.Base.metadata.create_all)
