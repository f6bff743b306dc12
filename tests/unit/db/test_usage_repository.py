"""Unit tests for the PostgreSQL usage repository (mocked session)."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from paywall.core.access import StorageUnavailableError, apply_view
from paywall.db.repositories import SqlUsageRepository

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class _SerializationFailure(Exception):
    sqlstate = "40001"


def _select_result(viewed):
    result = MagicMock()
    result.scalar_one.return_value = viewed
    return result


def _mock_db(session):
    db = MagicMock()
    db.session.return_value.__aenter__.return_value = session
    db.session.return_value.__aexit__.return_value = False
    return db


def _view(resource_id, limit=3):
    return lambda viewed: apply_view(viewed, resource_id, limit)


class TestRunUsageTransaction:
    """Tests for run_usage_transaction."""

    @pytest.fixture
    def mock_session(self):
        session = AsyncMock()
        session.execute = AsyncMock()
        return session

    @pytest.mark.asyncio
    async def test_new_view_writes(self, mock_session):
        """Insert-if-missing, locked read, then update."""
        mock_session.execute.side_effect = [MagicMock(), _select_result(["r1"]), MagicMock()]
        repo = SqlUsageRepository(_mock_db(mock_session))

        allowed = await repo.run_usage_transaction("user-1", "2025-01", _view("r2"), NOW)

        assert allowed is True
        assert mock_session.execute.call_count == 3

        select_stmt = mock_session.execute.call_args_list[1].args[0]
        assert "FOR UPDATE" in str(select_stmt.compile())

        update_stmt = mock_session.execute.call_args_list[2].args[0]
        assert update_stmt.compile().params["viewed_resource_ids"] == ["r1", "r2"]

    @pytest.mark.asyncio
    async def test_re_view_does_not_write(self, mock_session):
        mock_session.execute.side_effect = [MagicMock(), _select_result(["r1"])]
        repo = SqlUsageRepository(_mock_db(mock_session))

        allowed = await repo.run_usage_transaction("user-1", "2025-01", _view("r1"), NOW)

        assert allowed is True
        assert mock_session.execute.call_count == 2

    @pytest.mark.asyncio
    async def test_full_period_denies_without_write(self, mock_session):
        mock_session.execute.side_effect = [MagicMock(), _select_result(["r1", "r2", "r3"])]
        repo = SqlUsageRepository(_mock_db(mock_session))

        allowed = await repo.run_usage_transaction("user-1", "2025-01", _view("r4"), NOW)

        assert allowed is False
        assert mock_session.execute.call_count == 2

    @pytest.mark.asyncio
    async def test_null_column_reads_as_empty(self, mock_session):
        mock_session.execute.side_effect = [MagicMock(), _select_result(None), MagicMock()]
        repo = SqlUsageRepository(_mock_db(mock_session))

        assert await repo.run_usage_transaction("user-1", "2025-01", _view("r1"), NOW) is True

    @pytest.mark.asyncio
    async def test_disabled_database_raises(self):
        repo = SqlUsageRepository(_mock_db(None))

        with pytest.raises(StorageUnavailableError):
            await repo.run_usage_transaction("user-1", "2025-01", _view("r1"), NOW)

    @pytest.mark.asyncio
    async def test_sqlalchemy_error_becomes_storage_unavailable(self, mock_session):
        mock_session.execute.side_effect = SQLAlchemyError("relation does not exist")
        repo = SqlUsageRepository(_mock_db(mock_session))

        with pytest.raises(StorageUnavailableError) as exc_info:
            await repo.run_usage_transaction("user-1", "2025-01", _view("r1"), NOW)

        assert exc_info.value.details == {"account_id": "user-1"}

    @pytest.mark.asyncio
    async def test_serialization_failure_is_retried(self, mock_session):
        """The whole transaction re-runs after a conflict."""
        conflict = DBAPIError("SELECT", {}, _SerializationFailure())
        mock_session.execute.side_effect = [
            conflict,
            MagicMock(), _select_result([]), MagicMock(),
        ]
        repo = SqlUsageRepository(_mock_db(mock_session))

        allowed = await repo.run_usage_transaction("user-1", "2025-01", _view("r1"), NOW)

        assert allowed is True
        assert mock_session.execute.call_count == 4


class TestGetUsagePeriod:
    """Tests for get_usage_period."""

    @pytest.mark.asyncio
    async def test_returns_period(self):
        row = MagicMock()
        row.account_id = "user-1"
        row.period_key = "2025-01"
        row.viewed_resource_ids = ["r1", "r2"]
        row.updated_at = NOW
        result = MagicMock()
        result.scalar_one_or_none.return_value = row
        session = AsyncMock()
        session.execute = AsyncMock(return_value=result)
        repo = SqlUsageRepository(_mock_db(session))

        period = await repo.get_usage_period("user-1", "2025-01")

        assert period.viewed_resource_ids == {"r1", "r2"}
        assert period.updated_at == NOW

    @pytest.mark.asyncio
    async def test_missing_period(self):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        session = AsyncMock()
        session.execute = AsyncMock(return_value=result)
        repo = SqlUsageRepository(_mock_db(session))

        assert await repo.get_usage_period("user-1", "2025-01") is None
