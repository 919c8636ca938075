from __future__ import annotations

import pytest

from aclio.core.db_utils import is_connection_error, with_db_retry


class OperationalError(Exception):
    pass


def flaky(failures: list):
    calls = {"count": 0}

    @with_db_retry(max_retries=3, retry_delay=0)
    async def operation() -> str:
        calls["count"] += 1
        if failures:
            raise failures.pop(0)
        return "ok"

    return operation, calls


def test_only_transient_operational_errors_retry() -> None:
    assert is_connection_error(OperationalError("database is locked")) is True
    assert is_connection_error(OperationalError("(sqlite3.OperationalError) no such table: kv_entries")) is False
    assert is_connection_error(ConnectionRefusedError("refused")) is True
    assert is_connection_error(ValueError("database is locked")) is False


@pytest.mark.asyncio
async def test_locked_database_is_retried() -> None:
    operation, calls = flaky([OperationalError("database is locked")])

    assert await operation() == "ok"
    assert calls["count"] == 2


@pytest.mark.asyncio
async def test_missing_table_fails_without_retry() -> None:
    operation, calls = flaky([OperationalError("no such table: kv_entries")])

    with pytest.raises(OperationalError):
        await operation()
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_gives_up_after_max_retries() -> None:
    operation, calls = flaky([OperationalError("database is locked") for _ in range(5)])

    with pytest.raises(OperationalError):
        await operation()
    assert calls["count"] == 4
