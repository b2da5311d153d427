"""
Startup schema synchronization of the users table
"""

import pytest

from database.schema import sync_schema, USERS_TABLE_DDL
from utils.exceptions import StorageError


@pytest.mark.asyncio
async def test_creates_table_if_missing(fake_pool):
    assert await sync_schema(fake_pool) is True

    ddl = fake_pool.conn.execute.call_args.args[0]
    assert ddl == USERS_TABLE_DDL
    assert "CREATE TABLE IF NOT EXISTS users" in ddl
    assert "id SERIAL PRIMARY KEY" in ddl


def test_ddl_never_drops_data():
    assert "DROP" not in USERS_TABLE_DDL.upper()
    assert "TRUNCATE" not in USERS_TABLE_DDL.upper()


@pytest.mark.asyncio
async def test_failure_is_logged_and_non_fatal_by_default(fake_pool, caplog):
    fake_pool.conn.execute.side_effect = ConnectionRefusedError("connection refused")

    assert await sync_schema(fake_pool) is False
    assert "Schema synchronization failed" in caplog.text


@pytest.mark.asyncio
async def test_failure_is_fatal_when_strict(fake_pool):
    fake_pool.conn.execute.side_effect = ConnectionRefusedError("connection refused")

    with pytest.raises(StorageError):
        await sync_schema(fake_pool, strict=True)
