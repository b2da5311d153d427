"""
Database connection and pool management
"""

import asyncpg
import logging
from typing import Optional

from config.settings import DATABASE_URL, DB_POOL_MIN_SIZE, DB_POOL_MAX_SIZE, DB_COMMAND_TIMEOUT
from utils.exceptions import STORAGE_EXCEPTIONS

logger = logging.getLogger(__name__)


async def _create_pool(dsn: str, min_size: int) -> asyncpg.Pool:
    return await asyncpg.create_pool(
        dsn,
        min_size=min_size,
        max_size=DB_POOL_MAX_SIZE,
        command_timeout=DB_COMMAND_TIMEOUT,
        statement_cache_size=0  # Fix for pgbouncer compatibility
    )


async def init_database(dsn: Optional[str] = None, strict: bool = True) -> asyncpg.Pool:
    """
    Create the connection pool and verify it can reach the database

    Args:
        dsn: connection string, defaults to DATABASE_URL
        strict: re-raise when the database is unreachable; otherwise return a
            pool with no pre-opened connections that connects on first use
    """
    dsn = dsn or DATABASE_URL
    db_pool = None
    try:
        db_pool = await _create_pool(dsn, DB_POOL_MIN_SIZE)
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except STORAGE_EXCEPTIONS as e:
        if db_pool is not None:
            await db_pool.close()
        if strict:
            raise
        logger.error(f"Database unreachable at startup, connecting on demand: {e}")
        # min_size=0 opens no connections until the pool is first used
        return await _create_pool(dsn, 0)

    logger.info("Database initialized successfully")
    return db_pool


async def close_database(db_pool: Optional[asyncpg.Pool]):
    """Close database connection pool"""
    if db_pool:
        await db_pool.close()
    logger.info("Database connections closed")
