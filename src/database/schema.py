"""
Startup schema synchronization for the users table
"""

import logging

from utils.exceptions import StorageError, STORAGE_EXCEPTIONS

logger = logging.getLogger(__name__)

USERS_TABLE = "users"

# Additive only: an existing table and its rows are left untouched
USERS_TABLE_DDL = f"""
CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
    id SERIAL PRIMARY KEY,
    name VARCHAR(255),
    department VARCHAR(255),
    dob VARCHAR(255)
)
"""


async def sync_schema(db_pool, strict: bool = False) -> bool:
    """
    Ensure the users table exists without dropping existing data.

    Args:
        db_pool: asyncpg pool to run the DDL on
        strict: raise StorageError instead of logging and carrying on

    Returns:
        True when the table is in place, False when a non-strict sync failed
    """
    try:
        async with db_pool.acquire() as conn:
            await conn.execute(USERS_TABLE_DDL)
    except STORAGE_EXCEPTIONS as e:
        logger.error(f"Schema synchronization failed for {USERS_TABLE}: {e}", exc_info=True)
        if strict:
            raise StorageError(f"Schema synchronization failed: {e}") from e
        return False

    logger.info("All models are synchronized successfully")
    return True
