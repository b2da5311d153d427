"""
Exceptions raised by the storage layer
"""

import asyncio

import asyncpg

# Failures that mean the database could not serve the request
STORAGE_EXCEPTIONS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
    OSError,
)


class StorageError(Exception):
    """The backing database is unavailable or a read/write failed"""

    def __init__(self, message: str, operation: str = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
