"""
Users service - persistence and retrieval of user records
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from fastapi import Request

from database.schema import USERS_TABLE
from utils.exceptions import StorageError, STORAGE_EXCEPTIONS

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, name, department, dob"

# users.id is SERIAL (int4); larger ids cannot exist and the driver rejects them
MAX_USER_ID = 2**31 - 1
MIN_USER_ID = -(2**31)


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def not_found(self) -> bool:
        return self.error_type == "RESOURCE_NOT_FOUND"


def _storable_id(user_id: int) -> bool:
    return MIN_USER_ID <= user_id <= MAX_USER_ID


class UsersService:
    """Owns the lifecycle of user rows in the users table"""

    def __init__(self, db_pool):
        self.db_pool = db_pool
        logger.info(f"UsersService initialized for table: {USERS_TABLE}")

    async def create(self, name: Optional[str], department: Optional[str], dob: Optional[str]) -> Dict[str, Any]:
        """
        Insert a new user; the id is assigned by the database

        Returns:
            The created row as a dict
        """
        query = (
            f"INSERT INTO {USERS_TABLE} (name, department, dob) "
            f"VALUES ($1, $2, $3) RETURNING {USER_COLUMNS}"
        )
        row = await self._fetchrow("create", query, name, department, dob)
        if not row:
            raise StorageError("Insert operation failed - no data returned", operation="create")

        user = dict(row)
        logger.info(f"Created user {user['id']}")
        return user

    async def find_all(self) -> List[Dict[str, Any]]:
        """Every user in storage order; empty list when the table is empty"""
        query = f"SELECT {USER_COLUMNS} FROM {USERS_TABLE}"
        rows = await self._fetch("find_all", query)
        return [dict(row) for row in rows]

    async def find_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Single user by primary key, or None when it does not exist"""
        if not _storable_id(user_id):
            return None
        query = f"SELECT {USER_COLUMNS} FROM {USERS_TABLE} WHERE id = $1"
        row = await self._fetchrow("find_by_id", query, user_id)
        return dict(row) if row else None

    async def update(
        self,
        user_id: int,
        name: Optional[str],
        department: Optional[str],
        dob: Optional[str]
    ) -> ServiceResult:
        """
        Overwrite all mutable fields of an existing user

        Runs as one statement so concurrent writers cannot interleave
        between the lookup and the write.

        Returns:
            ServiceResult with the updated row, or a RESOURCE_NOT_FOUND result
        """
        query = (
            f"UPDATE {USERS_TABLE} SET name = $1, department = $2, dob = $3 "
            f"WHERE id = $4 RETURNING {USER_COLUMNS}"
        )
        if not _storable_id(user_id):
            return self._not_found(user_id)

        row = await self._fetchrow("update", query, name, department, dob, user_id)
        if not row:
            logger.info(f"Update skipped, user {user_id} does not exist")
            return self._not_found(user_id)

        logger.info(f"Updated user {user_id}")
        return ServiceResult(success=True, data=[dict(row)], count=1)

    async def delete(self, user_id: int) -> ServiceResult:
        """
        Permanently remove a user

        Returns:
            ServiceResult with the deleted row, or a RESOURCE_NOT_FOUND result
        """
        query = f"DELETE FROM {USERS_TABLE} WHERE id = $1 RETURNING {USER_COLUMNS}"
        if not _storable_id(user_id):
            return self._not_found(user_id)

        row = await self._fetchrow("delete", query, user_id)
        if not row:
            logger.info(f"Delete skipped, user {user_id} does not exist")
            return self._not_found(user_id)

        logger.info(f"Deleted user {user_id}")
        return ServiceResult(success=True, data=[dict(row)], count=1)

    def _not_found(self, user_id: int) -> ServiceResult:
        return ServiceResult(
            success=False,
            error=f"Record not found with ID: {user_id}",
            error_type="RESOURCE_NOT_FOUND"
        )

    # Direct SQL execution

    async def _fetchrow(self, operation: str, query: str, *params):
        logger.debug(f"Executing {operation}: {query} {list(params)}")
        try:
            async with self.db_pool.acquire() as conn:
                return await conn.fetchrow(query, *params)
        except STORAGE_EXCEPTIONS as e:
            logger.error(f"Database error during {operation}: {e}")
            raise StorageError(f"Database {operation} failed: {e}", operation=operation) from e

    async def _fetch(self, operation: str, query: str, *params):
        logger.debug(f"Executing {operation}: {query} {list(params)}")
        try:
            async with self.db_pool.acquire() as conn:
                return await conn.fetch(query, *params)
        except STORAGE_EXCEPTIONS as e:
            logger.error(f"Database error during {operation}: {e}")
            raise StorageError(f"Database {operation} failed: {e}", operation=operation) from e


def get_users_service(request: Request) -> UsersService:
    """FastAPI dependency returning the service built during application startup"""
    service = getattr(request.app.state, "users_service", None)
    if service is None:
        raise StorageError("Users service not initialized", operation="startup")
    return service
