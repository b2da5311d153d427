"""
Health check API route
"""

from datetime import datetime
from fastapi import APIRouter, HTTPException, Request

from utils.exceptions import STORAGE_EXCEPTIONS

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check - verifies the database pool can serve a query

    Reports 503 when the pool is missing or the database is unreachable.
    """
    db_pool = getattr(request.app.state, "db_pool", None)
    if db_pool is None:
        raise HTTPException(status_code=503, detail="Health check failed: database pool not initialized")

    try:
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except STORAGE_EXCEPTIONS as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")

    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "connected"
    }
