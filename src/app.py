"""
Users CRUD Backend API Server
Core functionality: create, list, update and delete users stored in PostgreSQL
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from config.settings import ALLOWED_ORIGINS
from database.connection import init_database, close_database
from database.schema import sync_schema
from services.users_service import UsersService
from api.routes import health, users
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    db_pool = await init_database(strict=settings.SCHEMA_SYNC_STRICT)
    try:
        await sync_schema(db_pool, strict=settings.SCHEMA_SYNC_STRICT)
    except Exception:
        await close_database(db_pool)
        raise

    app.state.db_pool = db_pool
    app.state.users_service = UsersService(db_pool)
    try:
        yield
    finally:
        app.state.users_service = None
        app.state.db_pool = None
        await close_database(db_pool)


def create_app() -> FastAPI:
    """Build the FastAPI application with routes, middleware and error handlers"""
    app = FastAPI(
        title="express for crud operation on mysql",
        description="CRUD API for user records",
        version="2.0",
        docs_url="/api-docs",
        openapi_url="/api-docs/openapi.json",
        redoc_url=None,
        lifespan=lifespan
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials="*" not in ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    setup_error_handling(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(users.router, tags=["Users"])

    return app


# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
app = create_app()
