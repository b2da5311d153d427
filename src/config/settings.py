"""
Configuration settings for the Users CRUD Backend
"""

import os
import logging

# Configure logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Environment configuration
DATABASE_URL = os.getenv("DATABASE_URL")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))

# Connection pool
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))

# Abort startup when the users table cannot be synchronized
SCHEMA_SYNC_STRICT = _env_flag("SCHEMA_SYNC_STRICT")

# Report "user doesn't exist" with 200 instead of 404
LEGACY_NOT_FOUND_STATUS = _env_flag("LEGACY_NOT_FOUND_STATUS")

# Validate required environment variables
if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required")

if DB_POOL_MIN_SIZE > DB_POOL_MAX_SIZE:
    raise ValueError(
        f"DB_POOL_MIN_SIZE ({DB_POOL_MIN_SIZE}) cannot exceed DB_POOL_MAX_SIZE ({DB_POOL_MAX_SIZE})"
    )

logger.info(f"Schema sync strict: {SCHEMA_SYNC_STRICT}, legacy not-found status: {LEGACY_NOT_FOUND_STATUS}")

# CORS settings
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]
