"""
Settings for the finance tracker.

Values come from the process environment, with a local .env
file filling in whatever the environment leaves unset.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Existing environment variables win over .env
load_dotenv()


# Names psycopg2, the only PostgreSQL driver the project depends on
DEFAULT_DATABASE_URL = "postgresql+psycopg2://localhost:5432/finance_tracker"


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Finance Tracker"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))

    # How long a statement may wait for a row lock before the
    # database gives up. A ledger operation that cannot get its
    # account locks fails and is rolled back instead of hanging.
    DB_LOCK_TIMEOUT_MS: int = int(os.getenv("DB_LOCK_TIMEOUT_MS", "5000"))

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


@lru_cache()
def get_settings() -> Settings:
    """The process-wide Settings, built on first use."""
    return Settings()
