"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db().
"""

from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from finance_tracker.config import get_settings

settings = get_settings()


def _engine_options() -> dict:
    """
    Build engine keyword arguments for the configured database.

    Pool sizing and the lock timeout only make sense for
    PostgreSQL. The lock timeout is passed as a connection
    option so every session inherits it: a ledger operation
    that waits too long for an account row lock errors out
    and rolls back instead of blocking a worker forever.
    """
    options = {"pool_pre_ping": True}
    if settings.DATABASE_URL.startswith("postgresql"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            connect_args={
                "options": f"-c lock_timeout={settings.DB_LOCK_TIMEOUT_MS}"
            },
        )
    return options


# --- Engine ---
# The engine manages a pool of database connections.
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
engine = create_engine(settings.DATABASE_URL, **_engine_options())

# --- Session Factory ---
# autocommit=False means the ledger service decides when
# changes are saved, so a create/update/delete either lands
# completely or not at all.
# autoflush=False means SQLAlchemy won't send SQL to the
# database until we explicitly flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


def utcnow() -> datetime:
    """Timezone-aware current time, used for audit timestamps."""
    return datetime.now(timezone.utc)


# --- Base Model Class ---
class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, preventing connection leaks. A leaked connection
    stays occupied in the pool, and if enough leak, the
    application runs out of connections and stops working.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
