"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 for the Book Library service.

We use SYNCHRONOUS SQLAlchemy: route handlers are plain `def` functions
that FastAPI runs in its threadpool, one session per request.

Session Management Pattern
==========================
1. Request arrives -> create a new session
2. Use session for all database operations in that request
3. Commit on success, rollback on failure (done by the services)
4. Close session when request ends
"""

import logging
from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from booklib.config import Settings, get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


# =============================================================================
# Database Engine
# =============================================================================
# Key parameters:
# - pool_size: Number of connections to keep open permanently
# - max_overflow: How many extra connections can be created during high load
# - pool_timeout: How long a request blocks waiting for a pooled connection
# - pool_pre_ping: Test connection health before using (prevents stale connections)

def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database.

    SQLite (used for local development) does not accept the queue pool
    arguments, so they are only passed for server databases.
    """
    if settings.is_sqlite:
        return create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    return create_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
        echo=settings.debug,
    )


engine = build_engine(settings)


# =============================================================================
# Session Factory
# =============================================================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Alembic uses Base.metadata to discover tables for migrations.
    """
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Code before yield creates the session, code after yield closes it,
    even if the route raised.

    Yields:
        SQLAlchemy Session instance
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """
    Create all database tables.

    Used when DB_AUTO_CREATE is set and by the seed script.
    In production, use Alembic migrations instead.
    """
    # Models must be imported so they register with Base.metadata
    import booklib.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def check_database(db: Session) -> bool:
    """Return True if the database answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        return False


def dispose_engine() -> None:
    """Close all pooled connections on shutdown."""
    engine.dispose()
    logger.info("Database connection pool disposed")
