"""
Database Session Management Module
==================================

Responsible for:
- Creating the database engine (SQLite by default)
- Managing session lifecycle
- Providing dependency for FastAPI routes
- Bootstrapping the schema for local SQLite databases

SQLite notes:
    Writers are serialized by the engine. A write that finds the
    database locked waits up to DB_BUSY_TIMEOUT_MS before failing.
"""

from typing import Any, Generator

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import sessionmaker, Session

from incidentdesk.core.config import settings
from incidentdesk.core.logging import get_logger
from incidentdesk.db.base import Base

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Database Engine
# ==========================

def create_db_engine(
    database_url: str,
    busy_timeout_ms: int = settings.DB_BUSY_TIMEOUT_MS,
    **engine_kwargs: Any,
) -> Engine:
    """
    Build an engine for the given URL.

    Args:
        database_url: SQLAlchemy database URL
        busy_timeout_ms: Lock wait for SQLite writers
        **engine_kwargs: Extra keyword arguments passed to create_engine

    Returns:
        Configured SQLAlchemy Engine
    """
    if database_url.startswith("sqlite"):
        connect_args = engine_kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", busy_timeout_ms / 1000)

        engine = create_engine(
            database_url,
            connect_args=connect_args,
            echo=settings.DEBUG,
            **engine_kwargs,
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Apply the busy timeout to every new SQLite connection."""
            cursor = dbapi_connection.cursor()
            cursor.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
            cursor.close()

        return engine

    engine_kwargs.setdefault("pool_size", settings.DB_POOL_SIZE)
    engine_kwargs.setdefault("max_overflow", settings.DB_MAX_OVERFLOW)
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Validate connections before use
        echo=settings.DEBUG,
        **engine_kwargs,
    )


engine = create_db_engine(settings.DATABASE_URL)


# ==========================
# Session Factory
# ==========================

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


# ==========================
# Dependency for FastAPI
# ==========================

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    Ensures:
    - Session is opened per request
    - Session is properly closed after request completes
    - Transactions are rolled back on error

    Yields:
        SQLAlchemy Session object
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("db_session_error", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()


# ==========================
# Database Health Check
# ==========================

def check_database_connection(bind: Engine | None = None) -> bool:
    """
    Check if database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        with (bind or engine).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("db_health_check_failed", error=str(e))
        return False


# ==========================
# Schema Bootstrap
# ==========================

def init_db(bind: Engine | None = None) -> None:
    """
    Create missing tables and indexes.

    Intended for local SQLite databases and tests. Managed deployments
    should run ``alembic upgrade head`` instead.
    """
    import incidentdesk.models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=bind or engine)
    logger.info("db_schema_ready", tables=sorted(Base.metadata.tables))
