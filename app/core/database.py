"""
Database configuration and session management.
Supports SQLite (default) and PostgreSQL.
"""
import logging

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import settings
from app.core.logging_config import LogCategory, _sanitize_data

logger = logging.getLogger(LogCategory.DB)

database_url = settings.database_url
database_type = settings.database_type

logger.info(f"Using {database_type} database: {_sanitize_data(database_url)}")

if database_type == "sqlite":
    url = make_url(database_url)
    is_sqlite_memory = url.database in (None, "", ":memory:")

    engine_kwargs = {
        "echo": False,
        "connect_args": {"check_same_thread": False},
    }
    if is_sqlite_memory:
        # One shared connection, otherwise every session sees an empty database
        engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **engine_kwargs)
    logger.info(f"Configured SQLite engine ({'in-memory' if is_sqlite_memory else 'file-based'})")

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        """Set SQLite-specific pragma settings."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not is_sqlite_memory:
            cursor.execute("PRAGMA journal_mode=WAL")  # Better concurrency
            cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

else:
    engine = create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=20,
        max_overflow=10,
        pool_recycle=3600,  # Recycle connections every hour
    )
    logger.info("Configured PostgreSQL engine with connection pooling")


def create_db_and_tables():
    """Create all tables registered on SQLModel metadata."""
    import app.models  # noqa: F401  (needed for metadata discovery)

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created")


def get_session():
    """Get database session."""
    with Session(engine) as session:
        yield session
