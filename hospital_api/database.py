"""
Database connection and session management.
Provides SQLAlchemy engine, session, transaction helper, and base class for models.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from .config import Settings, get_settings

# Set up logging
logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE codes for constraint violations
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """
    Turn on foreign key enforcement for every SQLite connection of an engine.

    Args:
        engine: Engine bound to a SQLite database
    """
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine described by the settings.

    Args:
        settings: Application settings

    Returns:
        Engine: Configured engine with a pooled connection set
    """
    if settings.database_url.startswith("sqlite"):
        engine = create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_timeout=settings.db_pool_timeout,
    )


# Create SQLAlchemy engine for database connection
engine = create_db_engine(get_settings())

# Create session factory for database sessions
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

# Create base class for declarative models
Base = declarative_base()

def get_db():
    """
    Database dependency - Creates and yields a database session.

    The session is automatically closed after the request is processed,
    even if an exception occurs during request handling.

    Yields:
        SQLAlchemy Session: Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a block of writes as one atomic unit.

    Commits when the block finishes and rolls everything back if it raises,
    so callers never observe a partially applied write.

    Args:
        db: Database session

    Yields:
        Session: The same session, for convenience
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Transaction rolled back")
        raise


def classify_integrity_error(exc: IntegrityError) -> str:
    """
    Work out which constraint an IntegrityError violated.

    Args:
        exc: The error raised by the driver through SQLAlchemy

    Returns:
        str: "foreign_key", "unique" or "other"
    """
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == FOREIGN_KEY_VIOLATION:
        return "foreign_key"
    if code == UNIQUE_VIOLATION:
        return "unique"

    message = str(orig if orig is not None else exc).upper()
    if "FOREIGN KEY" in message:
        return "foreign_key"
    if "UNIQUE" in message or "DUPLICATE" in message:
        return "unique"
    return "other"
