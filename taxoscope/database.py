"""Database configuration and session management."""

import os
from contextlib import contextmanager
from typing import Iterator, Optional

import pg8000
import sqlalchemy
from dotenv import load_dotenv
from sqlalchemy import Engine
from sqlalchemy.orm import Session

load_dotenv()

# Global variable for lazy initialization
_engine: Optional[Engine] = None


def _get_local_connection():
    """Create a direct pg8000 connection from the DB_* environment variables."""
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = int(os.getenv("DB_PORT", "5432"))
    db_name = os.getenv("DB_NAME", "drupal")
    db_user = os.getenv("DB_USER", "postgres")
    db_password = os.getenv("DB_PASSWORD", "postgres")

    return pg8000.connect(
        host=db_host,
        port=db_port,
        database=db_name,
        user=db_user,
        password=db_password,
    )


def create_engine(pool_size: int = 5, max_overflow: int = 10) -> Engine:
    """Create a new database engine.

    DATABASE_URL takes precedence when set (any SQLAlchemy URL, e.g. SQLite for
    local analysis of an exported site database). Otherwise a pooled pg8000
    PostgreSQL engine is built from the DB_* variables.

    Args:
        pool_size: Number of connections to maintain in the pool
        max_overflow: Maximum overflow connections allowed

    Returns:
        A new SQLAlchemy Engine instance
    """
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return sqlalchemy.create_engine(database_url)

    return sqlalchemy.create_engine(
        "postgresql+pg8000://",
        creator=_get_local_connection,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
    )


def get_engine() -> Engine:
    """Get or create the database engine with lazy initialization."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Provide a read-only session that is always closed afterwards.

    Nothing is committed: every analysis query is a plain SELECT.
    """
    session = Session(get_engine())
    try:
        yield session
    finally:
        session.close()
