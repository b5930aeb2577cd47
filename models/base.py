"""
Database configuration and base model.

Uses SQLAlchemy 2.0 declarative style with SQLite.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config import PATHS


def get_database_url() -> str:
    """URL of the default SQLite database file."""
    PATHS.data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{PATHS.database}"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def make_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for ``database_url`` (the default database if omitted)."""
    return create_engine(
        database_url or get_database_url(),
        echo=False,
        connect_args={"check_same_thread": False},  # Allow multi-threaded access
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@contextmanager
def get_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for database sessions."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Initialize the database, creating all tables."""
    # Registers every table on Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
