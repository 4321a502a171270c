"""
Database connection and session management.
Provides the engine, session factory and the unit-of-work scope.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from indego_weather.config import Settings
from indego_weather.models import Base

logger = logging.getLogger(__name__)


def build_engine(
    database_url: str,
    pool_size: int = 25,
    max_overflow: int = 0,
    pool_timeout_seconds: int = 30,
) -> Engine:
    """Create an engine with connection pooling.

    SQLite URLs (used by tests and local runs) share one connection across threads.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout_seconds,
        pool_recycle=300,
        pool_pre_ping=True,  # Verify connections before using
        echo=False,
    )


def engine_from_settings(settings: Settings) -> Engine:
    return build_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout_seconds=settings.db_pool_timeout_seconds,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine):
    """Initialize database schema. Safe to call multiple times."""
    logger.info("Initializing database schema...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema initialized successfully")


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Unit of work: commits on success, rolls back everything on any error.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()
