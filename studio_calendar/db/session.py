from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from fastapi import HTTPException
from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from studio_calendar.config.settings import settings

# Lazy initialization to avoid import-time database connections
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _get_engine() -> Engine:
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        logger.info(f"[DB] Initializing database engine: {settings.database_url}")

        connect_args = {}
        if "sqlite" in settings.database_url.lower():
            connect_args = {"check_same_thread": False}
            logger.warning("[DB] Using SQLite database (local development only)")
        else:
            connect_args = {"connect_timeout": 10, "application_name": "studio-calendar"}

        _engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=False,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        logger.info("[DB] Database engine initialized")
    return _engine


def _get_session_local() -> sessionmaker[Session]:
    """Get or create the session factory (lazy initialization)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_get_engine())
        logger.info("[DB] Database session factory initialized")
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Get database session for FastAPI dependencies.

    This is a plain generator function (NOT a context manager) that FastAPI
    can use directly with Depends(). FastAPI will handle cleanup automatically.

    For non-FastAPI code that needs a context manager, use get_session() instead.

    Yields:
        Session: SQLAlchemy database session
    """
    logger.debug("[DB] Creating new database session (FastAPI dependency)")
    session = _get_session_local()()
    try:
        yield session
    finally:
        session.close()
        logger.debug("[DB] Database session closed")


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get database session context manager.

    HTTPException is re-raised after rollback without logging (expected API
    responses); any other exception is logged as a database error, rolled
    back and re-raised.
    """
    logger.debug("[DB] Creating new database session")
    session = _get_session_local()()
    try:
        yield session
        if session.dirty or session.new or session.deleted:
            session.commit()
            logger.debug("[DB] Database session committed")
    except HTTPException:
        session.rollback()
        raise
    except Exception as e:
        logger.error(f"[DB] Database session error, rolling back: {e}")
        session.rollback()
        raise
    finally:
        session.close()
        logger.debug("[DB] Database session closed")


def init_db() -> None:
    """Create missing tables (local development and tests)."""
    from studio_calendar.db.models import Base

    logger.info("[DB] Ensuring database tables exist")
    Base.metadata.create_all(bind=_get_engine())
    logger.info("[DB] Database tables verified")
