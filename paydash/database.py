"""Database configuration for the payment dashboard."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = Path("data/paydash.db")

DATABASE_URL = os.getenv("PAYDASH_DATABASE_URL", f"sqlite:///{DEFAULT_SQLITE_PATH}")


def _create_engine(url: str):
    """Create a SQLAlchemy engine for the given URL, handling sqlite connect args."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    if url == f"sqlite:///{DEFAULT_SQLITE_PATH}":
        DEFAULT_SQLITE_PATH.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args=connect_args, future=True)


# A configured server database that is unreachable during local development
# falls back to the SQLite file; any other environment fails at startup.
try:
    engine = _create_engine(DATABASE_URL)
    with engine.connect() as _conn:  # type: ignore[var-annotated]
        pass
except Exception as e:  # pragma: no cover - environment dependent
    env = os.getenv("ENVIRONMENT", "development").lower()
    logger.error("[database] Could not connect to database at %r: %s", DATABASE_URL, e)
    if env != "development":
        raise
    DATABASE_URL = f"sqlite:///{DEFAULT_SQLITE_PATH}"
    logger.warning("[database] Falling back to SQLite for local development at %s", DATABASE_URL)
    engine = _create_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a database session."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db() -> None:
    """Create tables, the default admin user and any missing scheduled payments."""

    from paydash import models  # noqa: F401  (import ensures model metadata is registered)
    from paydash import crud
    from paydash.config import ADMIN_PASSWORD, ADMIN_USERNAME, SCHEDULE

    Base.metadata.create_all(bind=engine, checkfirst=True)

    session = SessionLocal()
    try:
        if crud.ensure_admin_user(session, ADMIN_USERNAME, ADMIN_PASSWORD):
            logger.info("[init_db] Created default admin user (username: %s)", ADMIN_USERNAME)
        else:
            logger.info("[init_db] Admin user already exists, skipping creation")

        inserted = crud.seed_payments(session, SCHEDULE)
        if inserted:
            logger.info("[init_db] Seeded %d scheduled payments", inserted)
    except Exception:
        session.rollback()
        logger.exception("[init_db] Failed to seed database")
        raise
    finally:
        session.close()
