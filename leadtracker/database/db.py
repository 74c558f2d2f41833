"""Database connection and session management."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections may be shared across threads of one process."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    """Create the schema if needed and return a bound session factory."""
    Base.metadata.create_all(bind=engine)
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context-manager wrapper for safe DB session lifecycle."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def verify_database_connection(engine: Engine) -> bool:
    """Verify DB connectivity during startup."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:  # pragma: no cover - exercised in deployment.
        logger.exception("database.connection_failed", extra={"event": "database.connection_failed"})
        logger.error("database.connection_failed.details: %s", exc)
        return False
