"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from agora.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import agora.models  # noqa: E402,F401


def engine_options(url: str) -> dict[str, Any]:
    """Return engine keyword arguments for ``url``.

    SQLite gets a bounded lock wait and is shared across request threads.
    """
    if url.startswith("sqlite"):
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.db_timeout_seconds,
            }
        }
    return {"pool_timeout": settings.db_timeout_seconds}


def configure_sqlite(engine: Engine) -> Engine:
    """Make SQLite enforce foreign keys and honour SAVEPOINTs.

    The driver's own transaction handling is switched off so SQLAlchemy emits
    BEGIN itself; FK enforcement keeps ON DELETE CASCADE working.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
    **engine_options(settings.effective_database_url),
)
if engine.dialect.name == "sqlite":
    configure_sqlite(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a block of writes as one transaction.

    Commits when the block finishes and rolls back if any step raises, so a
    multi-step write never leaves partial rows behind.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)
