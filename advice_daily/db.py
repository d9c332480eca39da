"""Database abstraction layer for the local key-value entries."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_PATH = Path.home() / ".local" / "share" / "advice_daily" / "advice.db"


class Base(DeclarativeBase):
    pass


class KeyValueModel(Base):
    """A single persisted string entry."""

    __tablename__ = "kv_entries"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


def default_connection_string() -> str:
    return f"sqlite:///{DEFAULT_DATABASE_PATH}"


def is_memory_sqlite(connection_string: str) -> bool:
    """True for any in-memory SQLite URL (``sqlite://``, ``sqlite:///:memory:``)."""
    url = make_url(connection_string)
    return url.get_backend_name() == "sqlite" and url.database in (
        None,
        "",
        ":memory:",
    )


def init_engine(connection_string: Optional[str]) -> Optional[Engine]:
    """Initialize the database engine."""
    if not connection_string:
        return None

    url = make_url(connection_string)
    in_memory = is_memory_sqlite(connection_string)
    if url.get_backend_name() == "sqlite" and not in_memory:
        db_path = Path(url.database)
        if db_path.parent and not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info("Initializing database connection: %s", connection_string)
    if in_memory:
        # Fetches settle on a worker thread; share the single connection.
        engine = create_engine(
            connection_string,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(connection_string)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory for the given engine."""
    return sessionmaker(bind=engine)


def get_value(session: Session, key: str) -> Optional[str]:
    """Return the stored value for ``key`` or None."""
    stmt = select(KeyValueModel).where(KeyValueModel.key == key)
    result = session.execute(stmt).scalar_one_or_none()
    if result is None:
        return None
    return result.value


def set_value(session: Session, key: str, value: str) -> None:
    """Insert or update a key-value entry."""
    stmt = select(KeyValueModel).where(KeyValueModel.key == key)
    existing = session.execute(stmt).scalar_one_or_none()

    if existing:
        existing.value = value
        existing.updated_at = datetime.now(timezone.utc)
    else:
        session.add(
            KeyValueModel(
                key=key, value=value, updated_at=datetime.now(timezone.utc)
            )
        )

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise


def delete_value(session: Session, key: str) -> None:
    """Remove ``key`` if present."""
    stmt = select(KeyValueModel).where(KeyValueModel.key == key)
    existing = session.execute(stmt).scalar_one_or_none()
    if existing is None:
        return

    session.delete(existing)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
