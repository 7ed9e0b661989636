"""Local persistence of the session token.

A single-table key-value store in SQLite, so the signed-in session
survives restarts of the application.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Generator

from sqlalchemy import DateTime, String, Text, create_engine, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.orm import Session as DBSession

from todoapp.logging_config import get_logger
from todoapp.settings import settings

logger = get_logger(__name__)

SESSION_TOKEN_KEY = "userToken"


class Base(DeclarativeBase):
    """Base class for local models."""
    pass


class StoredValue(Base):
    """One persisted key/value pair."""

    __tablename__ = "stored_values"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<StoredValue(key={self.key})>"


class SessionStore:
    """Key-value store for the session token."""

    def __init__(self, database_url: str | None = None):
        """Initialize the store and create its table.

        Args:
            database_url: Database URL (defaults to settings)
        """
        self.database_url = database_url or settings.resolved_session_database_url
        self.engine = create_engine(self.database_url, pool_pre_ping=True)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[DBSession, None, None]:
        """Provide a transactional scope for store operations."""
        db_session = self.SessionLocal()
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise
        finally:
            db_session.close()

    def get(self, key: str) -> str | None:
        with self.session() as db_session:
            row = db_session.get(StoredValue, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self.session() as db_session:
            row = db_session.get(StoredValue, key)
            if row:
                row.value = value
            else:
                db_session.add(StoredValue(key=key, value=value))
        logger.debug("stored_value_set", key=key)

    def clear(self, key: str) -> None:
        with self.session() as db_session:
            row = db_session.get(StoredValue, key)
            if row:
                db_session.delete(row)
        logger.debug("stored_value_cleared", key=key)

    # ==================== SESSION TOKEN ====================

    def get_token(self) -> str | None:
        """Return the persisted session token, if any."""
        return self.get(SESSION_TOKEN_KEY)

    def set_token(self, token: str) -> None:
        self.set(SESSION_TOKEN_KEY, token)

    def clear_token(self) -> None:
        self.clear(SESSION_TOKEN_KEY)

    def close(self) -> None:
        self.engine.dispose()
