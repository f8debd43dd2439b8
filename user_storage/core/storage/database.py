"""Engine and session management for the relational stores.

Each host request gets its own session through :meth:`Database.session_scope`;
the transaction commits when the block exits cleanly and rolls back on any
exception, which is then re-raised unchanged.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import MetaData, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _engine_for(url: str, echo: bool = False) -> Engine:
    """Create an engine, pinning in-memory SQLite to a single connection."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    if ":memory:" in url or url.rstrip("/") == "sqlite:":
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(url, echo=echo, pool_pre_ping=True)
    event.listen(engine, "connect", _sqlite_case_sensitive_like)
    return engine


def _sqlite_case_sensitive_like(dbapi_connection, connection_record) -> None:
    # SQLite LIKE ignores ASCII case by default; email search must not
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA case_sensitive_like=ON")
    cursor.close()


class Database:
    """Session factory bound to one database URL.

    Usage:
        db = Database("sqlite:///user-store.db")
        db.create_schema(UserStoreBase.metadata)
        with db.session_scope() as session:
            session.get(UserEntity, "abc")
    """

    def __init__(self, url: str, *, echo: bool = False, engine: Engine | None = None):
        """Initialize the database.

        Args:
            url: SQLAlchemy database URL
            echo: Log emitted SQL
            engine: Reuse an existing engine instead of creating one
        """
        self.url = url
        self.engine = engine or _engine_for(url, echo=echo)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_schema(self, *metadatas: MetaData) -> None:
        """Create all tables of the given metadata collections if missing."""
        for metadata in metadatas:
            metadata.create_all(self.engine)
        logger.info("Schema ensured on %s", self.engine.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """Return True when a trivial query succeeds."""
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        self.engine.dispose()
