"""Database engine and transaction scope shared by all stores."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from routerchat.src.services.store.entities import Base

logger = logging.getLogger(__name__)

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite ignores ON DELETE clauses unless foreign keys are switched on."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the SQLAlchemy engine (and its connection pool) for the process.

    Attributes:
        url: SQLAlchemy database URL
        engine: Engine bound to the URL
    """

    def __init__(self, url: str) -> None:
        """Create the engine for the given URL.

        Args:
            url: SQLAlchemy database URL, e.g. "sqlite:///chat.db" or a Postgres DSN
        """
        self.url = url
        engine_kwargs: Dict[str, Any] = {}
        if url.startswith("sqlite"):
            # Flask may serve requests from several threads
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in IN_MEMORY_SQLITE_URLS:
                # One shared connection, otherwise every checkout sees an empty database
                engine_kwargs["poolclass"] = StaticPool

        self.engine: Engine = create_engine(url, **engine_kwargs)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.info(f"Database engine created for dialect '{self.engine.dialect.name}'")

    def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables ensured")

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations.

        Commits on success and rolls back on any exception, which is re-raised.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
