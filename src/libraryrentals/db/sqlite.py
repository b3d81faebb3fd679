"""SQLite database operations.

Handles database connection and session management. Every manager opens
exactly one session per operation, so a session is the transaction
boundary for the checks and writes it performs.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".libraryrentals" / "library.db"


def _on_connect(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # Leave BEGIN to _on_begin instead of the driver's deferred BEGIN
    dbapi_connection.isolation_level = None


def _on_begin(conn) -> None:
    # Every session holds the write lock from its first statement
    conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """Database connection and session manager."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses
                     LIBRARY_DB_PATH env var or default location.
        """
        if db_path is None:
            db_path = os.environ.get("LIBRARY_DB_PATH", str(DEFAULT_DB_PATH))

        self._is_memory = str(db_path) == ":memory:"
        self.db_path = Path(db_path) if self._is_memory else Path(db_path).expanduser()

        if not self._is_memory:
            self._ensure_directory()

        # All sessions must share the same in-memory database
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        event.listen(self.engine, "connect", _on_connect)
        event.listen(self.engine, "begin", _on_begin)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        logger.debug("Opened database at %s", "<memory>" if self._is_memory else self.db_path)

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        # Register every model with Base before emitting DDL
        from ..books.models import Book  # noqa: F401
        from ..customers.models import Customer, Fine  # noqa: F401
        from ..rentals.models import Rental  # noqa: F401

        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all database tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager.

        Commits when the block exits cleanly. Any exception rolls back
        every write made in the block and is re-raised unchanged.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    _db = None
