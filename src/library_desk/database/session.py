"""
Database session management for Library Desk.

This module provides connection management and session handling for
SQLAlchemy. The save file is only touched on explicit save and once at
startup, so sessions are short-lived and always used through
:meth:`DatabaseManager.session_scope`.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .schema import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manages the engine and sessions for one SQLite save file.

    The engine is created lazily, so constructing a manager never touches
    the file system.
    """

    def __init__(self, database_url: str):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy SQLite URL, e.g. ``sqlite:///data/library.db``
        """
        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = create_engine(
                self.database_url,
                # Use StaticPool to maintain a single connection
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=False,
            )
            logger.debug("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Create a new database session."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        ```python
        with db_manager.session_scope() as session:
            session.add_all(rows)
        # Session is automatically committed or rolled back
        ```

        Raises:
            Any database errors are logged and re-raised
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except Exception:
            logger.debug("Database error, rolling back", exc_info=True)
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self) -> None:
        """Create any missing tables."""
        Base.metadata.create_all(bind=self.engine)

    def table_names(self) -> set[str]:
        """Names of the tables present in the database."""
        return set(inspect(self.engine).get_table_names())

    def close(self) -> None:
        """Dispose of the engine and release the save file."""
        if self._engine:
            self._engine.dispose()
            logger.debug("Database engine disposed")
        self._engine = None
        self._session_factory = None
