"""
Persistence gateway for Library Desk.

Saves the three in-memory collections (books, members, issue records) to a
SQLite file and reads them back at startup.

- **Save** replaces each table in its own transaction. The three writes are
  independent: if the second one fails, the first has already been
  committed. Failures surface as :class:`PersistenceError` and are not
  retried.
- **Load** degrades instead of failing. A missing file means a first run
  and yields empty collections. A file whose contents cannot be decoded is
  moved aside to ``<name>.corrupt`` (or ``<name>.corrupt.N`` when earlier
  backups exist), a warning is logged and empty collections are returned
  with the problem described in ``LibrarySnapshot.corruption``. A file that
  cannot be opened at all right now (locked, no permission) is left alone
  and reported as :class:`PersistenceError`.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, model_validator
from sqlalchemy import delete, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ..config import LibraryConfig, get_config
from ..errors import CorruptDataError, PersistenceError
from ..models.book import Book
from ..models.issue import IssueRecord
from ..models.member import Member
from ..stores.base import BaseStore
from .schema import TABLE_NAMES
from .schema import Book as BookDB
from .schema import IssueRecord as IssueRecordDB
from .schema import Member as MemberDB
from .session import DatabaseManager

logger = logging.getLogger(__name__)

CORRUPT_SUFFIX = ".corrupt"


class LibrarySnapshot(BaseModel):
    """The three persisted collections, in insertion order."""

    books: list[Book] = Field(default_factory=list)
    members: list[Member] = Field(default_factory=list)
    issues: list[IssueRecord] = Field(default_factory=list)

    corruption: str | None = Field(
        None,
        description="Why saved data was discarded on load, if it was",
    )

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "LibrarySnapshot":
        """Ensure no two entities of a collection share an id (ignoring case)."""
        for name, items in (("book", self.books), ("member", self.members), ("issue", self.issues)):
            seen: set[str] = set()
            for item in items:
                key = BaseStore.normalize_id(item.id)
                if key in seen:
                    raise ValueError(f"Duplicate {name} id {item.id}")
                seen.add(key)
        return self

    @property
    def is_empty(self) -> bool:
        return not (self.books or self.members or self.issues)


class PersistenceGateway:
    """Reads and writes the library's saved state."""

    def __init__(self, database_path: Path | str):
        self.database_path = Path(database_path)
        self._db = DatabaseManager(f"sqlite:///{self.database_path}")

    @classmethod
    def from_config(cls, config: LibraryConfig | None = None) -> "PersistenceGateway":
        config = config or get_config()
        return cls(config.database_path)

    def save(
        self,
        books: Iterable[Book],
        members: Iterable[Member],
        issues: Iterable[IssueRecord],
    ) -> None:
        """
        Write all three collections, replacing what was saved before.

        Raises:
            PersistenceError: If any table could not be written
        """
        tables = (
            (BookDB, [BookDB(position=i, **book.model_dump()) for i, book in enumerate(books)]),
            (MemberDB, [MemberDB(position=i, **m.model_dump()) for i, m in enumerate(members)]),
            (
                IssueRecordDB,
                [IssueRecordDB(position=i, **r.model_dump()) for i, r in enumerate(issues)],
            ),
        )

        try:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            self._db.init_database()
            for table, rows in tables:
                with self._db.session_scope() as session:
                    session.execute(delete(table))
                    session.add_all(rows)
                logger.debug("Saved %d rows to %s", len(rows), table.__tablename__)
        except (SQLAlchemyError, OSError) as e:
            logger.exception("Failed to save library data to %s", self.database_path)
            raise PersistenceError(f"Error saving data: {e}") from e

        logger.info("Library data saved to %s", self.database_path)

    def load(self, strict: bool = False) -> LibrarySnapshot:
        """
        Read the saved collections.

        Args:
            strict: Raise instead of degrading to empty collections when
                the save file cannot be decoded

        Returns:
            The saved state, or an empty snapshot on first run or corruption

        Raises:
            PersistenceError: If the save file exists but cannot be opened
                right now (locked, no permission); it is left in place
            CorruptDataError: Only when ``strict`` is set
        """
        if not self.database_path.exists():
            logger.info("No save data found at %s. Starting with empty lists.", self.database_path)
            return LibrarySnapshot()

        try:
            snapshot = self._read()
        except CorruptDataError as e:
            if strict:
                raise
            return self.discard(e.message)

        logger.info(
            "Loaded %d books, %d members, %d issue records",
            len(snapshot.books),
            len(snapshot.members),
            len(snapshot.issues),
        )
        return snapshot

    def discard(self, reason: str) -> LibrarySnapshot:
        """
        Give up on the saved data: move the file aside and start empty.

        Returns:
            An empty snapshot whose ``corruption`` carries ``reason``
        """
        logger.warning("%s. Starting with empty lists.", reason)
        self.quarantine()
        return LibrarySnapshot(corruption=reason)

    def quarantine(self) -> Path | None:
        """
        Move the save file to an unused ``<name>.corrupt[.N]`` path.

        Earlier backups are never overwritten.

        Returns:
            The backup path, or None if the file could not be moved
        """
        self._db.close()
        target = self._backup_path()
        try:
            self.database_path.rename(target)
        except OSError:
            logger.warning("Could not move unreadable save file %s aside", self.database_path)
            return None
        logger.warning("Unreadable save file moved to %s", target)
        return target

    def close(self) -> None:
        self._db.close()

    def _backup_path(self) -> Path:
        base = self.database_path.with_name(self.database_path.name + CORRUPT_SUFFIX)
        target, n = base, 0
        while target.exists():
            n += 1
            target = base.with_name(f"{base.name}.{n}")
        return target

    def _read(self) -> LibrarySnapshot:
        try:
            present = self._db.table_names() & TABLE_NAMES
            if not present:
                # A valid but empty database: nothing was ever saved
                return LibrarySnapshot()
            if present != TABLE_NAMES:
                missing = ", ".join(sorted(TABLE_NAMES - present))
                raise CorruptDataError(f"Error loading data: missing tables {missing}")

            with self._db.session_scope() as session:
                books = [
                    Book.model_validate(row, from_attributes=True)
                    for row in session.scalars(select(BookDB).order_by(BookDB.position))
                ]
                members = [
                    Member.model_validate(row, from_attributes=True)
                    for row in session.scalars(select(MemberDB).order_by(MemberDB.position))
                ]
                issues = [
                    IssueRecord.model_validate(row, from_attributes=True)
                    for row in session.scalars(
                        select(IssueRecordDB).order_by(IssueRecordDB.position)
                    )
                ]
            return LibrarySnapshot(books=books, members=members, issues=issues)
        except OperationalError as e:
            # Locked or unreadable for now; the contents may well be fine
            self._db.close()
            logger.exception("Could not open save file %s", self.database_path)
            raise PersistenceError(f"Error loading data: {e}") from e
        except (SQLAlchemyError, ValidationError) as e:
            raise CorruptDataError(f"Error loading data: {e}") from e
