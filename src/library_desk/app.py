"""
Application context for Library Desk.

``LibraryContext`` owns the three stores and the persistence gateway and is
what a front end talks to. It wires the lending ledger into the catalog and
roster as their loan index, so the dependency runs one way: stores never
reach back into the front end, and the ledger is the only store that knows
about the other two.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel

from .config import LibraryConfig, get_config
from .database.gateway import LibrarySnapshot, PersistenceGateway
from .errors import LibraryError
from .stores.catalog import Catalog
from .stores.ledger import LendingLedger
from .stores.roster import Roster

logger = logging.getLogger(__name__)

MISSING = "N/A"


class LibraryStats(BaseModel):
    """Headline numbers for the home screen."""

    total_books: int
    total_members: int
    books_issued: int


class LoanView(BaseModel):
    """An active issue record joined with the current book and member names."""

    issue_id: str
    book_id: str
    book_title: str
    member_id: str
    member_name: str
    issue_date: datetime


class LibraryContext:
    """
    Owns the in-memory library state for one session.

    Construct one per process (or per test); nothing here is global.
    """

    def __init__(
        self,
        gateway: PersistenceGateway | None = None,
        *,
        config: LibraryConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        config = config or get_config()
        self.gateway = gateway or PersistenceGateway.from_config(config)
        self.catalog = Catalog()
        self.roster = Roster()
        self.ledger = LendingLedger(
            self.catalog, self.roster, clock=clock, id_prefix=config.issue_id_prefix
        )
        self.catalog.bind_loans(self.ledger)
        self.roster.bind_loans(self.ledger)

    def load(self) -> LibrarySnapshot:
        """
        Replace the in-memory state with what was saved.

        Returns:
            The loaded snapshot; check ``corruption`` for a warning to show

        Raises:
            PersistenceError: If the save file exists but cannot be opened
        """
        snapshot = self.gateway.load()
        try:
            self.catalog.restore(snapshot.books)
            self.roster.restore(snapshot.members)
            self.ledger.restore(snapshot.issues)
        except LibraryError as e:
            self.catalog.clear()
            self.roster.clear()
            self.ledger.clear()
            return self.gateway.discard(f"Error loading data: {e.message}")
        return snapshot

    def save(self) -> None:
        """
        Persist the current state.

        Raises:
            PersistenceError: If the save file could not be written
        """
        self.gateway.save(self.catalog.snapshot(), self.roster.snapshot(), self.ledger.snapshot())

    def snapshot(self) -> LibrarySnapshot:
        return LibrarySnapshot(
            books=self.catalog.snapshot(),
            members=self.roster.snapshot(),
            issues=self.ledger.snapshot(),
        )

    def stats(self) -> LibraryStats:
        return LibraryStats(
            total_books=len(self.catalog),
            total_members=len(self.roster),
            books_issued=len(self.ledger.active_records()),
        )

    def active_loans(self) -> list[LoanView]:
        """Active issue records with display names resolved from the stores."""
        views = []
        for record in self.ledger.active_records():
            book = self.catalog.find(record.book_id)
            member = self.roster.find(record.member_id)
            views.append(
                LoanView(
                    issue_id=record.id,
                    book_id=record.book_id,
                    book_title=book.title if book else MISSING,
                    member_id=record.member_id,
                    member_name=member.name if member else MISSING,
                    issue_date=record.issue_date,
                )
            )
        return views

    def close(self) -> None:
        self.gateway.close()
