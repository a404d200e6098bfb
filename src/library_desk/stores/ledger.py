"""
Lending ledger for Library Desk.

The ledger records every time a copy of a book is issued to a member and
when it comes back:

1. **Issue**: resolves the book and member, takes one copy through the
   catalog and appends an active record
2. **Return**: stamps the return date once and hands the copy back
3. **Loan queries**: answers "does this book/member have an active loan?"
   for the catalog and roster deletion guards

Records refer to books and members by id only, so every operation reads
the current catalog and roster state.
"""

import itertools
import logging
from collections.abc import Callable
from datetime import datetime

from ..errors import AlreadyReturnedError, NoCopiesAvailableError
from ..models.issue import IssueRecord
from .base import BaseStore, StoreView
from .catalog import Catalog
from .roster import Roster

logger = logging.getLogger(__name__)

DEFAULT_ID_PREFIX = "I-"


class LendingLedger(BaseStore[IssueRecord]):
    """
    Store of issue records.

    Records are appended by :meth:`issue`, closed by :meth:`return_book`
    and never deleted.
    """

    def __init__(
        self,
        catalog: Catalog,
        roster: Roster,
        *,
        clock: Callable[[], datetime] = datetime.now,
        id_prefix: str = DEFAULT_ID_PREFIX,
    ):
        super().__init__()
        self._catalog = catalog
        self._roster = roster
        self._clock = clock
        self._id_prefix = id_prefix
        self._counter = itertools.count(1)

    @property
    def model_class(self) -> type[IssueRecord]:
        return IssueRecord

    @property
    def entity_name(self) -> str:
        return "Issue record"

    def issue(self, book_id: str, member_id: str) -> IssueRecord:
        """
        Issue one copy of a book to a member.

        Args:
            book_id: Catalog id of the book
            member_id: Roster id of the member

        Returns:
            The new, active issue record

        Raises:
            NotFoundError: If the book or member does not exist
            NoCopiesAvailableError: If every copy is already issued
        """
        book = self._catalog.get(book_id)
        member = self._roster.get(member_id)

        if not self._catalog.try_issue_one_copy(book.id):
            raise NoCopiesAvailableError(f"No available copies of '{book.title}'")

        # The copy is already taken; give it back if the record cannot be stored
        try:
            record = IssueRecord(
                id=self._next_issue_id(),
                book_id=book.id,
                member_id=member.id,
                issue_date=self._clock(),
            )
            self._insert(record)
        except Exception:
            self._catalog.return_one_copy(book.id)
            raise

        logger.info("Issued %s to %s as %s", book.id, member.id, record.id)
        return record

    def return_book(self, issue_id: str) -> IssueRecord:
        """
        Close an issue record and put the copy back on the shelf.

        Raises:
            NotFoundError: If the record does not exist
            AlreadyReturnedError: If the record was already returned
        """
        record = self.get(issue_id)
        if not record.is_active:
            raise AlreadyReturnedError(
                f"Issue record {record.id} was already returned on {record.return_date:%Y-%m-%d}"
            )

        record.mark_returned(self._clock())

        if record.book_id in self._catalog:
            self._catalog.return_one_copy(record.book_id)
        else:
            logger.warning(
                "Issue record %s returned but book %s is no longer in the catalog",
                record.id,
                record.book_id,
            )

        logger.info("Returned %s (book %s)", record.id, record.book_id)
        return record

    def active_records(self) -> StoreView[IssueRecord]:
        """Records whose book has not come back yet, in issue order."""
        return StoreView(self._items.values, lambda record: record.is_active)

    def all_records(self) -> StoreView[IssueRecord]:
        """Every record ever created, in issue order."""
        return self.get_all()

    def records_for_member(self, member_id: str) -> StoreView[IssueRecord]:
        key = self.normalize_id(member_id)
        return StoreView(
            self._items.values, lambda record: self.normalize_id(record.member_id) == key
        )

    def records_for_book(self, book_id: str) -> StoreView[IssueRecord]:
        key = self.normalize_id(book_id)
        return StoreView(
            self._items.values, lambda record: self.normalize_id(record.book_id) == key
        )

    def has_active_loan_for_book(self, book_id: str) -> bool:
        return any(record.is_active for record in self.records_for_book(book_id))

    def has_active_loan_for_member(self, member_id: str) -> bool:
        return any(record.is_active for record in self.records_for_member(member_id))

    def restore(self, entities) -> None:
        super().restore(entities)
        self._counter = itertools.count(len(self._items) + 1)

    def clear(self) -> None:
        super().clear()
        self._counter = itertools.count(1)

    def _next_issue_id(self) -> str:
        # Counter values already taken by restored records are skipped
        while True:
            candidate = f"{self._id_prefix}{next(self._counter)}"
            if self.normalize_id(candidate) not in self._items:
                return candidate
