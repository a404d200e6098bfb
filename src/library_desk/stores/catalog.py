"""
Catalog store for Library Desk.

The catalog owns every book and is the only component that changes copy
counts. It enforces, for each book:

    0 <= issued <= quantity

Issuing and returning go through :meth:`Catalog.try_issue_one_copy` and
:meth:`Catalog.return_one_copy`, which the lending ledger calls; a book
cannot be removed while the ledger reports an active loan for it.
"""

import logging

from ..errors import HasActiveLoansError, InvalidArgumentError
from ..models.book import Book
from .base import BaseStore, LoanIndex, StoreView

logger = logging.getLogger(__name__)


class Catalog(BaseStore[Book]):
    """In-memory store of the library's books."""

    def __init__(self, loans: LoanIndex | None = None):
        super().__init__()
        self._loans = loans

    @property
    def model_class(self) -> type[Book]:
        return Book

    @property
    def entity_name(self) -> str:
        return "Book"

    def bind_loans(self, loans: LoanIndex) -> None:
        """Attach the ledger consulted before a book is removed."""
        self._loans = loans

    def add(self, id: str, title: str, author: str, publisher: str, quantity: int) -> Book:
        """
        Add a new book with no copies issued.

        Raises:
            InvalidArgumentError: If a text field is empty or quantity is negative
            DuplicateError: If another book has this id (ignoring case)
        """
        book = self._validate(
            id=id, title=title, author=author, publisher=publisher, quantity=quantity, issued=0
        )
        self._insert(book)
        logger.info("Added book %s (%d copies)", book.id, book.quantity)
        return book

    def update(self, id: str, title: str, author: str, publisher: str, quantity: int) -> Book:
        """
        Overwrite a book's details. The id and issued count are kept.

        Raises:
            NotFoundError: If the book does not exist
            InvalidArgumentError: If a text field is empty, or quantity is
                below the number of copies currently issued
        """
        current = self.get(id)
        if 0 <= quantity < current.issued:
            raise InvalidArgumentError(
                "Quantity cannot be set lower than the number of currently "
                f"issued copies ({current.issued})"
            )

        updated = self._validate(
            id=current.id,
            title=title,
            author=author,
            publisher=publisher,
            quantity=quantity,
            issued=current.issued,
        )
        self._replace(updated)
        logger.info("Updated book %s", updated.id)
        return updated

    def remove(self, id: str) -> Book:
        """
        Delete a book.

        Raises:
            NotFoundError: If the book does not exist
            HasActiveLoansError: If any copy is still out on loan
        """
        book = self.get(id)
        on_loan = book.issued > 0
        if self._loans is not None:
            on_loan = on_loan or self._loans.has_active_loan_for_book(book.id)
        if on_loan:
            raise HasActiveLoansError(
                f"Cannot delete book {book.id}: it is currently issued to a member"
            )

        self._delete(book)
        logger.info("Removed book %s", book.id)
        return book

    def available_copies(self, id: str) -> int:
        """Copies of the book still on the shelf."""
        return self.get(id).available_copies

    def try_issue_one_copy(self, id: str) -> bool:
        """
        Take one copy of the book off the shelf.

        Returns:
            True if a copy was issued, False if none was available

        Raises:
            NotFoundError: If the book does not exist
        """
        book = self.get(id)
        issued = book.issue_copy()
        if not issued:
            logger.debug("No copies of %s left to issue", book.id)
        return issued

    def return_one_copy(self, id: str) -> None:
        """
        Put one copy of the book back on the shelf.

        Raises:
            NotFoundError: If the book does not exist
        """
        book = self.get(id)
        if book.issued == 0:
            logger.warning("Return of %s ignored: no copies are issued", book.id)
            return
        book.return_copy()

    def available_books(self) -> StoreView[Book]:
        """Books with at least one copy that can be issued."""
        return StoreView(self._items.values, lambda book: book.is_available)
