"""
Roster store for Library Desk.

Holds the library's members. Members have no counters of their own; the
only cross-store rule is that a member with an unreturned book cannot be
removed.
"""

import logging

from ..errors import HasActiveLoansError
from ..models.member import Member
from .base import BaseStore, LoanIndex

logger = logging.getLogger(__name__)


class Roster(BaseStore[Member]):
    """In-memory store of library members."""

    def __init__(self, loans: LoanIndex | None = None):
        super().__init__()
        self._loans = loans

    @property
    def model_class(self) -> type[Member]:
        return Member

    @property
    def entity_name(self) -> str:
        return "Member"

    def bind_loans(self, loans: LoanIndex) -> None:
        """Attach the ledger consulted before a member is removed."""
        self._loans = loans

    def add(self, id: str, name: str, email: str, contact: str) -> Member:
        """
        Register a new member.

        Raises:
            InvalidArgumentError: If any field is empty
            DuplicateError: If another member has this id (ignoring case)
        """
        member = self._validate(id=id, name=name, email=email, contact=contact)
        self._insert(member)
        logger.info("Added member %s", member.id)
        return member

    def update(self, id: str, name: str, email: str, contact: str) -> Member:
        """
        Overwrite a member's details. The id is kept.

        Raises:
            NotFoundError: If the member does not exist
            InvalidArgumentError: If any field is empty
        """
        current = self.get(id)
        updated = self._validate(id=current.id, name=name, email=email, contact=contact)
        self._replace(updated)
        logger.info("Updated member %s", updated.id)
        return updated

    def remove(self, id: str) -> Member:
        """
        Delete a member.

        Raises:
            NotFoundError: If the member does not exist
            HasActiveLoansError: If the member still has books issued
        """
        member = self.get(id)
        if self._loans is not None and self._loans.has_active_loan_for_member(member.id):
            raise HasActiveLoansError(
                f"Cannot delete member {member.id}: they have books currently issued"
            )

        self._delete(member)
        logger.info("Removed member %s", member.id)
        return member
