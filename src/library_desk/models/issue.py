"""
Issue record model for Library Desk.

An issue record is created each time a copy of a book is handed to a
member. Its lifecycle has exactly one transition:

    ACTIVE --(return)--> RETURNED

Records are never deleted, so the ledger doubles as the lending history.
"""

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IssueStatus(str, enum.Enum):
    """Status of an issue record, derived from its return date."""

    ACTIVE = "active"
    RETURNED = "returned"


class IssueRecord(BaseModel):
    """
    Represents one issuance of a book copy to a member.

    ``book_id`` and ``member_id`` are references by identifier; the ledger
    resolves them against the catalog and roster whenever it needs current
    state.
    """

    id: str = Field(
        ...,
        description="System-generated identifier",
        min_length=1,
        frozen=True,
        examples=["I-1", "I-42"],
    )

    book_id: str = Field(
        ...,
        description="Identifier of the issued book",
        min_length=1,
        frozen=True,
    )

    member_id: str = Field(
        ...,
        description="Identifier of the borrowing member",
        min_length=1,
        frozen=True,
    )

    issue_date: datetime = Field(
        ...,
        description="When the copy was issued",
        frozen=True,
    )

    return_date: datetime | None = Field(
        None,
        description="When the copy came back; absent while the loan is active",
    )

    @model_validator(mode="after")
    def validate_dates(self) -> "IssueRecord":
        """Ensure return date is not before issue date."""
        if self.return_date is not None and self.return_date < self.issue_date:
            raise ValueError("Return date cannot be before issue date")
        return self

    @property
    def is_active(self) -> bool:
        return self.return_date is None

    @property
    def status(self) -> IssueStatus:
        return IssueStatus.ACTIVE if self.is_active else IssueStatus.RETURNED

    def mark_returned(self, when: datetime) -> None:
        """
        Close the record.

        Raises:
            ValueError: If the record was already returned
        """
        if not self.is_active:
            raise ValueError(f"Issue record {self.id} was already returned")
        self.return_date = max(when, self.issue_date)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "I-1",
                "book_id": "B-1",
                "member_id": "M-1",
                "issue_date": "2024-01-15T10:30:00",
                "return_date": None,
            }
        },
    )
