"""
Library Desk models.

Pydantic models for the three entities the application keeps:
- Book: catalog entries with copy accounting
- Member: people books are issued to
- IssueRecord: one issuance of a book copy, active until returned
"""

from .book import Book
from .issue import IssueRecord, IssueStatus
from .member import Member

__all__ = [
    "Book",
    "IssueRecord",
    "IssueStatus",
    "Member",
]
