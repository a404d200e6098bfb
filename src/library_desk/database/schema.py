"""
SQLAlchemy database schema for Library Desk.

The save file holds three independent tables, one per in-memory store.
There are no foreign keys between them: returned issue records may refer
to books or members that have since been deleted.

Every table carries a ``position`` column so the stores come back in the
order their entities were added.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String
from sqlalchemy.orm import declarative_base

# Base class for all SQLAlchemy models
Base = declarative_base()


class Book(Base):
    """Books table - one row per catalog entry."""

    __tablename__ = "books"

    id = Column(String(100), primary_key=True)
    position = Column(Integer, nullable=False)
    title = Column(String(500), nullable=False)
    author = Column(String(200), nullable=False)
    publisher = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    issued = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_book_position", "position"),
        CheckConstraint("quantity >= 0", name="check_quantity_non_negative"),
        CheckConstraint("issued >= 0", name="check_issued_non_negative"),
        CheckConstraint("issued <= quantity", name="check_issued_not_exceed_quantity"),
    )


class Member(Base):
    """Members table - one row per registered member."""

    __tablename__ = "members"

    id = Column(String(100), primary_key=True)
    position = Column(Integer, nullable=False)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)
    contact = Column(String(100), nullable=False)

    __table_args__ = (Index("idx_member_position", "position"),)


class IssueRecord(Base):
    """
    Issue records table - the lending history.

    ``return_date`` is NULL while the loan is active.
    """

    __tablename__ = "issue_records"

    id = Column(String(50), primary_key=True)
    position = Column(Integer, nullable=False)
    book_id = Column(String(100), nullable=False)
    member_id = Column(String(100), nullable=False)
    issue_date = Column(DateTime, nullable=False)
    return_date = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_issue_position", "position"),
        Index("idx_issue_book", "book_id"),
        Index("idx_issue_member", "member_id"),
        CheckConstraint(
            "return_date IS NULL OR return_date >= issue_date",
            name="check_return_not_before_issue",
        ),
    )


TABLE_NAMES = frozenset(table.name for table in Base.metadata.sorted_tables)
