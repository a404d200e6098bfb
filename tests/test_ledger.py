"""
Tests for the LendingLedger.

These tests verify that the ledger:
1. Issues and returns books while keeping the catalog's copy counts in step
2. Refuses impossible issues and double returns without side effects
3. Generates unique issue ids, also after saved records are restored
"""

import logging
import random
from datetime import datetime, timedelta

import pytest

from library_desk.errors import (
    AlreadyReturnedError,
    DuplicateError,
    ErrorKind,
    InvalidArgumentError,
    LibraryError,
    NoCopiesAvailableError,
    NotFoundError,
)
from library_desk.models.issue import IssueRecord, IssueStatus

START = datetime(2024, 1, 15, 10, 0, 0)


def assert_copy_counts_consistent(ctx):
    """Every book's issued count matches its active issue records."""
    for book in ctx.catalog.get_all():
        active = [r for r in ctx.ledger.records_for_book(book.id) if r.is_active]
        assert 0 <= book.issued <= book.quantity
        assert book.issued == len(active)


class TestIssue:
    def test_issue_creates_active_record(self, stocked):
        record = stocked.ledger.issue("B-1", "M-1")

        assert record.id == "I-1"
        assert record.book_id == "B-1"
        assert record.member_id == "M-1"
        assert record.issue_date == START
        assert record.status == IssueStatus.ACTIVE
        assert stocked.catalog.get("B-1").issued == 1
        assert stocked.catalog.available_copies("B-1") == 1

    def test_issue_uses_stored_id_casing(self, stocked):
        record = stocked.ledger.issue("b-1", "m-1")

        assert record.book_id == "B-1"
        assert record.member_id == "M-1"

    def test_issue_until_no_copies(self, stocked):
        stocked.ledger.issue("B-2", "M-1")

        with pytest.raises(NoCopiesAvailableError, match="No available copies of '1984'") as exc_info:
            stocked.ledger.issue("B-2", "M-2")

        assert exc_info.value.kind == ErrorKind.NO_COPIES_AVAILABLE
        assert stocked.catalog.get("B-2").issued == 1
        assert len(stocked.ledger) == 1

    def test_same_member_can_hold_two_copies(self, stocked):
        stocked.ledger.issue("B-1", "M-1")
        stocked.ledger.issue("B-1", "M-1")

        assert stocked.catalog.available_copies("B-1") == 0
        assert len(stocked.ledger.records_for_member("M-1")) == 2

    @pytest.mark.parametrize(("book_id", "member_id"), [("B-9", "M-1"), ("B-1", "M-9")])
    def test_unknown_book_or_member(self, stocked, book_id, member_id):
        with pytest.raises(NotFoundError):
            stocked.ledger.issue(book_id, member_id)

        assert stocked.catalog.get("B-1").issued == 0
        assert len(stocked.ledger) == 0

    def test_failed_record_insert_gives_copy_back(self, stocked, monkeypatch):
        def refuse(record):
            raise DuplicateError(f"Issue record ID {record.id} already exists")

        monkeypatch.setattr(stocked.ledger, "_insert", refuse)

        with pytest.raises(DuplicateError):
            stocked.ledger.issue("B-1", "M-1")

        assert stocked.catalog.get("B-1").issued == 0
        assert len(stocked.ledger) == 0

    def test_issue_ids_are_sequential(self, stocked):
        ids = [stocked.ledger.issue("B-1", "M-1").id, stocked.ledger.issue("B-2", "M-2").id]
        assert ids == ["I-1", "I-2"]


class TestReturn:
    def test_return_book(self, stocked):
        record = stocked.ledger.issue("B-1", "M-1")

        returned = stocked.ledger.return_book(record.id)

        assert returned is record
        assert returned.status == IssueStatus.RETURNED
        assert returned.return_date == START + timedelta(minutes=1)
        assert stocked.catalog.get("B-1").issued == 0

    def test_return_twice(self, stocked):
        record = stocked.ledger.issue("B-1", "M-1")
        stocked.ledger.return_book(record.id)

        with pytest.raises(AlreadyReturnedError, match="already returned on 2024-01-15") as exc_info:
            stocked.ledger.return_book(record.id)

        assert exc_info.value.kind == ErrorKind.ALREADY_RETURNED
        assert stocked.catalog.get("B-1").issued == 0

    def test_return_unknown_record(self, stocked):
        with pytest.raises(NotFoundError, match="Issue record I-42 not found"):
            stocked.ledger.return_book("I-42")

    def test_return_id_ignores_case(self, stocked):
        stocked.ledger.issue("B-1", "M-1")
        assert stocked.ledger.return_book("i-1").id == "I-1"

    def test_return_after_book_deleted(self, stocked, caplog):
        """Saved data can hold an active record whose book is gone."""
        record = stocked.ledger.issue("B-2", "M-1")
        stocked.catalog.restore(
            b for b in stocked.catalog.snapshot() if b.id != "B-2"
        )

        with caplog.at_level(logging.WARNING, logger="library_desk.stores.ledger"):
            returned = stocked.ledger.return_book(record.id)

        assert returned.is_active is False
        assert "no longer in the catalog" in caplog.text

    def test_return_never_before_issue(self, stocked, clock):
        record = stocked.ledger.issue("B-1", "M-1")
        clock.now = START - timedelta(days=1)

        returned = stocked.ledger.return_book(record.id)

        assert returned.return_date == record.issue_date


class TestQueries:
    def test_active_and_all_records(self, stocked):
        first = stocked.ledger.issue("B-1", "M-1")
        second = stocked.ledger.issue("B-2", "M-2")
        stocked.ledger.return_book(first.id)

        assert [r.id for r in stocked.ledger.active_records()] == [second.id]
        assert [r.id for r in stocked.ledger.all_records()] == [first.id, second.id]

    def test_active_records_view_is_live(self, stocked):
        active = stocked.ledger.active_records()
        assert not active

        record = stocked.ledger.issue("B-1", "M-1")
        assert [r.id for r in active] == [record.id]

        stocked.ledger.return_book(record.id)
        assert len(active) == 0

    def test_loan_lookups(self, stocked):
        record = stocked.ledger.issue("B-1", "M-1")

        assert stocked.ledger.has_active_loan_for_book("b-1") is True
        assert stocked.ledger.has_active_loan_for_member("M-1") is True
        assert stocked.ledger.has_active_loan_for_book("B-2") is False
        assert stocked.ledger.has_active_loan_for_member("M-2") is False

        stocked.ledger.return_book(record.id)
        assert stocked.ledger.has_active_loan_for_book("B-1") is False


class TestRestore:
    def test_ids_continue_after_restore(self, stocked):
        stocked.ledger.issue("B-1", "M-1")
        stocked.ledger.issue("B-1", "M-2")
        saved = stocked.ledger.snapshot()

        stocked.ledger.restore(saved)

        assert stocked.ledger.issue("B-2", "M-1").id == "I-3"

    def test_taken_ids_are_skipped(self, stocked):
        stocked.ledger.restore(
            [IssueRecord(id="I-2", book_id="B-1", member_id="M-1", issue_date=START)]
        )

        assert stocked.ledger.issue("B-2", "M-2").id == "I-3"

    def test_restore_rejects_duplicate_ids(self, stocked):
        records = [
            IssueRecord(id="I-1", book_id="B-1", member_id="M-1", issue_date=START),
            IssueRecord(id="i-1", book_id="B-2", member_id="M-2", issue_date=START),
        ]
        with pytest.raises(DuplicateError):
            stocked.ledger.restore(records)

    def test_clear_restarts_ids(self, stocked):
        stocked.ledger.issue("B-2", "M-1")
        stocked.ledger.clear()
        stocked.catalog.get("B-2").return_copy()

        assert stocked.ledger.issue("B-2", "M-1").id == "I-1"


class TestCopyInvariant:
    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_random_operations_keep_counts_consistent(self, stocked, seed):
        rng = random.Random(seed)
        stocked.catalog.add("B-3", "Emma", "Jane Austen", "John Murray", 3)
        books = ["B-1", "B-2", "B-3", "B-9"]
        members = ["M-1", "M-2", "M-9"]

        for _ in range(300):
            roll = rng.random()
            try:
                if roll < 0.45:
                    stocked.ledger.issue(rng.choice(books), rng.choice(members))
                elif roll < 0.8:
                    records = list(stocked.ledger.all_records())
                    if records:
                        stocked.ledger.return_book(rng.choice(records).id)
                else:
                    book_id = rng.choice(books)
                    book = stocked.catalog.find(book_id)
                    quantity = rng.randint(0, 5)
                    if book is not None and quantity < book.issued:
                        with pytest.raises(InvalidArgumentError):
                            stocked.catalog.update(
                                book_id, book.title, book.author, book.publisher, quantity
                            )
                    else:
                        stocked.catalog.update(book_id, "Title", "Author", "Publisher", quantity)
            except LibraryError:
                pass
            assert_copy_counts_consistent(stocked)

        ids = [r.id.casefold() for r in stocked.ledger.all_records()]
        assert len(ids) == len(set(ids))
