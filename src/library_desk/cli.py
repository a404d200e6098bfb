"""
Command-line front end for Library Desk.

Each invocation loads the saved state, performs one operation and, if the
operation changed anything, saves again before exiting.

Usage:
    library-desk books list
    library-desk books add B-1 "The Great Gatsby" "F. Scott Fitzgerald" Scribner 2
    library-desk members add M-1 "Jane Doe" jane@example.com 555-0100
    library-desk issue B-1 M-1
    library-desk loans
    library-desk return I-1
    library-desk stats
"""

import argparse
import logging
import sys
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from pydantic import ValidationError

from . import __version__
from .app import LibraryContext
from .config import LibraryConfig, get_config
from .errors import LibraryError
from .stores.base import format_validation_error

logger = logging.getLogger(__name__)

BOOK_COLUMNS = ("ID", "Title", "Author", "Publisher", "Quantity", "Issued", "Available")
MEMBER_COLUMNS = ("ID", "Name", "Email", "Contact")
LOAN_COLUMNS = ("Issue ID", "Book", "Member", "Issue Date")
RECORD_COLUMNS = ("Issue ID", "Book ID", "Member ID", "Issue Date", "Return Date")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_table(columns: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    """Render rows as a left-aligned text table."""
    cells = [[str(value) for value in row] for row in rows]
    widths = [len(column) for column in columns]
    for row in cells:
        widths = [max(width, len(value)) for width, value in zip(widths, row, strict=True)]

    def line(values: Sequence[str]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(values, widths, strict=True))

    output = [line(columns), line(["-" * width for width in widths])]
    output.extend(line(row) for row in cells)
    return "\n".join(text.rstrip() for text in output)


# === Command handlers ===
# Each handler returns True when it changed library state.


def _books_list(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    books = ctx.catalog.available_books() if args.available else ctx.catalog.get_all()
    rows = [
        (b.id, b.title, b.author, b.publisher, b.quantity, b.issued, b.available_copies)
        for b in books
    ]
    print(format_table(BOOK_COLUMNS, rows))
    return False


def _books_add(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    book = ctx.catalog.add(args.id, args.title, args.author, args.publisher, args.quantity)
    print(f"Book {book.id} added.")
    return True


def _books_update(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    book = ctx.catalog.update(args.id, args.title, args.author, args.publisher, args.quantity)
    print(f"Book {book.id} updated.")
    return True


def _books_remove(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    book = ctx.catalog.remove(args.id)
    print(f"Book {book.id} deleted.")
    return True


def _members_list(ctx: LibraryContext, args: argparse.Namespace) -> bool:  # noqa: ARG001
    rows = [(m.id, m.name, m.email, m.contact) for m in ctx.roster.get_all()]
    print(format_table(MEMBER_COLUMNS, rows))
    return False


def _members_add(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    member = ctx.roster.add(args.id, args.name, args.email, args.contact)
    print(f"Member {member.id} added.")
    return True


def _members_update(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    member = ctx.roster.update(args.id, args.name, args.email, args.contact)
    print(f"Member {member.id} updated.")
    return True


def _members_remove(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    member = ctx.roster.remove(args.id)
    print(f"Member {member.id} deleted.")
    return True


def _issue(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    record = ctx.ledger.issue(args.book_id, args.member_id)
    print(f"Book {record.book_id} issued to {record.member_id} as {record.id}.")
    return True


def _return(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    record = ctx.ledger.return_book(args.issue_id)
    print(f"Issue {record.id} returned.")
    return True


def _loans(ctx: LibraryContext, args: argparse.Namespace) -> bool:
    if args.all:
        rows = [
            (
                r.id,
                r.book_id,
                r.member_id,
                r.issue_date.strftime(DATE_FORMAT),
                r.return_date.strftime(DATE_FORMAT) if r.return_date else "-",
            )
            for r in ctx.ledger.all_records()
        ]
        print(format_table(RECORD_COLUMNS, rows))
    else:
        rows = [
            (v.issue_id, v.book_title, v.member_name, v.issue_date.strftime(DATE_FORMAT))
            for v in ctx.active_loans()
        ]
        print(format_table(LOAN_COLUMNS, rows))
    return False


def _stats(ctx: LibraryContext, args: argparse.Namespace) -> bool:  # noqa: ARG001
    stats = ctx.stats()
    print(f"Total Books: {stats.total_books}")
    print(f"Total Members: {stats.total_members}")
    print(f"Books Issued: {stats.books_issued}")
    return False


Handler = Callable[[LibraryContext, argparse.Namespace], bool]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="library-desk",
        description="Track a small library's books, members and loans",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--database",
        type=Path,
        help="Save file to use instead of the configured one",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    # books
    books = commands.add_parser("books", help="Manage the catalog")
    book_actions = books.add_subparsers(dest="action", required=True)

    listing = book_actions.add_parser("list", help="List books")
    listing.add_argument(
        "--available", action="store_true", help="Only books with copies on the shelf"
    )
    listing.set_defaults(handler=_books_list)

    for name, handler, help_text in (
        ("add", _books_add, "Add a book"),
        ("update", _books_update, "Update a book"),
    ):
        action = book_actions.add_parser(name, help=help_text)
        action.add_argument("id")
        action.add_argument("title")
        action.add_argument("author")
        action.add_argument("publisher")
        action.add_argument("quantity", type=int)
        action.set_defaults(handler=handler)

    remove = book_actions.add_parser("remove", help="Delete a book")
    remove.add_argument("id")
    remove.set_defaults(handler=_books_remove)

    # members
    members = commands.add_parser("members", help="Manage members")
    member_actions = members.add_subparsers(dest="action", required=True)

    member_actions.add_parser("list", help="List members").set_defaults(handler=_members_list)

    for name, handler, help_text in (
        ("add", _members_add, "Register a member"),
        ("update", _members_update, "Update a member"),
    ):
        action = member_actions.add_parser(name, help=help_text)
        action.add_argument("id")
        action.add_argument("name")
        action.add_argument("email")
        action.add_argument("contact")
        action.set_defaults(handler=handler)

    remove = member_actions.add_parser("remove", help="Delete a member")
    remove.add_argument("id")
    remove.set_defaults(handler=_members_remove)

    # lending
    issue = commands.add_parser("issue", help="Issue a book to a member")
    issue.add_argument("book_id")
    issue.add_argument("member_id")
    issue.set_defaults(handler=_issue)

    ret = commands.add_parser("return", help="Return an issued book")
    ret.add_argument("issue_id")
    ret.set_defaults(handler=_return)

    loans = commands.add_parser("loans", help="Show books currently issued")
    loans.add_argument("--all", action="store_true", help="Include returned records")
    loans.set_defaults(handler=_loans)

    commands.add_parser("stats", help="Show library totals").set_defaults(handler=_stats)

    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = (
            get_config() if args.database is None else LibraryConfig(database_path=args.database)
        )
    except ValidationError as e:
        print(f"Error: Invalid configuration: {format_validation_error(e)}", file=sys.stderr)
        return 1
    configure_logging("DEBUG" if args.verbose else config.effective_log_level)

    ctx = LibraryContext(config=config)
    handler: Handler = args.handler
    try:
        snapshot = ctx.load()
        if snapshot.corruption:
            print(f"Warning: {snapshot.corruption}. Starting with empty lists.", file=sys.stderr)

        if handler(ctx, args):
            ctx.save()
    except LibraryError as e:
        logger.debug("Command failed: %s (%s)", e.message, e.kind.value)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        ctx.close()

    return 0
