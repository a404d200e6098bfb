"""
Library Desk.

Bookkeeping for a small lending library: a catalog of books, a roster of
members and a ledger of issue/return records, saved to disk between runs.

Key Components:
- models: Pydantic models for books, members and issue records
- stores: in-memory Catalog, Roster and LendingLedger
- database: SQLAlchemy schema and the persistence gateway
- app: LibraryContext, which owns the stores and the gateway
- config: configuration management with pydantic-settings
- cli: command-line front end
"""

__version__ = "0.1.0"

from .app import LibraryContext, LibraryStats, LoanView
from .errors import ErrorKind, LibraryError

__all__ = [
    "ErrorKind",
    "LibraryContext",
    "LibraryError",
    "LibraryStats",
    "LoanView",
    "__version__",
]
