"""
In-memory stores for Library Desk.

- Catalog: books and copy accounting
- Roster: members
- LendingLedger: issue/return records, queried by the other two before
  anything is deleted
"""

from .base import BaseStore, LoanIndex, StoreView
from .catalog import Catalog
from .ledger import LendingLedger
from .roster import Roster

__all__ = [
    "BaseStore",
    "Catalog",
    "LendingLedger",
    "LoanIndex",
    "Roster",
    "StoreView",
]
