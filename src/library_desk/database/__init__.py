"""
Database package for Library Desk.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Engine and session management (session.py)
- The persistence gateway that saves and loads the stores (gateway.py)
"""

from .gateway import LibrarySnapshot, PersistenceGateway
from .schema import Base
from .session import DatabaseManager

__all__ = [
    "Base",
    "DatabaseManager",
    "LibrarySnapshot",
    "PersistenceGateway",
]
