"""Test configuration and fixtures for Library Desk.

Every test gets:
1. Its own save file under pytest's ``tmp_path``
2. A fresh LibraryContext (no shared global state between tests)
3. A deterministic clock, so issue/return timestamps are predictable
"""

import os
from collections.abc import Generator
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from library_desk.app import LibraryContext
from library_desk.config import LibraryConfig, reset_config
from library_desk.database.gateway import PersistenceGateway
from library_desk.stores.catalog import Catalog
from library_desk.stores.ledger import LendingLedger
from library_desk.stores.roster import Roster


class FakeClock:
    """Callable clock that advances a fixed step on every reading."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


# === Environment Fixtures ===


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Run every test without LIBRARY_DESK_* variables or a cached config."""
    original_env = os.environ.copy()
    for key in list(os.environ):
        if key.startswith("LIBRARY_DESK_"):
            del os.environ[key]
    reset_config()

    yield

    os.environ.clear()
    os.environ.update(original_env)
    reset_config()


# === Storage Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a save file path that does not exist yet."""
    return tmp_path / "data" / "library.db"


@pytest.fixture
def test_config(test_db_path: Path) -> LibraryConfig:
    return LibraryConfig(database_path=test_db_path, debug=True)


@pytest.fixture
def gateway(test_db_path: Path) -> Generator[PersistenceGateway, None, None]:
    gateway = PersistenceGateway(test_db_path)
    yield gateway
    gateway.close()


# === Store Fixtures ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 15, 10, 0, 0))


@pytest.fixture
def context(
    test_config: LibraryConfig, gateway: PersistenceGateway, clock: FakeClock
) -> LibraryContext:
    """Provide a fresh, empty library wired to the test save file."""
    return LibraryContext(gateway, config=test_config, clock=clock)


@pytest.fixture
def catalog(context: LibraryContext) -> Catalog:
    return context.catalog


@pytest.fixture
def roster(context: LibraryContext) -> Roster:
    return context.roster


@pytest.fixture
def ledger(context: LibraryContext) -> LendingLedger:
    return context.ledger


@pytest.fixture
def stocked(context: LibraryContext) -> LibraryContext:
    """A library with two books and two members, nothing issued."""
    context.catalog.add("B-1", "The Great Gatsby", "F. Scott Fitzgerald", "Scribner", 2)
    context.catalog.add("B-2", "1984", "George Orwell", "Secker & Warburg", 1)
    context.roster.add("M-1", "Jane Doe", "jane.doe@example.com", "555-0100")
    context.roster.add("M-2", "John Smith", "john.smith@example.com", "555-0101")
    return context
