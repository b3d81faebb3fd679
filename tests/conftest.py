"""Pytest configuration and shared fixtures.

This module provides fixtures for testing the lending desk: an isolated
database per test, the three managers, and a small catalogue of books and
customers.
"""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

from libraryrentals.books import Book, BookCreate, BookManager
from libraryrentals.config import reset_config
from libraryrentals.customers import Customer, CustomerCreate, CustomerManager
from libraryrentals.db.sqlite import Database, reset_db
from libraryrentals.rentals import RentalManager


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)
    yield db_path
    # Cleanup
    if db_path.exists():
        db_path.unlink()


@pytest.fixture(scope="function")
def db() -> Generator[Database, None, None]:
    """Create an in-memory database for testing."""
    reset_db()
    reset_config()

    database = Database(":memory:")
    database.create_tables()
    yield database

    reset_db()


@pytest.fixture
def file_db(temp_db_path: Path) -> Generator[Database, None, None]:
    """Create a database backed by a temporary file."""
    reset_db()
    reset_config()

    os.environ["LIBRARY_DB_PATH"] = str(temp_db_path)

    database = Database(str(temp_db_path))
    database.create_tables()
    yield database

    database.engine.dispose()
    reset_db()
    if "LIBRARY_DB_PATH" in os.environ:
        del os.environ["LIBRARY_DB_PATH"]


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def books(db: Database) -> BookManager:
    return BookManager(db)


@pytest.fixture
def customers(db: Database) -> CustomerManager:
    return CustomerManager(db)


@pytest.fixture
def rentals(db: Database) -> RentalManager:
    return RentalManager(db)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def now() -> datetime:
    """A fixed point in time for rentals."""
    return datetime(2025, 3, 1, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def sample_book(books: BookManager) -> Book:
    """Create a sample book for testing."""
    return books.add_book(
        BookCreate(title="Adam", author="Z Nikiszowca", isbn="123456789")
    )


@pytest.fixture
def sample_books(books: BookManager) -> list[Book]:
    """Create four copies of the same title."""
    return [
        books.add_book(
            BookCreate(title="Adam z Nikiszowca", author="Adam Dominik", isbn="123456789")
        )
        for _ in range(4)
    ]


@pytest.fixture
def sample_customer(customers: CustomerManager) -> Customer:
    """Create a sample customer for testing."""
    return customers.add_customer(CustomerCreate(first_name="Łukasz", last_name="Gryziewicz"))


@pytest.fixture
def other_customer(customers: CustomerManager) -> Customer:
    """Create a second customer for testing."""
    return customers.add_customer(CustomerCreate(first_name="Adam", last_name="Dominik"))


# ============================================================================
# CLI Testing Fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()


@pytest.fixture
def cli_app():
    """Get the CLI app for testing."""
    from libraryrentals.cli import app
    return app
