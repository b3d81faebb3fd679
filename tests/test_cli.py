"""Tests for the CLI interface."""

import os
import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from libraryrentals.books import BookCreate, BookManager
from libraryrentals.cli import EXIT_CODES, app
from libraryrentals.config import reset_config
from libraryrentals.customers import CustomerCreate, CustomerManager
from libraryrentals.db.sqlite import get_db, reset_db
from libraryrentals.errors import (
    BookAlreadyRented,
    CustomerAlreadyExists,
    CustomerHasActiveRentals,
    CustomerNotFound,
    ExceededMaximumNumberOfRentals,
    RentalAlreadyFinished,
    RentalNotFound,
)
from libraryrentals.rentals import RentalManager


@pytest.fixture(autouse=True)
def setup_test_db():
    """Set up a test database for each test."""
    reset_db()
    reset_config()

    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    os.environ["LIBRARY_DB_PATH"] = db_path

    yield

    # Cleanup
    get_db().engine.dispose()
    reset_db()
    reset_config()
    if "LIBRARY_DB_PATH" in os.environ:
        del os.environ["LIBRARY_DB_PATH"]
    if Path(db_path).exists():
        Path(db_path).unlink()


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def book():
    return BookManager(get_db()).add_book(BookCreate(title="Dune", author="Frank Herbert"))


@pytest.fixture
def customer():
    return CustomerManager(get_db()).add_customer(
        CustomerCreate(first_name="Łukasz", last_name="Gryziewicz")
    )


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_help(self, runner: CliRunner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Manage book rentals" in result.stdout

    def test_version(self, runner: CliRunner):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_bad_log_level_rejected(self, runner: CliRunner, monkeypatch):
        monkeypatch.setenv("LIBRARY_LOG_LEVEL", "loud")

        result = runner.invoke(app, ["version"])

        assert result.exit_code == 1
        assert "Unknown log level: LOUD" in result.stdout

    def test_exit_codes_distinct(self):
        assert len(set(EXIT_CODES.values())) == len(EXIT_CODES)


class TestBookCommands:
    """Tests for book commands."""

    def test_add_book(self, runner: CliRunner):
        result = runner.invoke(
            app, ["books", "add", "--title", "Dune", "--author", "Frank Herbert", "--isbn", "9780441172719"]
        )

        assert result.exit_code == 0
        assert "Added: Dune" in result.stdout
        assert len(BookManager(get_db()).list_books()) == 1

    def test_add_book_invalid_isbn(self, runner: CliRunner):
        result = runner.invoke(app, ["books", "add", "--title", "Dune", "--author", "Frank Herbert", "--isbn", "12"])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_list_books_empty(self, runner: CliRunner):
        result = runner.invoke(app, ["books", "list"])

        assert result.exit_code == 0
        assert "No books found" in result.stdout

    def test_list_books(self, runner: CliRunner, book):
        result = runner.invoke(app, ["books", "list"])

        assert result.exit_code == 0
        assert "Dune" in result.stdout


class TestCustomerCommands:
    """Tests for customer commands."""

    def test_add_customer(self, runner: CliRunner):
        result = runner.invoke(app, ["customers", "add", "Adam", "Dominik"])

        assert result.exit_code == 0
        assert "Added customer: Adam Dominik" in result.stdout

    def test_add_customer_blank_name(self, runner: CliRunner):
        result = runner.invoke(app, ["customers", "add", "", "Dominik"])

        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert CustomerManager(get_db()).list_customers() == []

    def test_add_duplicate_customer(self, runner: CliRunner, customer):
        result = runner.invoke(app, ["customers", "add", "Łukasz", "Gryziewicz"])

        assert result.exit_code == EXIT_CODES[CustomerAlreadyExists]
        assert "Customer already exists" in result.stdout

    def test_delete_customer_with_rental(self, runner: CliRunner, customer, book):
        RentalManager(get_db()).create_rental(customer.id, book.id)

        result = runner.invoke(app, ["customers", "delete", customer.id])

        assert result.exit_code == EXIT_CODES[CustomerHasActiveRentals]

    def test_fine_customer(self, runner: CliRunner, customer):
        result = runner.invoke(app, ["customers", "fine", customer.id, "2.50", "--reason", "Late"])

        assert result.exit_code == 0
        assert "Fined 2.50" in result.stdout

        listing = runner.invoke(app, ["customers", "list"])
        assert "2.50" in listing.stdout


class TestRentalCommands:
    """Tests for rental commands."""

    def test_rent(self, runner: CliRunner, customer, book):
        result = runner.invoke(app, ["rentals", "rent", customer.id, book.id])

        assert result.exit_code == 0
        assert "Rental created" in result.stdout
        assert BookManager(get_db()).get_book(book.id).rented is True

    def test_rent_unknown_customer(self, runner: CliRunner, book):
        result = runner.invoke(app, ["rentals", "rent", "missing", book.id])

        assert result.exit_code == EXIT_CODES[CustomerNotFound]
        assert "Customer not found" in result.stdout

    def test_rent_rented_book(self, runner: CliRunner, customer, book):
        runner.invoke(app, ["rentals", "rent", customer.id, book.id])
        result = runner.invoke(app, ["rentals", "rent", customer.id, book.id])

        assert result.exit_code == EXIT_CODES[BookAlreadyRented]

    def test_rent_over_limit(self, runner: CliRunner, customer):
        books = BookManager(get_db())
        copies = [books.add_book(BookCreate(title="Dune", author="Frank Herbert")) for _ in range(4)]
        for copy in copies[:3]:
            assert runner.invoke(app, ["rentals", "rent", customer.id, copy.id]).exit_code == 0

        result = runner.invoke(app, ["rentals", "rent", customer.id, copies[3].id])

        assert result.exit_code == EXIT_CODES[ExceededMaximumNumberOfRentals]
        assert "maximum number of rentals(3)" in result.stdout

    def test_rent_title(self, runner: CliRunner, customer, book):
        result = runner.invoke(
            app, ["rentals", "rent-title", customer.id, "--title", "Dune", "--author", "Frank Herbert"]
        )

        assert result.exit_code == 0
        assert book.id in result.stdout

    def test_end_rental(self, runner: CliRunner, customer, book):
        rental = RentalManager(get_db()).create_rental(customer.id, book.id)

        result = runner.invoke(app, ["rentals", "end", rental.id])
        again = runner.invoke(app, ["rentals", "end", rental.id])

        assert result.exit_code == 0
        assert "Rental returned" in result.stdout
        assert again.exit_code == EXIT_CODES[RentalAlreadyFinished]

    def test_delete_rental(self, runner: CliRunner, customer, book):
        rental = RentalManager(get_db()).create_rental(customer.id, book.id)

        result = runner.invoke(app, ["rentals", "delete", rental.id])
        missing = runner.invoke(app, ["rentals", "delete", rental.id])

        assert result.exit_code == 0
        assert missing.exit_code == EXIT_CODES[RentalNotFound]

    def test_show_rental(self, runner: CliRunner, customer, book):
        rental = RentalManager(get_db()).create_rental(customer.id, book.id)

        result = runner.invoke(app, ["rentals", "show", rental.id])

        assert result.exit_code == 0
        assert "Dune" in result.stdout
        assert "Łukasz Gryziewicz" in result.stdout

    def test_list_rentals_by_state(self, runner: CliRunner, customer, book):
        rental = RentalManager(get_db()).create_rental(customer.id, book.id)
        RentalManager(get_db()).end_rental(rental.id)

        finished = runner.invoke(app, ["rentals", "list", "--state", "finished"])
        unfinished = runner.invoke(app, ["rentals", "list", "--state", "unfinished"])

        assert finished.exit_code == 0
        assert "Dune" in finished.stdout
        assert "No rentals found" in unfinished.stdout
