"""Command-line interface for the library lending desk.

Built with Typer for commands and Rich for output. Every command is a thin
wrapper around one manager call; business rule failures are reported and
turned into a per-error exit code.
"""

import logging
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .books import BookCreate, BookManager
from .config import get_config
from .customers import CustomerCreate, CustomerManager, FineCreate
from .db import get_db
from .errors import (
    BookAlreadyRented,
    BookNotFound,
    CustomerAlreadyExists,
    CustomerHasActiveRentals,
    CustomerNotFound,
    ExceededMaximumNumberOfRentals,
    LibraryError,
    RentalAlreadyFinished,
    RentalNotFound,
)
from .logging import configure_logging
from .rentals import RentalManager, RentalState

# Create the main app
app = typer.Typer(
    name="library",
    help="Manage book rentals at the library desk.",
    no_args_is_help=True,
)

# Create sub-apps for command groups
books_app = typer.Typer(help="Register and list book copies.")
app.add_typer(books_app, name="books")
customers_app = typer.Typer(help="Manage customers and their fines.")
app.add_typer(customers_app, name="customers")
rentals_app = typer.Typer(help="Rent, return and look up rentals.")
app.add_typer(rentals_app, name="rentals")

# Rich console for pretty output
console = Console()

EXIT_CODES: dict[type[LibraryError], int] = {
    CustomerNotFound: 10,
    BookNotFound: 11,
    RentalNotFound: 12,
    BookAlreadyRented: 20,
    RentalAlreadyFinished: 21,
    ExceededMaximumNumberOfRentals: 22,
    CustomerAlreadyExists: 23,
    CustomerHasActiveRentals: 24,
}


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def fail(error: LibraryError) -> typer.Exit:
    """Report a library error and build the matching exit."""
    print_error(str(error))
    return typer.Exit(EXIT_CODES.get(type(error), 1))


def format_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity"),
    debug: bool = typer.Option(False, "--debug", help="Log everything, with sources"),
) -> None:
    """Manage book rentals at the library desk."""
    config = get_config()
    errors = config.validate()
    if errors:
        for error in errors:
            print_error(error)
        raise typer.Exit(1)

    level = config.log_level_value
    if verbose:
        level = min(level, logging.INFO)
    configure_logging(level, debug_mode=debug)
    get_db(str(config.db_path))


@app.command()
def version() -> None:
    """Show the version."""
    console.print(f"library {__version__}")


# ============================================================================
# Book Commands
# ============================================================================


@books_app.command("add")
def books_add(
    title: str = typer.Option(..., "--title", "-t", help="Book title"),
    author: str = typer.Option(..., "--author", "-a", help="Book author"),
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="ISBN"),
) -> None:
    """Register a book copy."""
    manager = BookManager(get_db())
    try:
        data = BookCreate(title=title, author=author, isbn=isbn)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    book = manager.add_book(data)
    print_success(f"Added: {book.title} by {book.author}")
    console.print(f"[dim]ID: {book.id}[/dim]")


@books_app.command("list")
def books_list(
    available: bool = typer.Option(False, "--available", help="Show only available copies"),
) -> None:
    """List book copies."""
    books = BookManager(get_db()).list_books(available_only=available)

    if not books:
        console.print("[dim]No books found[/dim]")
        return

    table = Table(title="Books", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("ISBN")
    table.add_column("Status")

    for book in books:
        status = "[red]rented[/red]" if book.rented else "[green]available[/green]"
        table.add_row(book.id, book.title, book.author, book.isbn or "-", status)

    console.print(table)


# ============================================================================
# Customer Commands
# ============================================================================


@customers_app.command("add")
def customers_add(
    first_name: str = typer.Argument(..., help="First name"),
    last_name: str = typer.Argument(..., help="Last name"),
) -> None:
    """Register a customer."""
    manager = CustomerManager(get_db())
    try:
        data = CustomerCreate(first_name=first_name, last_name=last_name)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    try:
        customer = manager.add_customer(data)
    except LibraryError as e:
        raise fail(e)

    print_success(f"Added customer: {customer.full_name}")
    console.print(f"[dim]ID: {customer.id}[/dim]")


@customers_app.command("list")
def customers_list() -> None:
    """List customers."""
    customers = CustomerManager(get_db()).list_customers()

    if not customers:
        console.print("[dim]No customers found[/dim]")
        return

    table = Table(title="Customers", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Fines", justify="right")

    for customer in customers:
        table.add_row(customer.id, customer.full_name, f"{customer.total_fines:.2f}")

    console.print(table)


@customers_app.command("delete")
def customers_delete(
    customer_id: str = typer.Argument(..., help="Customer ID"),
) -> None:
    """Delete a customer with no open rentals."""
    try:
        CustomerManager(get_db()).delete_customer(customer_id)
    except LibraryError as e:
        raise fail(e)

    print_success("Customer deleted")


@customers_app.command("fine")
def customers_fine(
    customer_id: str = typer.Argument(..., help="Customer ID"),
    amount: str = typer.Argument(..., help="Amount, e.g. 2.50"),
    reason: Optional[str] = typer.Option(None, "--reason", "-r", help="Reason"),
) -> None:
    """Charge a fine to a customer."""
    try:
        data = FineCreate(amount=amount, reason=reason)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    try:
        fine = CustomerManager(get_db()).add_fine(customer_id, data)
    except LibraryError as e:
        raise fail(e)

    print_success(f"Fined {fine.amount:.2f}")


# ============================================================================
# Rental Commands
# ============================================================================


@rentals_app.command("rent")
def rentals_rent(
    customer_id: str = typer.Argument(..., help="Customer ID"),
    book_id: str = typer.Argument(..., help="Book ID"),
) -> None:
    """Rent a book copy to a customer."""
    try:
        rental = RentalManager(get_db()).create_rental(customer_id, book_id)
    except LibraryError as e:
        raise fail(e)

    print_success(f"Rental created: {rental.id}")


@rentals_app.command("rent-title")
def rentals_rent_title(
    customer_id: str = typer.Argument(..., help="Customer ID"),
    title: str = typer.Option(..., "--title", "-t", help="Book title"),
    author: str = typer.Option(..., "--author", "-a", help="Book author"),
) -> None:
    """Rent the first available copy of a title."""
    try:
        rental = RentalManager(get_db()).rent_by_title(customer_id, title, author)
    except LibraryError as e:
        raise fail(e)

    print_success(f"Rental created: {rental.id}")
    console.print(f"[dim]Book: {rental.book_id}[/dim]")


@rentals_app.command("end")
def rentals_end(
    rental_id: str = typer.Argument(..., help="Rental ID"),
) -> None:
    """Mark a rental as returned."""
    try:
        rental = RentalManager(get_db()).end_rental(rental_id)
    except LibraryError as e:
        raise fail(e)

    print_success(f"Rental returned at {format_time(rental.returned_at)}")


@rentals_app.command("delete")
def rentals_delete(
    rental_id: str = typer.Argument(..., help="Rental ID"),
) -> None:
    """Delete a rental record without returning the book."""
    try:
        RentalManager(get_db()).delete_rental(rental_id)
    except LibraryError as e:
        raise fail(e)

    print_success("Rental deleted")


@rentals_app.command("show")
def rentals_show(
    rental_id: str = typer.Argument(..., help="Rental ID"),
) -> None:
    """Show one rental."""
    db = get_db()
    try:
        rental = RentalManager(db).find_rental(rental_id)
    except LibraryError as e:
        raise fail(e)

    book = BookManager(db).get_book(rental.book_id)
    customer = CustomerManager(db).get_customer(rental.customer_id)

    console.print(f"[bold]Rental {rental.id}[/bold]")
    console.print(f"  Book:     {book.title if book else 'Unknown'}")
    console.print(f"  Customer: {customer.full_name if customer else 'Unknown'}")
    console.print(f"  Rented:   {format_time(rental.rented_at)}")
    console.print(f"  Returned: {format_time(rental.returned_at)}")


@rentals_app.command("list")
def rentals_list(
    state: RentalState = typer.Option(RentalState.ALL, "--state", "-s", help="Which rentals"),
    customer_id: Optional[str] = typer.Option(None, "--customer", "-c", help="Filter by customer"),
    book_id: Optional[str] = typer.Option(None, "--book", "-b", help="Filter by book"),
) -> None:
    """List rentals."""
    db = get_db()
    returned = {
        RentalState.ALL: None,
        RentalState.UNFINISHED: False,
        RentalState.FINISHED: True,
    }[state]

    rentals = RentalManager(db).list_rentals(
        returned=returned,
        customer_id=customer_id,
        book_id=book_id,
    )

    if not rentals:
        console.print("[dim]No rentals found[/dim]")
        return

    books = BookManager(db)
    customers = CustomerManager(db)

    table = Table(title="Rentals", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", max_width=8)
    table.add_column("Book", style="cyan", max_width=30)
    table.add_column("Customer")
    table.add_column("Rented")
    table.add_column("Returned")

    for rental in rentals:
        book = books.get_book(rental.book_id)
        customer = customers.get_customer(rental.customer_id)
        returned_str = (
            format_time(rental.returned_at) if rental.returned else "[green]out[/green]"
        )
        table.add_row(
            rental.id[:8],
            book.title if book else "Unknown",
            customer.full_name if customer else "Unknown",
            format_time(rental.rented_at),
            returned_str,
        )

    console.print(table)
