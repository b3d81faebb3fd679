"""Rental lifecycle operations.

Decides whether a rental may be created, keeps the book's ``rented`` flag
in step with the rental, and closes rentals in place on return.

Each mutating operation runs its checks and writes in a single session,
so a failed precondition leaves every row untouched. Concurrent callers
are serialised by the session's transaction: ``BEGIN IMMEDIATE`` on SQLite,
row locks on the book, customer and rental elsewhere. A compare-and-set on
``books.rented`` and the unique index on open rentals per book back this up.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..books.models import Book
from ..customers.models import Customer
from ..db.sqlite import Database, get_db
from ..errors import (
    BookAlreadyRented,
    BookNotFound,
    CustomerNotFound,
    ExceededMaximumNumberOfRentals,
    RentalAlreadyFinished,
    RentalNotFound,
)
from .models import Rental

logger = logging.getLogger(__name__)

MAX_ALLOWED_RENTALS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RentalManager:
    """Manages the rental lifecycle."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize rental manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    # -------------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------------

    def count_active_rentals(self, customer_id: str, session: Optional[Session] = None) -> int:
        """Count a customer's unreturned rentals."""

        def _count(s: Session) -> int:
            stmt = select(func.count()).select_from(Rental).where(
                Rental.customer_id == customer_id,
                Rental.returned.is_(False),
            )
            return s.execute(stmt).scalar() or 0

        if session:
            return _count(session)
        else:
            with self.db.get_session() as s:
                return _count(s)

    def check_eligibility(self, customer_id: str, session: Optional[Session] = None) -> None:
        """Check that a customer may take out another book.

        Args:
            customer_id: ID of an existing customer
            session: Session to read through, for use inside a larger transaction

        Raises:
            ExceededMaximumNumberOfRentals: Customer already holds the maximum
        """
        if self.count_active_rentals(customer_id, session) >= MAX_ALLOWED_RENTALS:
            raise ExceededMaximumNumberOfRentals(MAX_ALLOWED_RENTALS)

    # -------------------------------------------------------------------------
    # Renting
    # -------------------------------------------------------------------------

    def create_rental(
        self,
        customer_id: str,
        book_id: str,
        now: Optional[datetime] = None,
    ) -> Rental:
        """Rent a specific book copy to a customer.

        Preconditions are checked in this order and the first failure wins:
        customer exists, book exists, book is not rented, customer is below
        the rental limit.

        Args:
            customer_id: Customer ID
            book_id: Book ID
            now: Time of rental (default: current UTC time)

        Returns:
            Created rental

        Raises:
            CustomerNotFound, BookNotFound, BookAlreadyRented,
            ExceededMaximumNumberOfRentals
        """
        with self.db.get_session() as session:
            customer = self._lock_customer(session, customer_id)
            book = session.execute(
                select(Book).where(Book.id == book_id).with_for_update()
            ).scalar_one_or_none()
            if not book:
                raise BookNotFound()

            rental = self._open_rental(session, customer, book, now or _utcnow())

        return rental

    def rent_by_title(
        self,
        customer_id: str,
        title: str,
        author: str,
        now: Optional[datetime] = None,
    ) -> Rental:
        """Rent the first available copy of a title.

        Copies are considered oldest first. When copies exist but all are
        out, the error is ``BookAlreadyRented``.

        Args:
            customer_id: Customer ID
            title: Exact book title
            author: Exact book author
            now: Time of rental (default: current UTC time)

        Returns:
            Created rental
        """
        with self.db.get_session() as session:
            customer = self._lock_customer(session, customer_id)
            copies = session.execute(
                select(Book)
                .where(Book.title == title, Book.author == author)
                .order_by(Book.created_at, Book.id)
                .with_for_update()
            ).scalars().all()
            if not copies:
                raise BookNotFound()

            book = next((c for c in copies if not c.rented), copies[0])
            rental = self._open_rental(session, customer, book, now or _utcnow())

        return rental

    def _lock_customer(self, session: Session, customer_id: str) -> Customer:
        customer = session.execute(
            select(Customer).where(Customer.id == customer_id).with_for_update()
        ).scalar_one_or_none()
        if not customer:
            raise CustomerNotFound()
        return customer

    def _open_rental(
        self,
        session: Session,
        customer: Customer,
        book: Book,
        now: datetime,
    ) -> Rental:
        if book.rented:
            logger.warning("Rejected rental of book %s: already rented", book.id)
            raise BookAlreadyRented()

        try:
            self.check_eligibility(customer.id, session)
        except ExceededMaximumNumberOfRentals:
            logger.warning("Rejected rental for customer %s: limit reached", customer.id)
            raise

        # Compare-and-set; another transaction may have claimed the copy
        claimed = session.execute(
            update(Book)
            .where(Book.id == book.id, Book.rented.is_(False))
            .values(rented=True)
            .execution_options(synchronize_session=False)
        ).rowcount
        if claimed != 1:
            raise BookAlreadyRented()

        rental = Rental(
            customer_id=customer.id,
            book_id=book.id,
            returned=False,
            time_of_rental=now.isoformat(),
            time_of_return=None,
        )
        session.add(rental)
        try:
            session.flush()
        except IntegrityError as e:
            raise BookAlreadyRented() from e
        session.expunge(rental)

        logger.info("Rented book %s to customer %s as %s", book.id, customer.id, rental.id)
        return rental

    # -------------------------------------------------------------------------
    # Returning and cancelling
    # -------------------------------------------------------------------------

    def end_rental(self, rental_id: str, now: Optional[datetime] = None) -> Rental:
        """Mark a rental as returned and free its book.

        The closed rental stays queryable.

        Args:
            rental_id: Rental ID
            now: Time of return (default: current UTC time)

        Returns:
            Updated rental

        Raises:
            RentalNotFound: No rental has this ID
            RentalAlreadyFinished: The rental was already returned
        """
        with self.db.get_session() as session:
            rental = session.execute(
                select(Rental).where(Rental.id == rental_id).with_for_update()
            ).scalar_one_or_none()

            if not rental:
                raise RentalNotFound()
            if rental.returned:
                raise RentalAlreadyFinished()

            rental.returned = True
            rental.time_of_return = (now or _utcnow()).isoformat()
            session.execute(
                update(Book)
                .where(Book.id == rental.book_id)
                .values(rented=False)
                .execution_options(synchronize_session=False)
            )
            session.flush()
            session.expunge(rental)

        logger.info("Ended rental %s; book %s is available", rental.id, rental.book_id)
        return rental

    def delete_rental(self, rental_id: str) -> None:
        """Remove a rental record outright.

        This is an administrative correction: the book's ``rented`` flag
        is left as it is.

        Args:
            rental_id: Rental ID

        Raises:
            RentalNotFound: No rental has this ID
        """
        with self.db.get_session() as session:
            rental = session.get(Rental, rental_id)
            if not rental:
                raise RentalNotFound()
            session.delete(rental)

        logger.info("Deleted rental %s", rental_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find_rental(self, rental_id: str) -> Rental:
        """Get a rental by ID.

        Raises:
            RentalNotFound: No rental has this ID
        """
        with self.db.get_session() as session:
            rental = session.get(Rental, rental_id)
            if not rental:
                raise RentalNotFound()
            session.expunge(rental)
            return rental

    def exists(self, rental_id: str) -> bool:
        """Check whether a rental ID is stored."""
        with self.db.get_session() as session:
            count = session.execute(
                select(func.count()).select_from(Rental).where(Rental.id == rental_id)
            ).scalar()
            return bool(count)

    def list_rentals(
        self,
        returned: Optional[bool] = None,
        customer_id: Optional[str] = None,
        book_id: Optional[str] = None,
    ) -> list[Rental]:
        """List rentals with optional filters.

        Args:
            returned: True for finished, False for unfinished, None for both
            customer_id: Filter by customer
            book_id: Filter by book

        Returns:
            List of rentals, oldest first
        """
        with self.db.get_session() as session:
            stmt = select(Rental)

            if returned is not None:
                stmt = stmt.where(Rental.returned.is_(returned))
            if customer_id:
                stmt = stmt.where(Rental.customer_id == customer_id)
            if book_id:
                stmt = stmt.where(Rental.book_id == book_id)

            stmt = stmt.order_by(Rental.time_of_rental, Rental.id)

            rentals = session.execute(stmt).scalars().all()
            for rental in rentals:
                session.expunge(rental)
            return list(rentals)

    def get_all_rentals(self) -> list[Rental]:
        return self.list_rentals()

    def get_unfinished_rentals(self) -> list[Rental]:
        return self.list_rentals(returned=False)

    def get_finished_rentals(self) -> list[Rental]:
        return self.list_rentals(returned=True)

    def get_rentals_of_customer(self, customer_id: str) -> list[Rental]:
        """Get every rental, open or closed, of a customer."""
        return self.list_rentals(customer_id=customer_id)

    def get_rentals_of_book(self, book_id: str) -> list[Rental]:
        """Get every rental, open or closed, of a book copy."""
        return self.list_rentals(book_id=book_id)
