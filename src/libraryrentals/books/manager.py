"""Book registry operations."""

import logging
from typing import Optional

from sqlalchemy import delete, select

from ..db.sqlite import Database, get_db
from ..errors import BookAlreadyRented, BookNotFound
from ..rentals.models import Rental
from .models import Book
from .schemas import BookCreate

logger = logging.getLogger(__name__)


class BookManager:
    """Manages the book registry."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize book manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def add_book(self, data: BookCreate) -> Book:
        """Register a new book copy.

        Args:
            data: Book creation data

        Returns:
            Created book
        """
        with self.db.get_session() as session:
            book = Book(
                title=data.title,
                author=data.author,
                isbn=data.isbn,
                rented=data.rented,
            )
            session.add(book)
            session.flush()
            session.expunge(book)

        logger.info("Registered book %s (%s by %s)", book.id, book.title, book.author)
        return book

    def get_book(self, book_id: str) -> Optional[Book]:
        """Get a book by ID.

        Args:
            book_id: Book ID

        Returns:
            Book or None
        """
        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if book:
                session.expunge(book)
            return book

    def find_by_title_author(self, title: str, author: str) -> list[Book]:
        """Get every copy matching a title and author.

        Copies are returned oldest first, so callers picking the first
        available copy always pick the same one.

        Args:
            title: Exact title
            author: Exact author

        Returns:
            List of matching copies
        """
        with self.db.get_session() as session:
            stmt = (
                select(Book)
                .where(Book.title == title, Book.author == author)
                .order_by(Book.created_at, Book.id)
            )
            books = session.execute(stmt).scalars().all()
            for b in books:
                session.expunge(b)
            return list(books)

    def list_books(self, available_only: bool = False) -> list[Book]:
        """List all books.

        Args:
            available_only: Only return copies that are not rented

        Returns:
            List of books
        """
        with self.db.get_session() as session:
            stmt = select(Book).order_by(Book.title, Book.created_at)
            if available_only:
                stmt = stmt.where(Book.rented.is_(False))

            books = session.execute(stmt).scalars().all()
            for b in books:
                session.expunge(b)
            return list(books)

    def delete_book(self, book_id: str) -> None:
        """Remove a book copy together with its finished rentals.

        Args:
            book_id: Book ID

        Raises:
            BookNotFound: No book has this ID
            BookAlreadyRented: The copy is currently out
        """
        with self.db.get_session() as session:
            book = session.execute(
                select(Book).where(Book.id == book_id).with_for_update()
            ).scalar_one_or_none()

            if not book:
                raise BookNotFound()
            if book.rented:
                raise BookAlreadyRented()

            session.execute(delete(Rental).where(Rental.book_id == book_id))
            session.delete(book)

        logger.info("Deleted book %s", book_id)
