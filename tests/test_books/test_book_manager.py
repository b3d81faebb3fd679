"""Tests for BookManager."""

from uuid import UUID

import pytest
from pydantic import ValidationError

from libraryrentals.books import BookCreate, BookResponse
from libraryrentals.errors import BookAlreadyRented, BookNotFound


class TestBookCreate:
    """Tests for book input validation."""

    def test_isbn_separators_removed(self):
        data = BookCreate(title="Dune", author="Frank Herbert", isbn="978-0-441-17271-9")
        assert data.isbn == "9780441172719"

    def test_isbn10_with_check_x(self):
        data = BookCreate(title="Test", author="Author", isbn="043942089x")
        assert data.isbn == "043942089X"

    def test_short_isbn_allowed(self):
        data = BookCreate(title="Adam", author="Z Nikiszowca", isbn="123456789")
        assert data.isbn == "123456789"

    @pytest.mark.parametrize("isbn", ["12345", "12345678901234", "97804411727AB"])
    def test_invalid_isbn(self, isbn):
        with pytest.raises(ValidationError):
            BookCreate(title="Test", author="Author", isbn=isbn)

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            BookCreate(title="", author="Author")


class TestBookRegistry:
    """Tests for registering and finding books."""

    def test_add_book(self, books):
        book = books.add_book(BookCreate(title="Adam", author="Z Nikiszowca", isbn="123456789"))

        assert UUID(book.id)
        assert book.title == "Adam"
        assert book.author == "Z Nikiszowca"
        assert book.isbn == "123456789"
        assert book.rented is False

    def test_add_book_already_out(self, books):
        book = books.add_book(BookCreate(title="Adam", author="Z Nikiszowca", rented=True))
        assert book.rented is True

    def test_get_book(self, books, sample_book):
        book = books.get_book(sample_book.id)

        assert book is not None
        assert book.id == sample_book.id

    def test_get_book_not_found(self, books):
        assert books.get_book("non-existent-id") is None

    def test_find_by_title_author(self, books, sample_books, sample_book):
        found = books.find_by_title_author("Adam z Nikiszowca", "Adam Dominik")

        assert {b.id for b in found} == {b.id for b in sample_books}

    def test_find_by_title_author_none(self, books, sample_book):
        assert books.find_by_title_author("Adam", "Somebody Else") == []

    def test_list_books_available_only(self, books, rentals, sample_customer, sample_books, now):
        rentals.create_rental(sample_customer.id, sample_books[0].id, now=now)

        available = books.list_books(available_only=True)

        assert len(books.list_books()) == 4
        assert {b.id for b in available} == {b.id for b in sample_books[1:]}

    def test_book_response(self, sample_book):
        response = BookResponse.model_validate(sample_book)

        assert str(response.id) == sample_book.id
        assert response.rented is False


class TestDeleteBook:
    """Tests for removing books."""

    def test_delete_book(self, books, sample_book):
        books.delete_book(sample_book.id)
        assert books.get_book(sample_book.id) is None

    def test_delete_book_removes_finished_rentals(self, books, rentals, sample_customer, sample_book, now):
        rental = rentals.create_rental(sample_customer.id, sample_book.id, now=now)
        rentals.end_rental(rental.id, now=now)

        books.delete_book(sample_book.id)

        assert rentals.get_rentals_of_book(sample_book.id) == []

    def test_delete_rented_book(self, books, rentals, sample_customer, sample_book, now):
        rentals.create_rental(sample_customer.id, sample_book.id, now=now)

        with pytest.raises(BookAlreadyRented):
            books.delete_book(sample_book.id)

        assert books.get_book(sample_book.id) is not None

    def test_delete_book_not_found(self, books):
        with pytest.raises(BookNotFound):
            books.delete_book("non-existent-id")
