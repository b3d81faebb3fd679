"""Error taxonomy for the lending workflow.

Every failed operation raises exactly one of these. Each class carries a
stable ``code`` so presentation layers can map it to their own response
codes without matching on message text.
"""

from typing import Optional

# ============================================================================
#                               Base error
# ============================================================================


class LibraryError(Exception):
    """Base class for lending workflow errors."""

    code = "library_error"
    message = "Library operation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


# ============================================================================
#                           Lookup errors
# ============================================================================


class CustomerNotFound(LibraryError):
    """Raised when a referenced customer does not exist."""

    code = "customer_not_found"
    message = "Customer not found"


class BookNotFound(LibraryError):
    """Raised when a referenced book, by id or description, does not exist."""

    code = "book_not_found"
    message = "Book not found"


class RentalNotFound(LibraryError):
    """Raised when a referenced rental does not exist."""

    code = "rental_not_found"
    message = "Rental not found"


# ============================================================================
#                           Rule violations
# ============================================================================


class BookAlreadyRented(LibraryError):
    """Raised when the selected book already has an active rental."""

    code = "book_already_rented"
    message = "Book is already rented"


class RentalAlreadyFinished(LibraryError):
    """Raised when ending a rental that was already returned."""

    code = "rental_already_finished"
    message = "Rental already finished"


class ExceededMaximumNumberOfRentals(LibraryError):
    """Raised when a customer already holds the maximum of active rentals."""

    code = "exceeded_maximum_number_of_rentals"

    def __init__(self, limit: int = 3) -> None:
        super().__init__(f"Customer reached the maximum number of rentals({limit})")
        self.limit = limit


class CustomerAlreadyExists(LibraryError):
    """Raised when registering a customer whose name is already taken."""

    code = "customer_already_exists"
    message = "Customer already exists"


class CustomerHasActiveRentals(LibraryError):
    """Raised when deleting a customer who still holds unreturned books."""

    code = "customer_has_active_rentals"
    message = "Customer has active rentals"
