"""Rental lifecycle module.

Provides functionality for:
- Checking a customer's eligibility to rent
- Renting a copy by ID or by title and author
- Ending rentals in place and cancelling erroneous ones
- Querying open and closed rentals
"""

from .manager import MAX_ALLOWED_RENTALS, RentalManager
from .models import Rental
from .schemas import RentalResponse, RentalState

__all__ = [
    "MAX_ALLOWED_RENTALS",
    "RentalManager",
    "Rental",
    "RentalResponse",
    "RentalState",
]
