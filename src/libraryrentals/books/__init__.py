"""Book registry module.

Provides functionality for:
- Registering book copies
- Looking up copies by ID or by title and author
- Listing available copies
"""

from .manager import BookManager
from .models import Book
from .schemas import BookCreate, BookResponse

__all__ = [
    "BookManager",
    "Book",
    "BookCreate",
    "BookResponse",
]
