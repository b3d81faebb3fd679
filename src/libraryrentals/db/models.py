"""Declarative base shared by every ORM model.

Tables are declared next to the component that owns them:
- books: ``libraryrentals.books.models``
- customers, fines: ``libraryrentals.customers.models``
- rentals: ``libraryrentals.rentals.models``
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


def utcnow_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()
