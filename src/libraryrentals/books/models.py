"""SQLAlchemy model for the book registry.

Tables:
- books: One row per physical copy
"""

from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, generate_uuid, utcnow_iso


class Book(Base):
    """Book model - one lendable copy.

    ``rented`` is only flipped by the rental manager; it is true exactly
    while an unreturned rental references this copy.
    """

    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    author: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    isbn: Mapped[Optional[str]] = mapped_column(String(13), index=True)
    rented: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[str] = mapped_column(String(32), default=utcnow_iso)

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', rented={self.rented})>"
