"""SQLAlchemy model for rentals.

Tables:
- rentals: One borrowing event, open or closed

A rental references its book and customer by ID only; the registries own
those rows. Closed rentals stay in the table and form the rental history.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, generate_uuid


class Rental(Base):
    """Rental model - tracks one book lent to one customer."""

    __tablename__ = "rentals"
    __table_args__ = (
        CheckConstraint(
            "(NOT returned AND time_of_return IS NULL)"
            " OR (returned AND time_of_return IS NOT NULL)",
            name="ck_rentals_return_state",
        ),
        # At most one open rental per book
        Index(
            "uq_rentals_open_book",
            "book_id",
            unique=True,
            sqlite_where=text("NOT returned"),
            postgresql_where=text("NOT returned"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    customer_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    returned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    # ISO-8601 timestamps
    time_of_rental: Mapped[str] = mapped_column(String(32), nullable=False)
    time_of_return: Mapped[Optional[str]] = mapped_column(String(32))

    def __repr__(self) -> str:
        return (
            f"<Rental(id={self.id}, book_id={self.book_id}, "
            f"customer_id={self.customer_id}, returned={self.returned})>"
        )

    @property
    def is_active(self) -> bool:
        return not self.returned

    @property
    def rented_at(self) -> datetime:
        return datetime.fromisoformat(self.time_of_rental)

    @property
    def returned_at(self) -> Optional[datetime]:
        if not self.time_of_return:
            return None
        return datetime.fromisoformat(self.time_of_return)
