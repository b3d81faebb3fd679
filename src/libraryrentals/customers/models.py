"""SQLAlchemy models for the customer registry.

Tables:
- customers: Library members
- fines: Fines accrued by a customer
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.models import Base, generate_uuid, utcnow_iso


class Customer(Base):
    """Customer model - a library member who can rent books."""

    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("first_name", "last_name", name="uq_customers_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    first_name: Mapped[str] = mapped_column(String(200), nullable=False)
    last_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    created_at: Mapped[str] = mapped_column(String(32), default=utcnow_iso)

    # Loaded eagerly so detached customers still report their fines
    fines: Mapped[list["Fine"]] = relationship(
        "Fine",
        back_populates="customer",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Fine.created_at",
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name='{self.full_name}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def total_fines(self) -> Decimal:
        """Sum of all accrued fines."""
        return sum((fine.amount for fine in self.fines), Decimal("0.00"))


class Fine(Base):
    """Fine model - one charge against a customer."""

    __tablename__ = "fines"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    customer_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Stored in cents; SQLite has no native decimal type
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[str] = mapped_column(String(32), default=utcnow_iso)

    customer: Mapped["Customer"] = relationship("Customer", back_populates="fines")

    def __repr__(self) -> str:
        return f"<Fine(id={self.id}, customer_id={self.customer_id}, amount={self.amount})>"

    @property
    def amount(self) -> Decimal:
        return (Decimal(self.amount_cents) / 100).quantize(Decimal("0.01"))
