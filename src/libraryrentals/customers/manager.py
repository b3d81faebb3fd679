"""Customer registry operations."""

import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from ..db.sqlite import Database, get_db
from ..errors import CustomerAlreadyExists, CustomerHasActiveRentals, CustomerNotFound
from ..rentals.models import Rental
from .models import Customer, Fine
from .schemas import CustomerCreate, FineCreate

logger = logging.getLogger(__name__)


class CustomerManager:
    """Manages library customers and their fines."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize customer manager.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    # -------------------------------------------------------------------------
    # Customer Management
    # -------------------------------------------------------------------------

    def add_customer(self, data: CustomerCreate) -> Customer:
        """Register a new customer.

        Args:
            data: Customer creation data

        Returns:
            Created customer

        Raises:
            CustomerAlreadyExists: A customer with the same name exists
        """
        with self.db.get_session() as session:
            existing = session.execute(
                select(Customer).where(
                    Customer.first_name == data.first_name,
                    Customer.last_name == data.last_name,
                )
            ).scalar_one_or_none()
            if existing:
                raise CustomerAlreadyExists()

            customer = Customer(
                first_name=data.first_name,
                last_name=data.last_name,
                fines=[],
            )
            session.add(customer)
            try:
                session.flush()
            except IntegrityError as e:
                raise CustomerAlreadyExists() from e
            session.expunge(customer)

        logger.info("Registered customer %s (%s)", customer.id, customer.full_name)
        return customer

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        """Get a customer by ID.

        Args:
            customer_id: Customer ID

        Returns:
            Customer or None
        """
        with self.db.get_session() as session:
            customer = session.get(Customer, customer_id)
            if customer:
                session.expunge(customer)
            return customer

    def exists(self, customer_id: str) -> bool:
        """Check whether a customer ID is registered."""
        with self.db.get_session() as session:
            count = session.execute(
                select(func.count()).select_from(Customer).where(Customer.id == customer_id)
            ).scalar()
            return bool(count)

    def get_customer_by_name(self, first_name: str, last_name: str) -> Optional[Customer]:
        """Get a customer by exact name.

        Args:
            first_name: First name
            last_name: Last name

        Returns:
            Customer or None
        """
        with self.db.get_session() as session:
            stmt = select(Customer).where(
                Customer.first_name == first_name,
                Customer.last_name == last_name,
            )
            customer = session.execute(stmt).scalar_one_or_none()
            if customer:
                session.expunge(customer)
            return customer

    def list_customers(self) -> list[Customer]:
        """List all customers ordered by last name."""
        with self.db.get_session() as session:
            stmt = select(Customer).order_by(Customer.last_name, Customer.first_name)
            customers = session.execute(stmt).scalars().all()
            for c in customers:
                session.expunge(c)
            return list(customers)

    def delete_customer(self, customer_id: str) -> None:
        """Delete a customer along with their fines and finished rentals.

        Args:
            customer_id: Customer ID

        Raises:
            CustomerNotFound: No customer has this ID
            CustomerHasActiveRentals: The customer still holds a book
        """
        with self.db.get_session() as session:
            customer = session.execute(
                select(Customer).where(Customer.id == customer_id).with_for_update()
            ).scalar_one_or_none()

            if not customer:
                raise CustomerNotFound()

            active = session.execute(
                select(func.count()).select_from(Rental).where(
                    Rental.customer_id == customer_id,
                    Rental.returned.is_(False),
                )
            ).scalar() or 0
            if active > 0:
                raise CustomerHasActiveRentals()

            session.execute(delete(Rental).where(Rental.customer_id == customer_id))
            session.delete(customer)

        logger.info("Deleted customer %s", customer_id)

    # -------------------------------------------------------------------------
    # Fines
    # -------------------------------------------------------------------------

    def add_fine(self, customer_id: str, data: FineCreate) -> Fine:
        """Charge a fine to a customer.

        Args:
            customer_id: Customer ID
            data: Fine data

        Returns:
            Created fine

        Raises:
            CustomerNotFound: No customer has this ID
        """
        with self.db.get_session() as session:
            if session.get(Customer, customer_id) is None:
                raise CustomerNotFound()

            fine = Fine(
                customer_id=customer_id,
                amount_cents=int(data.amount * 100),
                reason=data.reason,
            )
            session.add(fine)
            session.flush()
            session.expunge(fine)

        logger.info("Charged fine %s to customer %s", fine.amount, customer_id)
        return fine

    def list_fines(self, customer_id: str) -> list[Fine]:
        """List a customer's fines, oldest first.

        Raises:
            CustomerNotFound: No customer has this ID
        """
        customer = self.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFound()
        return list(customer.fines)
