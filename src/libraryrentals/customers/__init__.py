"""Customer registry module.

Provides functionality for:
- Registering and removing customers
- Looking customers up by ID or name
- Tracking accrued fines
"""

from .manager import CustomerManager
from .models import Customer, Fine
from .schemas import CustomerCreate, CustomerResponse, FineCreate, FineResponse

__all__ = [
    "CustomerManager",
    "Customer",
    "Fine",
    "CustomerCreate",
    "CustomerResponse",
    "FineCreate",
    "FineResponse",
]
