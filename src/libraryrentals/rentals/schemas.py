"""Pydantic schemas for rentals."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class RentalState(str, Enum):
    """Filter for rental listings."""

    ALL = "all"
    UNFINISHED = "unfinished"
    FINISHED = "finished"


class RentalResponse(BaseModel):
    """Schema for rental responses."""

    id: UUID
    customer_id: UUID
    book_id: UUID
    returned: bool
    rented_at: datetime
    returned_at: Optional[datetime]

    # Related data (populated by caller)
    book_title: Optional[str] = None
    customer_name: Optional[str] = None

    model_config = {"from_attributes": True}
