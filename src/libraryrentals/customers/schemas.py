"""Pydantic schemas for the customer registry."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CustomerBase(BaseModel):
    """Base customer fields."""

    first_name: str = Field(..., min_length=1, max_length=200)
    last_name: str = Field(..., min_length=1, max_length=200)


class CustomerCreate(CustomerBase):
    """Schema for registering a customer."""

    pass


class FineCreate(BaseModel):
    """Schema for charging a fine."""

    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    reason: Optional[str] = None


class FineResponse(BaseModel):
    """Schema for fine responses."""

    id: UUID
    amount: Decimal
    reason: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class CustomerResponse(CustomerBase):
    """Schema for customer responses."""

    id: UUID
    created_at: datetime
    fines: list[FineResponse] = []
    total_fines: Decimal

    model_config = {"from_attributes": True}
