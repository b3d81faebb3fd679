"""Pydantic schemas for the book registry."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class BookBase(BaseModel):
    """Base book fields."""

    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=500)
    isbn: Optional[str] = None

    @field_validator("isbn")
    @classmethod
    def normalize_isbn(cls, v):
        """Strip separators and check ISBN-10/13 shape."""
        if v is None:
            return v
        cleaned = v.replace("-", "").replace(" ", "").upper()
        if not cleaned:
            return None
        if len(cleaned) not in (9, 10, 13):
            raise ValueError("isbn must have 9, 10 or 13 characters")
        if not cleaned[:-1].isdigit() or not (cleaned[-1].isdigit() or cleaned[-1] == "X"):
            raise ValueError("isbn must contain only digits (and a trailing X)")
        return cleaned


class BookCreate(BookBase):
    """Schema for registering a book copy."""

    rented: bool = False


class BookResponse(BookBase):
    """Schema for book responses."""

    id: UUID
    rented: bool
    created_at: datetime

    model_config = {"from_attributes": True}
