"""
Book Pydantic Schemas

Handles:
- Required field validation for new books (title, author, year)
- ISBN normalization and format checks
- Partial updates that distinguish "absent" from "explicitly null"
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Fields a partial update may not clear
REQUIRED_BOOK_FIELDS = ("title", "author", "year")


def normalize_isbn(v: str | None) -> str | None:
    """
    Validate ISBN format and strip separators.

    Accepts:
    - ISBN-10: 10 characters, 9 digits followed by a digit or X
    - ISBN-13: 13 digits

    Hyphens and spaces are removed for storage, so
    "978-0-452-28423-4" and "9780452284234" are the same ISBN.
    """
    if v is None:
        return v

    cleaned = re.sub(r"[-\s]", "", v).upper()
    if not cleaned:
        return None

    if len(cleaned) == 10:
        if not re.match(r"^\d{9}[\dX]$", cleaned):
            raise ValueError(
                "Invalid ISBN-10 format. Must be 10 characters: "
                "9 digits followed by a digit or 'X'"
            )
    elif len(cleaned) == 13:
        if not cleaned.isdigit():
            raise ValueError("Invalid ISBN-13 format. Must be exactly 13 digits")
    else:
        raise ValueError("ISBN must be either 10 or 13 characters (excluding hyphens)")

    return cleaned


def _strip_required_text(v: str | None, field_name: str) -> str | None:
    if v is None:
        return v
    if not v.strip():
        raise ValueError(f"{field_name} cannot be empty or whitespace")
    return v.strip()


class BookBase(BaseModel):
    """Fields shared by create requests and responses."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Book title",
        examples=["1984", "Pride and Prejudice"],
    )

    author: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Author name",
        examples=["George Orwell"],
    )

    year: int = Field(
        ...,
        ge=1,
        le=9999,
        description="Publication year",
        examples=[1949],
    )

    genre: str | None = Field(
        default=None,
        max_length=100,
        description="Genre label",
        examples=["Dystopian Fiction"],
    )

    isbn: str | None = Field(
        default=None,
        max_length=20,
        description="ISBN-10 or ISBN-13",
        examples=["978-0-452-28423-4"],
    )


class BookCreate(BookBase):
    """
    Schema for creating a new book.

    Example request body:
    {
        "title": "1984",
        "author": "George Orwell",
        "year": 1949,
        "genre": "Dystopian Fiction",
        "isbn": "978-0-452-28423-4"
    }
    """

    @field_validator("title", "author")
    @classmethod
    def text_must_not_be_empty(cls, v: str, info) -> str:
        """Validate and normalize title and author."""
        return _strip_required_text(v, info.field_name.capitalize())

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        return normalize_isbn(v)

    @field_validator("genre")
    @classmethod
    def normalize_genre(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class BookUpdate(BaseModel):
    """
    Schema for updating an existing book.

    Only fields present in the request body are applied; the router reads
    them with model_dump(exclude_unset=True). An explicit null clears
    genre or isbn, while null for title, author or year is rejected.
    """

    title: str | None = Field(default=None, min_length=1, max_length=500)
    author: str | None = Field(default=None, min_length=1, max_length=255)
    year: int | None = Field(default=None, ge=1, le=9999)
    genre: str | None = Field(default=None, max_length=100)
    isbn: str | None = Field(default=None, max_length=20)

    @field_validator("title", "author")
    @classmethod
    def text_must_not_be_empty(cls, v: str | None, info) -> str | None:
        return _strip_required_text(v, info.field_name.capitalize())

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        return normalize_isbn(v)

    @field_validator("genre")
    @classmethod
    def normalize_genre(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None

    @model_validator(mode="after")
    def required_fields_not_cleared(self) -> "BookUpdate":
        for field_name in REQUIRED_BOOK_FIELDS:
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self

    def changes(self) -> dict:
        """Return only the fields the client supplied."""
        return self.model_dump(exclude_unset=True)


class BookResponse(BookBase):
    """
    Schema for book responses.

    This is also the shape stored in the cache, so a cached snapshot
    and a fresh database read serialize identically.
    """

    id: int = Field(..., description="Unique identifier")
    created_at: datetime = Field(..., description="When the book was created")
    updated_at: datetime = Field(..., description="When the book was last updated")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "1984",
                "author": "George Orwell",
                "year": 1949,
                "genre": "Dystopian Fiction",
                "isbn": "9780452284234",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
            }
        },
    )
