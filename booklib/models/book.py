"""
Book Model

The central model of the library: one row per catalogued book.

Soft Delete
===========
Rows are never removed. `delete` stamps `deleted_at` and every read
filters on `deleted_at IS NULL`. Because a deleted book keeps its ISBN,
ISBN uniqueness is enforced with a PARTIAL unique index that only covers
live rows, so a deleted book's ISBN can be reused.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from booklib.database import Base


class Book(Base):
    """
    Book model representing a catalogued book.

    Table: books

    Indexes:
    - Primary key on id (automatic)
    - ix_books_isbn_live: Unique ISBN among non-deleted books
    - title, author: Plain indexes for search lookups

    Example:
        book = Book(
            title="1984",
            author="George Orwell",
            year=1949,
            genre="Dystopian Fiction",
            isbn="9780452284234",
        )
    """

    __tablename__ = "books"
    __table_args__ = (
        Index(
            "ix_books_isbn_live",
            "isbn",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Core Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        index=True,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Author name as displayed"
    )

    year: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Publication year"
    )

    genre: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Free-text genre label"
    )

    # Stored normalized: digits only (plus a trailing X for ISBN-10)
    isbn: Mapped[str | None] = mapped_column(
        String(13),
        nullable=True,
        comment="ISBN-10 or ISBN-13, unique among live books"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="When the record was created"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="When the record was last updated"
    )

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
        comment="Soft-delete marker; NULL for live rows"
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', isbn='{self.isbn}')"
