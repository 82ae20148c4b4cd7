"""
Book Service

Business logic for the book catalogue, implementing cache-aside reads and
write-invalidate writes.

Read path (list, get):
    1. Try the cache
    2. On a miss, query non-deleted rows from the database
    3. Store the serialized result with a TTL

Write path (create, update, delete):
    1. Persist and commit
    2. Delete the affected cache keys (books:all, and book:<id> when the
       book already existed)

Search results (books:search:<term>) are NOT invalidated by writes; they
expire with CACHE_TTL_LIST. Cache failures never fail a request.
"""

import logging
from datetime import UTC, datetime

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from booklib.config import Settings
from booklib.exceptions import BookNotFoundError, DependencyError, ValidationError
from booklib.models import Book
from booklib.schemas.book import BookCreate, BookResponse, BookUpdate
from booklib.services.cache import (
    BOOKS_ALL_KEY,
    CacheService,
    book_key,
    books_search_key,
)
from booklib.services.metrics import BOOK_OPERATIONS

logger = logging.getLogger(__name__)


class BookService:
    """
    CRUD operations on books.

    Args:
        db: Request-scoped SQLAlchemy session
        cache: Shared cache service (may be running with caching disabled)
        settings: Application settings (cache TTLs)
    """

    def __init__(self, db: Session, cache: CacheService, settings: Settings) -> None:
        self.db = db
        self.cache = cache
        self.settings = settings

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def list(self, search: str | None = None) -> list[BookResponse]:
        """
        List non-deleted books ordered by id, optionally filtered.

        Args:
            search: Case-insensitive substring matched against title,
                author and genre. Blank is treated as no filter.
        """
        term = search.strip() if search else ""
        key = books_search_key(term) if term else BOOKS_ALL_KEY

        cached = self._cached(key, lambda data: [BookResponse.model_validate(item) for item in data])
        if cached is not None:
            return cached

        stmt = select(Book).where(Book.deleted_at.is_(None))
        if term:
            stmt = stmt.where(
                or_(
                    Book.title.icontains(term, autoescape=True),
                    Book.author.icontains(term, autoescape=True),
                    Book.genre.icontains(term, autoescape=True),
                )
            )
        stmt = stmt.order_by(Book.id)

        try:
            books = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise self._database_error("list", e, f"search={term!r}")

        result = [BookResponse.model_validate(book) for book in books]
        self.cache.set(
            key,
            [item.model_dump(mode="json") for item in result],
            ttl=self.settings.cache_ttl_list,
        )
        return result

    def get(self, book_id: int) -> BookResponse:
        """
        Get a single non-deleted book.

        Raises:
            BookNotFoundError: If no live book has this id
        """
        key = book_key(book_id)
        cached = self._cached(key, BookResponse.model_validate)
        if cached is not None:
            return cached

        book = self._load(book_id, "get")
        result = BookResponse.model_validate(book)
        self.cache.set(key, result.model_dump(mode="json"), ttl=self.settings.cache_ttl_book)
        return result

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    def create(self, draft: BookCreate) -> BookResponse:
        """
        Create a book and invalidate the full list.

        Raises:
            ValidationError: Missing required field or duplicate ISBN
        """
        self._require_fields(title=draft.title, author=draft.author, year=draft.year)
        if draft.isbn:
            self._ensure_isbn_available(draft.isbn)

        book = Book(**draft.model_dump())
        self.db.add(book)
        self._commit("create", book)
        self.db.refresh(book)

        self.cache.delete(BOOKS_ALL_KEY)
        BOOK_OPERATIONS.labels(operation="create", status="success").inc()
        logger.info(f"Created book {book.id}: {book.title}")
        return BookResponse.model_validate(book)

    def update(self, book_id: int, changes: BookUpdate) -> BookResponse:
        """
        Apply the supplied fields to a book.

        Fields absent from the request are left unchanged.

        Raises:
            BookNotFoundError: If no live book has this id
            ValidationError: Duplicate ISBN
        """
        book = self._load(book_id, "update")
        update_data = changes.changes()

        new_isbn = update_data.get("isbn")
        if new_isbn and new_isbn != book.isbn:
            self._ensure_isbn_available(new_isbn, exclude_id=book_id)

        for field, value in update_data.items():
            setattr(book, field, value)

        self._commit("update", book)
        self.db.refresh(book)

        self.cache.delete(BOOKS_ALL_KEY, book_key(book_id))
        BOOK_OPERATIONS.labels(operation="update", status="success").inc()
        logger.info(f"Updated book {book_id}: fields {sorted(update_data)}")
        return BookResponse.model_validate(book)

    def delete(self, book_id: int) -> None:
        """
        Soft-delete a book.

        Raises:
            BookNotFoundError: If no live book has this id
        """
        book = self._load(book_id, "delete")
        book.deleted_at = datetime.now(UTC)
        self._commit("delete", book)

        self.cache.delete(BOOKS_ALL_KEY, book_key(book_id))
        BOOK_OPERATIONS.labels(operation="delete", status="success").inc()
        logger.info(f"Deleted book {book_id}")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _cached(self, key: str, parse):
        """
        Read and parse a cache entry.

        An entry that no longer fits the response schema is dropped and
        treated as a miss.
        """
        cached = self.cache.get(key)
        if cached is None:
            return None
        try:
            return parse(cached)
        except (SchemaValidationError, TypeError) as e:
            logger.warning(f"Discarding malformed cache entry {key}: {e}")
            self.cache.delete(key)
            return None

    def _load(self, book_id: int, operation: str) -> Book:
        stmt = select(Book).where(Book.id == book_id, Book.deleted_at.is_(None))
        try:
            book = self.db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._database_error(operation, e, f"book_id={book_id}")

        if book is None:
            logger.debug(f"Book {book_id} not found ({operation})")
            raise BookNotFoundError(book_id)
        return book

    @staticmethod
    def _require_fields(**fields) -> None:
        for name, value in fields.items():
            if value is None or value == "" or value == 0:
                raise ValidationError(f"{name} is required")

    def _ensure_isbn_available(self, isbn: str, exclude_id: int | None = None) -> None:
        stmt = select(Book.id).where(Book.isbn == isbn, Book.deleted_at.is_(None))
        if exclude_id is not None:
            stmt = stmt.where(Book.id != exclude_id)
        try:
            existing = self.db.execute(stmt).first()
        except SQLAlchemyError as e:
            raise self._database_error("isbn_check", e, f"isbn={isbn}")

        if existing is not None:
            raise ValidationError(f"A book with ISBN {isbn} already exists")

    def _commit(self, operation: str, book: Book) -> None:
        """
        Commit the session, translating failures.

        A unique violation that slipped past the ISBN pre-check (two
        concurrent writers) becomes a ValidationError.
        """
        book_id, isbn = book.id, book.isbn
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            BOOK_OPERATIONS.labels(operation=operation, status="error").inc()
            logger.info(f"Book {operation} rejected by constraint: {e.orig}")
            raise ValidationError(f"A book with ISBN {isbn} already exists") from e
        except SQLAlchemyError as e:
            BOOK_OPERATIONS.labels(operation=operation, status="error").inc()
            raise self._database_error(operation, e, f"book_id={book_id}")

    def _database_error(self, operation: str, error: SQLAlchemyError, context: str) -> DependencyError:
        self.db.rollback()
        logger.exception(f"Database error during book {operation} ({context}): {error}")
        return DependencyError("database")
