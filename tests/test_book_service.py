"""
Tests for BookService

Exercises the service directly, without HTTP, to pin down the
cache-aside and failure semantics.
"""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from booklib.exceptions import BookNotFoundError, DependencyError, ValidationError
from booklib.schemas.book import BookCreate, BookUpdate
from booklib.services.books import BookService
from booklib.services.cache import CacheService


def make_draft(**overrides) -> BookCreate:
    data = {"title": "1984", "author": "George Orwell", "year": 1949}
    data.update(overrides)
    return BookCreate(**data)


class TestCreateAndGet:
    """Round trip through create and get."""

    def test_get_returns_created_fields(self, book_service):
        created = book_service.create(make_draft(genre="Dystopian Fiction"))

        fetched = book_service.get(created.id)

        assert fetched.title == "1984"
        assert fetched.author == "George Orwell"
        assert fetched.year == 1949
        assert fetched.genre == "Dystopian Fiction"

    def test_get_hit_skips_database(self, book_service, db_session, sample_book):
        book_service.get(sample_book.id)

        # Change the row behind the cache's back
        sample_book.title = "Changed"
        db_session.commit()

        assert book_service.get(sample_book.id).title == "1984"

    def test_get_missing_raises(self, book_service):
        with pytest.raises(BookNotFoundError) as exc_info:
            book_service.get(424242)

        assert exc_info.value.book_id == 424242

    def test_create_requires_fields(self, book_service):
        draft = BookCreate.model_construct(title="1984", author="Orwell", year=0)

        with pytest.raises(ValidationError):
            book_service.create(draft)

    def test_create_duplicate_isbn(self, book_service, sample_book):
        with pytest.raises(ValidationError):
            book_service.create(make_draft(title="Other", isbn="9780452284234"))

    def test_unique_violation_at_commit(self, book_service, monkeypatch, sample_book):
        """A writer that raced past the ISBN check is rejected by the index."""
        monkeypatch.setattr(book_service, "_ensure_isbn_available", lambda *args, **kwargs: None)

        with pytest.raises(ValidationError, match="9780452284234"):
            book_service.create(make_draft(title="Other", isbn="9780452284234"))

        assert book_service.get(sample_book.id).title == "1984"
        assert [book.title for book in book_service.list()] == ["1984"]


class TestUpdate:
    """Partial update semantics."""

    def test_absent_fields_unchanged(self, book_service, sample_book):
        updated = book_service.update(sample_book.id, BookUpdate(year=1950))

        assert updated.year == 1950
        assert updated.title == "1984"
        assert updated.isbn == "9780452284234"

    def test_explicit_null_clears_isbn(self, book_service, sample_book):
        updated = book_service.update(sample_book.id, BookUpdate(isbn=None))

        assert updated.isbn is None

    def test_update_missing_raises(self, book_service):
        with pytest.raises(BookNotFoundError):
            book_service.update(424242, BookUpdate(title="Ghost"))

    def test_update_deleted_raises(self, book_service, sample_book):
        book_service.delete(sample_book.id)

        with pytest.raises(BookNotFoundError):
            book_service.update(sample_book.id, BookUpdate(title="Ghost"))


class TestListStaleness:
    """Which writes invalidate which keys."""

    def test_list_after_create_is_fresh(self, book_service, sample_book):
        assert len(book_service.list()) == 1

        book_service.create(make_draft(title="Animal Farm", year=1945))

        assert len(book_service.list()) == 2

    def test_search_results_not_invalidated(self, book_service, sample_book):
        assert len(book_service.list("orwell")) == 1

        book_service.create(make_draft(title="Animal Farm", year=1945))

        # Served from the search cache until its TTL expires
        assert len(book_service.list("orwell")) == 1

    def test_search_term_is_stripped(self, book_service, fake_redis, sample_book):
        book_service.list("  orwell  ")

        assert "books:search:orwell" in fake_redis.store


class TestCacheFailures:
    """A failing cache never fails the operation."""

    @pytest.fixture
    def broken_redis(self) -> MagicMock:
        redis = MagicMock()
        redis.get.side_effect = RedisConnectionError("down")
        redis.setex.side_effect = RedisConnectionError("down")
        redis.delete.side_effect = RedisConnectionError("down")
        return redis

    @pytest.fixture
    def service(self, db_session, broken_redis, settings) -> BookService:
        return BookService(db_session, CacheService(broken_redis), settings)

    def test_get_falls_back_to_database(self, service, sample_book):
        assert service.get(sample_book.id).title == "1984"

    def test_writes_succeed(self, service, sample_book):
        service.update(sample_book.id, BookUpdate(year=1950))
        service.delete(sample_book.id)

        with pytest.raises(BookNotFoundError):
            service.get(sample_book.id)

    def test_disabled_cache(self, db_session, settings, sample_book):
        service = BookService(db_session, CacheService(None), settings)

        assert [book.title for book in service.list()] == ["1984"]


class TestDatabaseFailures:
    """Database errors surface as DependencyError."""

    @pytest.fixture
    def failing_session(self) -> MagicMock:
        session = MagicMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
        return session

    def test_list_raises_dependency_error(self, failing_session, cache, settings):
        service = BookService(failing_session, cache, settings)

        with pytest.raises(DependencyError) as exc_info:
            service.list()

        assert exc_info.value.component == "database"
        failing_session.rollback.assert_called_once()

    def test_get_raises_dependency_error(self, failing_session, cache, settings):
        service = BookService(failing_session, cache, settings)

        with pytest.raises(DependencyError):
            service.get(1)

    def test_cache_hit_does_not_touch_database(self, failing_session, cache, fake_redis, settings):
        fake_redis.store["book:1"] = (
            '{"id": 1, "title": "1984", "author": "George Orwell", "year": 1949, '
            '"genre": null, "isbn": null, "created_at": "2024-01-15T10:30:00", '
            '"updated_at": "2024-01-15T10:30:00"}'
        )
        service = BookService(failing_session, cache, settings)

        assert service.get(1).title == "1984"
        failing_session.execute.assert_not_called()
