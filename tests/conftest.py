"""
pytest Fixtures for Book Library Tests

This file contains shared fixtures used across all test files.

FIXTURE SCOPES:
- session scope for the engine (expensive to create)
- function scope for sessions, the fake Redis and the client
  (isolation between tests)

Redis is replaced by a dict-backed MagicMock, wrapped in the real
CacheService, so the cache-aside behaviour is exercised without a server.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CACHE_ENABLED"] = "false"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"

import fnmatch
from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from booklib.config import Settings, get_settings
from booklib.database import Base, get_db
from booklib.dependencies import get_cache
from booklib.main import app
from booklib.models import Book, User, UserRole
from booklib.services.auth import AuthService
from booklib.services.books import BookService
from booklib.services.cache import CacheService
from booklib.services.security import hash_password

# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the connection alive for the entire session.
    Without it, SQLite in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN and mishandles SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(connection):
        connection.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables. Session
    commits and rollbacks act on a savepoint inside it, so a service
    rolling back after a constraint violation keeps fixture data.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


# =============================================================================
# CACHE FIXTURES
# =============================================================================

@pytest.fixture
def fake_redis() -> MagicMock:
    """
    Dict-backed stand-in for a redis.Redis client.

    Supports the commands CacheService uses. TTLs are recorded in
    `fake_redis.ttls` but never expire.
    """
    store: dict[str, str] = {}
    ttls: dict[str, int] = {}

    def setex(key, ttl, value):
        store[key] = value
        ttls[key] = ttl
        return True

    def delete(*keys):
        removed = 0
        for key in keys:
            if key in store:
                del store[key]
                ttls.pop(key, None)
                removed += 1
        return removed

    def scan_iter(match="*", count=None):
        return iter([key for key in list(store) if fnmatch.fnmatchcase(key, match)])

    redis = MagicMock()
    redis.store = store
    redis.ttls = ttls
    redis.get = MagicMock(side_effect=store.get)
    redis.setex = MagicMock(side_effect=setex)
    redis.delete = MagicMock(side_effect=delete)
    redis.scan_iter = MagicMock(side_effect=scan_iter)
    redis.dbsize = MagicMock(side_effect=lambda: len(store))
    redis.info = MagicMock(return_value={"keyspace_hits": 0, "keyspace_misses": 0})
    redis.ping = MagicMock(return_value=True)
    return redis


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def cache(fake_redis: MagicMock, settings: Settings) -> CacheService:
    """CacheService wired to the fake Redis."""
    return CacheService(fake_redis, settings.cache_ttl_list)


@pytest.fixture
def book_service(db_session: Session, cache: CacheService, settings: Settings) -> BookService:
    return BookService(db_session, cache, settings)


@pytest.fixture
def auth_service(db_session: Session, settings: Settings) -> AuthService:
    return AuthService(db_session, settings)


# =============================================================================
# CLIENT FIXTURE
# =============================================================================

@pytest.fixture(scope="function")
def client(db_session: Session, cache: CacheService) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database and fake cache.

    We override the get_db and get_cache dependencies.
    """

    def override_get_db():
        """Provide test database session instead of real one."""
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_book(db_session: Session) -> Book:
    """Create a sample book for testing."""
    book = Book(
        title="1984",
        author="George Orwell",
        year=1949,
        genre="Dystopian Fiction",
        isbn="9780452284234",
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def multiple_books(db_session: Session) -> list[Book]:
    """Create several books for list and search tests."""
    books = [
        Book(title="Go Programming", author="Alan Donovan", year=2015, genre="Technology"),
        Book(title="Brave New World", author="Aldous Huxley", year=1932, genre="Science Fiction"),
        Book(title="Pride and Prejudice", author="Jane Austen", year=1813, genre="Romance"),
    ]
    db_session.add_all(books)
    db_session.commit()
    for book in books:
        db_session.refresh(book)
    return books


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """Create a regular user for testing."""
    user = User(
        username="testuser",
        email="testuser@example.com",
        hashed_password=hash_password("secret123"),
        role=UserRole.USER.value,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session: Session) -> User:
    """Create an admin user for testing admin endpoints."""
    user = User(
        username="admin",
        email="admin@example.com",
        hashed_password=hash_password("admin123"),
        role=UserRole.ADMIN.value,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(auth_service: AuthService, sample_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_service.issue_token(sample_user)}"}


@pytest.fixture
def admin_headers(auth_service: AuthService, admin_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_service.issue_token(admin_user)}"}
