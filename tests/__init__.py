"""
Test Suite for the Book Library API

Test Organization:
- conftest.py: Shared fixtures (test database, fake Redis, client, sample data)
- test_books.py: /books endpoints and their cache keys
- test_book_service.py: BookService cache-aside and failure semantics
- test_cache.py: CacheService and Redis client construction
- test_auth.py: Registration, login and bearer token checks
- test_admin.py: Admin-only endpoints
- test_health_metrics.py: /health, /metrics and error mapping
- test_url_cleaner.py: URL cleaner
- test_config.py: Settings validation, logging setup and limiter storage
- test_migrations.py: Alembic scripts rendered as SQLite DDL

Running Tests:
    pip install -e ".[test]"
    pytest
    pytest tests/test_books.py
"""
