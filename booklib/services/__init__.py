"""
Services Package

This package contains business logic services that are:
- Separate from HTTP handling (routers)
- Reusable across different parts of the application
- Easier to test in isolation

Current services:
- books.py: Book CRUD with cache-aside reads and write invalidation
- auth.py: Registration, login and token issuing
- cache.py: Redis cache service and connection pool
- metrics.py: Prometheus counters, histograms and gauges
- rate_limiter.py: Rate limiting with slowapi
- security.py: Password hashing and JWT utilities
- url_cleaner.py: URL canonicalization and redirect normalization
"""
