"""
Book Library Application Package

Backend for the book library: user accounts, book CRUD with search,
a Redis cache in front of the database, logging and metrics.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy engine, session factory and declarative base
- exceptions.py: Domain error hierarchy mapped to HTTP status codes
- main.py: FastAPI application factory, middleware and exception handlers
- dependencies.py: Dependency injection functions (db, cache, services, auth)
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (books, auth, caching, metrics, rate limiting)
- utils/: Helper functions (logging setup)
"""

__version__ = "1.0.0"
