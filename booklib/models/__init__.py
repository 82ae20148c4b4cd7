"""
SQLAlchemy Models Package

Models are SQLAlchemy ORM classes that map to database tables.

- User: Registered accounts with a role (user or admin)
- Book: Catalogued books, soft-deleted via deleted_at

Import all models here to:
1. Make them available as: from booklib.models import Book, User
2. Ensure Alembic discovers them for migrations
"""

from booklib.models.book import Book
from booklib.models.user import User, UserRole

__all__ = [
    "Book",
    "User",
    "UserRole",
]
