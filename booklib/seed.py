"""
Sample Data

Accounts and books loaded into an empty database, either by
scripts/seed_data.py or on startup when DB_AUTO_CREATE is set.

Default accounts:
- admin / admin123 (role admin)
- user / user123 (role user)
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from booklib.models import Book, User, UserRole
from booklib.schemas.book import normalize_isbn
from booklib.services.security import hash_password

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {"username": "admin", "email": "admin@booklibrary.com", "password": "admin123", "role": UserRole.ADMIN},
    {"username": "user", "email": "user@booklibrary.com", "password": "user123", "role": UserRole.USER},
]

SAMPLE_BOOKS = [
    {
        "title": "1984",
        "author": "George Orwell",
        "year": 1949,
        "genre": "Dystopian Fiction",
        "isbn": "978-0-452-28423-4",
    },
    {
        "title": "Brave New World",
        "author": "Aldous Huxley",
        "year": 1932,
        "genre": "Science Fiction",
        "isbn": "978-0-06-085052-4",
    },
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "year": 1960,
        "genre": "Fiction",
        "isbn": "978-0-06-112008-4",
    },
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "year": 1925,
        "genre": "Classic Literature",
        "isbn": "978-0-7432-7356-5",
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "year": 1813,
        "genre": "Romance",
        "isbn": "978-0-14-143951-8",
    },
]


def is_empty(db: Session) -> bool:
    return not db.scalar(select(func.count()).select_from(User))


def seed_database(db: Session) -> dict:
    """
    Insert the sample users and books.

    Existing usernames and ISBNs are skipped, so running it twice is
    harmless.

    Returns:
        Counts of inserted rows: {"users": n, "books": n}
    """
    users_created = 0
    for data in SAMPLE_USERS:
        exists = db.scalar(select(User.id).where(User.username == data["username"]))
        if exists:
            continue
        db.add(
            User(
                username=data["username"],
                email=data["email"],
                hashed_password=hash_password(data["password"]),
                role=data["role"].value,
            )
        )
        users_created += 1

    books_created = 0
    for data in SAMPLE_BOOKS:
        isbn = normalize_isbn(data["isbn"])
        exists = db.scalar(
            select(Book.id).where(Book.isbn == isbn, Book.deleted_at.is_(None))
        )
        if exists:
            continue
        db.add(Book(**{**data, "isbn": isbn}))
        books_created += 1

    db.commit()
    logger.info(f"Seeded {users_created} users and {books_created} books")
    return {"users": users_created, "books": books_created}
