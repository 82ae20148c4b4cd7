#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample accounts and books for development.

USAGE:
    # From the project root with the package installed
    python scripts/seed_data.py
    python scripts/seed_data.py --clear

This script:
1. Creates tables if they don't exist
2. Optionally soft-deletes existing books (--clear)
3. Creates the admin and user accounts and five sample books
"""

import argparse
import sys
from datetime import UTC, datetime
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import update
from sqlalchemy.orm import Session

from booklib.database import SessionLocal, create_tables
from booklib.models import Book
from booklib.seed import seed_database


def clear_books(db: Session) -> None:
    """Soft-delete every live book."""
    print("Clearing existing books...")
    db.execute(
        update(Book).where(Book.deleted_at.is_(None)).values(deleted_at=datetime.now(UTC))
    )
    db.commit()
    print("Books cleared.")


def main(clear_existing: bool = False) -> None:
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()

    db = SessionLocal()
    try:
        if clear_existing:
            clear_books(db)

        created = seed_database(db)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nSummary:")
        print(f"  - Users: {created['users']}")
        print(f"  - Books: {created['books']}")
        print("\nDefault accounts: admin/admin123 (admin), user/user123")
    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the book library database")
    parser.add_argument("--clear", action="store_true", help="Soft-delete existing books first")
    args = parser.parse_args()
    main(clear_existing=args.clear)
