"""
Tests for the Alembic migration scripts, rendered offline for SQLite.
"""

import io
from pathlib import Path

from alembic import command
from alembic.config import Config

ALEMBIC_DIR = Path(__file__).resolve().parent.parent / "alembic"


def render_upgrade_sql() -> str:
    buffer = io.StringIO()
    config = Config(output_buffer=buffer)
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    command.upgrade(config, "head", sql=True)
    return buffer.getvalue()


class TestInitialMigration:
    def test_creates_tables(self):
        sql = render_upgrade_sql()

        assert "CREATE TABLE users" in sql
        assert "CREATE TABLE books" in sql

    def test_unique_indexes_cover_live_rows_only(self):
        sql = render_upgrade_sql()

        assert "CREATE UNIQUE INDEX ix_books_isbn_live ON books (isbn) WHERE deleted_at IS NULL" in sql
        assert "CREATE UNIQUE INDEX ix_users_username_live ON users (username) WHERE deleted_at IS NULL" in sql

    def test_timestamp_defaults_portable(self):
        sql = render_upgrade_sql()

        assert "CURRENT_TIMESTAMP" in sql
        assert "now()" not in sql
