"""
Alembic environment for the Book Library schema.

The database URL comes from DATABASE_URL through booklib.config, never
from alembic.ini, so migrations hit the same database as the service.

SQLite cannot ALTER most column properties in place; on SQLite both
modes run in batch mode, which rebuilds the table instead.

    alembic upgrade head
    alembic upgrade head --sql > migration.sql   # offline
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context
from booklib.config import get_settings
from booklib.database import Base
from booklib.models import Book, User  # noqa: F401 - registers users and books

settings = get_settings()

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure_options() -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": settings.is_sqlite,
    }


def run_migrations_offline() -> None:
    """Emit SQL for the configured dialect without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options())

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
