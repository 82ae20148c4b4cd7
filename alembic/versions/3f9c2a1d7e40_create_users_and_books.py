"""Create users and books tables

Revision ID: 3f9c2a1d7e40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a1d7e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LIVE_ROWS = sa.text('deleted_at IS NULL')


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False, comment='Lowercased login name'),
        sa.Column('email', sa.String(length=255), nullable=False, comment="User's email address"),
        sa.Column('hashed_password', sa.String(length=255), nullable=False, comment='Bcrypt hashed password'),
        sa.Column('role', sa.String(length=20), nullable=False, comment='Access role (user, admin)'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, comment='When the user registered'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, comment='When the account was last updated'),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True, comment='Soft-delete marker; NULL for live accounts'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_username_live', 'users', ['username'], unique=True,
                    postgresql_where=LIVE_ROWS, sqlite_where=LIVE_ROWS)
    op.create_index('ix_users_email_live', 'users', ['email'], unique=True,
                    postgresql_where=LIVE_ROWS, sqlite_where=LIVE_ROWS)

    op.create_table('books',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False, comment='Book title'),
        sa.Column('author', sa.String(length=255), nullable=False, comment='Author name as displayed'),
        sa.Column('year', sa.Integer(), nullable=False, comment='Publication year'),
        sa.Column('genre', sa.String(length=100), nullable=True, comment='Free-text genre label'),
        sa.Column('isbn', sa.String(length=13), nullable=True, comment='ISBN-10 or ISBN-13, unique among live books'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, comment='When the record was created'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, comment='When the record was last updated'),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True, comment='Soft-delete marker; NULL for live rows'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_books_title'), 'books', ['title'], unique=False)
    op.create_index(op.f('ix_books_author'), 'books', ['author'], unique=False)
    op.create_index(op.f('ix_books_deleted_at'), 'books', ['deleted_at'], unique=False)
    op.create_index('ix_books_isbn_live', 'books', ['isbn'], unique=True,
                    postgresql_where=LIVE_ROWS, sqlite_where=LIVE_ROWS)


def downgrade() -> None:
    op.drop_index('ix_books_isbn_live', table_name='books')
    op.drop_index(op.f('ix_books_deleted_at'), table_name='books')
    op.drop_index(op.f('ix_books_author'), table_name='books')
    op.drop_index(op.f('ix_books_title'), table_name='books')
    op.drop_table('books')
    op.drop_index('ix_users_email_live', table_name='users')
    op.drop_index('ix_users_username_live', table_name='users')
    op.drop_table('users')
