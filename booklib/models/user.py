"""
User Model

Represents a registered account. Accounts authenticate with a username
and password; the role decides access to the admin endpoints.

SQLAlchemy 2.0 Features Used:
- mapped_column(): New way to define columns with full type support
- Mapped[]: Type hint wrapper for SQLAlchemy columns
- Index(..., postgresql_where=...): Partial unique indexes
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from booklib.database import Base


class UserRole(str, Enum):
    """
    Roles supported by the system.

    - USER: Can read and manage books
    - ADMIN: Can additionally list users and manage the cache
    """
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    User model representing registered users in the system.

    Table: users

    Indexes:
    - Primary key on id (automatic)
    - ix_users_username_live: Unique username among non-deleted users
    - ix_users_email_live: Unique email among non-deleted users

    Example:
        user = User(
            username="johndoe",
            email="john@example.com",
            hashed_password=hash_password("secret123"),
            role=UserRole.USER.value,
        )
    """

    __tablename__ = "users"
    __table_args__ = (
        Index(
            "ix_users_username_live",
            "username",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index(
            "ix_users_email_live",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Authentication Fields
    # -------------------------------------------------------------------------
    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Lowercased login name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User's email address"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    role: Mapped[str] = mapped_column(
        String(20),
        default=UserRole.USER.value,
        nullable=False,
        comment="Access role (user, admin)"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="When the user registered"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="When the account was last updated"
    )

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Soft-delete marker; NULL for live accounts"
    )

    @property
    def is_admin(self) -> bool:
        """Check if the user holds the admin role."""
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"User(id={self.id}, username='{self.username}', role='{self.role}')"
