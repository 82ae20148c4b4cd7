"""
Authentication Service

User registration, credential checks and access token issuing.

Security Features:
=================
1. Passwords are hashed with bcrypt before storage
2. Unknown usernames and wrong passwords produce the same error, so the
   login endpoint does not reveal which usernames exist
3. Plain text passwords are never logged
"""

import logging
from datetime import timedelta

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from booklib.config import Settings
from booklib.exceptions import DependencyError, InvalidCredentialsError, UserExistsError
from booklib.models import User, UserRole
from booklib.schemas.user import UserCreate
from booklib.services.metrics import AUTH_ATTEMPTS
from booklib.services.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """
    Account operations backed by the users table.

    Args:
        db: Request-scoped SQLAlchemy session
        settings: Application settings (signing key, token lifetime)
    """

    def __init__(self, db: Session, settings: Settings) -> None:
        self.db = db
        self.settings = settings

    @property
    def token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.settings.access_token_expire_minutes)

    def register(self, data: UserCreate, role: UserRole = UserRole.USER) -> User:
        """
        Create a new account.

        Raises:
            UserExistsError: A live user already has this username or email
        """
        stmt = select(User.id).where(
            or_(User.username == data.username, User.email == data.email),
            User.deleted_at.is_(None),
        )
        try:
            existing = self.db.execute(stmt).first()
        except SQLAlchemyError as e:
            raise self._database_error("register", e)

        if existing is not None:
            AUTH_ATTEMPTS.labels(type="register", status="failure").inc()
            logger.warning(f"Registration rejected: user exists ({data.username})")
            raise UserExistsError()

        user = User(
            username=data.username,
            email=data.email,
            hashed_password=hash_password(data.password),
            role=role.value,
        )
        self.db.add(user)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            AUTH_ATTEMPTS.labels(type="register", status="failure").inc()
            raise UserExistsError() from e
        except SQLAlchemyError as e:
            raise self._database_error("register", e)

        self.db.refresh(user)
        AUTH_ATTEMPTS.labels(type="register", status="success").inc()
        logger.info(f"New user registered: {user.username} (ID: {user.id})")
        return user

    def authenticate(self, username: str, password: str) -> User:
        """
        Check a username/password pair.

        Raises:
            InvalidCredentialsError: Unknown user or wrong password
        """
        stmt = select(User).where(
            User.username == username.lower(),
            User.deleted_at.is_(None),
        )
        try:
            user = self.db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._database_error("login", e)

        if user is None or not verify_password(password, user.hashed_password):
            AUTH_ATTEMPTS.labels(type="login", status="failure").inc()
            logger.warning(f"Login failed: invalid credentials for {username}")
            raise InvalidCredentialsError()

        AUTH_ATTEMPTS.labels(type="login", status="success").inc()
        logger.info(f"User logged in: {user.username}")
        return user

    def issue_token(self, user: User) -> str:
        """Create a signed access token for the user."""
        return create_access_token(
            {"sub": str(user.id), "username": user.username, "role": user.role},
            self.settings.secret_key,
            self.token_lifetime,
        )

    def get_user(self, user_id: int) -> User | None:
        """Load a live user by id, for token resolution."""
        stmt = select(User).where(User.id == user_id, User.deleted_at.is_(None))
        try:
            return self.db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._database_error("get_user", e)

    def list_users(self) -> list[User]:
        stmt = select(User).where(User.deleted_at.is_(None)).order_by(User.id)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise self._database_error("list_users", e)

    def _database_error(self, operation: str, error: SQLAlchemyError) -> DependencyError:
        self.db.rollback()
        logger.exception(f"Database error during {operation}: {error}")
        return DependencyError("database")
