"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

WHY Dependency Injection?
=========================
1. Reusability: Write once, use in many routes
2. Testing: Tests swap the database and cache via app.dependency_overrides
3. Separation of Concerns: Routes stay thin, services hold the logic
4. No globals: the cache client lives on app.state, not in a module

Dependency Graph:
    get_db ─┬─> get_book_service <─ get_cache <─ app.state.cache
            └─> get_auth_service ─> get_current_user ─> require_admin
"""

import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from booklib.config import Settings, get_settings
from booklib.database import get_db
from booklib.exceptions import AuthorizationError
from booklib.models import User
from booklib.services.auth import AuthService
from booklib.services.books import BookService
from booklib.services.cache import CacheService
from booklib.services.security import verify_token_type

logger = logging.getLogger(__name__)

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def get_books(db: Session = Depends(get_db)):
#
# You can write:
#   def get_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


# =============================================================================
# Cache
# =============================================================================
def get_cache(request: Request) -> CacheService:
    """
    Return the cache service created in the application lifespan.

    When caching is disabled or Redis was unreachable at startup the
    service has no client and every lookup is a miss.
    """
    return request.app.state.cache


Cache = Annotated[CacheService, Depends(get_cache)]


# =============================================================================
# Services
# =============================================================================
def get_book_service(db: DbSession, cache: Cache, settings: AppSettings) -> BookService:
    return BookService(db, cache, settings)


def get_auth_service(db: DbSession, settings: AppSettings) -> AuthService:
    return AuthService(db, settings)


BookServiceDep = Annotated[BookService, Depends(get_book_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


# =============================================================================
# JWT Authentication (Bearer tokens)
# =============================================================================
def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    auth: AuthServiceDep,
    settings: AppSettings,
    authorization: str | None = Header(None),
) -> User:
    """
    Extract and validate the current user from the Authorization header.

    This dependency:
    1. Requires an "Authorization: Bearer <token>" header
    2. Decodes the JWT and checks it is an unexpired access token
    3. Looks up the (non-deleted) user named by the "sub" claim

    Raises:
        HTTPException: 401 with a message describing which step failed
    """
    if not authorization:
        raise _unauthorized("Missing authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Invalid authorization header format")

    invalid_token = _unauthorized("Invalid or expired token")

    payload = verify_token_type(token.strip(), settings.secret_key)
    if payload is None:
        raise invalid_token

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise invalid_token

    user = auth.get_user(user_id)
    if user is None:
        logger.warning(f"Token for unknown or deleted user {user_id}")
        raise invalid_token

    return user


def require_admin(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """
    Verify the current user holds the admin role.

    Raises:
        AuthorizationError: 403 if the user is not an admin
    """
    if not current_user.is_admin:
        logger.warning(f"Admin access denied for {current_user.username}")
        raise AuthorizationError()
    return current_user


# Type aliases for cleaner route signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
