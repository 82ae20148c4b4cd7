"""
Admin Router

Operational endpoints restricted to users with the admin role:
- List accounts
- Inspect and flush the book cache
"""

import logging

from fastapi import APIRouter

from booklib.dependencies import AdminUser, AuthServiceDep, Cache
from booklib.schemas.user import UserResponse

logger = logging.getLogger(__name__)

# Patterns covering every key the book service writes
BOOK_CACHE_PATTERNS = ("book:*", "books:*")

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Admin privileges required"},
    },
)


@router.get("/users", response_model=list[UserResponse], summary="List users")
def list_users(admin: AdminUser, auth: AuthServiceDep) -> list[UserResponse]:
    return [UserResponse.model_validate(user) for user in auth.list_users()]


@router.get("/cache/stats", summary="Cache statistics")
def cache_stats(admin: AdminUser, cache: Cache) -> dict:
    return cache.stats()


@router.delete("/cache", summary="Flush the book cache")
def flush_cache(admin: AdminUser, cache: Cache) -> dict:
    """Delete every cached book, list and search result."""
    deleted = sum(cache.delete_pattern(pattern) for pattern in BOOK_CACHE_PATTERNS)
    logger.info(f"Book cache flushed by {admin.username}: {deleted} keys")
    return {"deleted": deleted}
