"""
Rate Limiting Service

Implements per-client rate limiting using slowapi.

Key Features:
=============
1. IP-based fixed-window limits, proxy headers honoured
2. Redis storage when caching is enabled, in-memory otherwise
3. Falls back to in-memory counting if Redis goes away
4. JSON 429 responses with Retry-After

Rate Limit Tiers:
=================
- Reads (RATE_LIMIT_DEFAULT): 100 requests/minute
- Book writes (RATE_LIMIT_WRITE): 30 requests/minute
- Register/login (RATE_LIMIT_AUTH): 10 requests/minute
"""

import logging

from fastapi import Request, status
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from booklib.config import Settings, get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def get_client_ip(request: Request) -> str:
    """
    Get client IP address for rate limiting and request logs.

    Checks X-Forwarded-For (first hop) and X-Real-IP before falling back
    to the socket peer address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def limiter_storage_uri(settings: Settings) -> str:
    """Shared Redis counters only make sense when Redis is in use."""
    if settings.rate_limit_enabled and settings.cache_enabled:
        return settings.redis_url
    return "memory://"


def limiter_storage_options(settings: Settings) -> dict:
    """Connection options for Redis storage, matching the cache client."""
    if limiter_storage_uri(settings) == "memory://" or not settings.redis_password:
        return {}
    return {"password": settings.redis_password}


def create_limiter(settings: Settings) -> Limiter:
    """
    Create and configure the rate limiter.

    Returns:
        Configured Limiter instance
    """
    limiter = Limiter(
        key_func=get_client_ip,
        default_limits=[settings.rate_limit_default],
        storage_uri=limiter_storage_uri(settings),
        storage_options=limiter_storage_options(settings),
        strategy="fixed-window",
        enabled=settings.rate_limit_enabled,
        in_memory_fallback_enabled=True,
    )

    logger.info(
        f"Rate limiter initialized - enabled: {settings.rate_limit_enabled}, "
        f"default: {settings.rate_limit_default}"
    )

    return limiter


# Route decorators need the limiter at import time
limiter = create_limiter(settings)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.

    Returns:
        429 JSONResponse with Retry-After and the limit that was hit
    """
    limit_detail = str(exc.detail)

    response = JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": f"Too many requests: {limit_detail}"},
    )
    response.headers["Retry-After"] = "60"
    response.headers["X-RateLimit-Limit"] = limit_detail

    logger.warning(f"Rate limit exceeded for {get_client_ip(request)}: {limit_detail}")

    return response
