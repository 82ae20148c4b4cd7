"""
Redis Caching Service

This module provides the read-through cache used in front of the database.

Features:
- Bounded, blocking connection pool to Redis
- Get/set/delete with automatic JSON serialization
- Pattern deletion via SCAN (never KEYS, which blocks the server)
- Graceful degradation: any Redis failure behaves like a miss

Cache Strategy (books):
- book:<id>            single book snapshot, CACHE_TTL_BOOK (10 min)
- books:all            full list, CACHE_TTL_LIST (5 min)
- books:search:<term>  search results, CACHE_TTL_LIST, never invalidated
- Writes delete books:all and the affected book:<id>

The CacheService instance is created once in the application lifespan and
handed to request handlers through dependency injection, so there is no
module-level client.
"""

import json
import logging
from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from booklib.config import Settings
from booklib.services.metrics import record_cache_operation

logger = logging.getLogger(__name__)


# =============================================================================
# Cache Key Generation
# =============================================================================

BOOKS_ALL_KEY = "books:all"


def make_cache_key(prefix: str, *args, **kwargs) -> str:
    """
    Generate a consistent cache key from prefix and arguments.

    Examples:
        make_cache_key("book", 1) -> "book:1"
        make_cache_key("books", "search", "orwell") -> "books:search:orwell"
        make_cache_key("users", role="admin") -> "users:role=admin"

    Args:
        prefix: Cache key prefix (e.g., "book", "books")
        *args: Positional arguments to include in key
        **kwargs: Keyword arguments to include in key (sorted for consistency)

    Returns:
        Cache key string
    """
    parts = [prefix]

    for arg in args:
        if arg is not None:
            parts.append(str(arg))

    for key in sorted(kwargs.keys()):
        value = kwargs[key]
        if value is not None:
            parts.append(f"{key}={value}")

    return ":".join(parts)


def book_key(book_id: int) -> str:
    return make_cache_key("book", book_id)


def books_search_key(term: str) -> str:
    return make_cache_key("books", "search", term)


# =============================================================================
# Redis Connection
# =============================================================================

def create_redis_client(settings: Settings) -> Optional[redis.Redis]:
    """
    Build a Redis client over a blocking connection pool.

    The pool holds at most REDIS_MAX_CONNECTIONS connections; a request
    that finds none free waits up to REDIS_POOL_TIMEOUT seconds.

    Returns:
        Connected Redis client, or None if caching is disabled or the
        server cannot be reached (the service then runs uncached)
    """
    if not settings.cache_enabled:
        logger.info("Caching disabled by configuration")
        return None

    pool_kwargs: dict[str, Any] = {
        "max_connections": settings.redis_max_connections,
        "timeout": settings.redis_pool_timeout,
        "decode_responses": True,
        "socket_connect_timeout": settings.redis_socket_timeout,
        "socket_timeout": settings.redis_socket_timeout,
    }
    if settings.redis_password:
        pool_kwargs["password"] = settings.redis_password

    try:
        pool = redis.BlockingConnectionPool.from_url(settings.redis_url, **pool_kwargs)
        client = redis.Redis(connection_pool=pool)
        client.ping()
        logger.info("Successfully connected to Redis")
        return client
    except RedisError as e:
        logger.warning(f"Failed to connect to Redis: {e}. Caching disabled.")
        return None


# =============================================================================
# Cache Service
# =============================================================================

class CacheService:
    """
    Thin JSON cache over a Redis client.

    Every method tolerates a missing client (caching disabled) and
    swallows RedisError after logging it: the cache accelerates reads but
    is never the source of truth.

    Args:
        client: Redis client, or None to run with caching disabled
        default_ttl: TTL in seconds used when set() is called without one
    """

    def __init__(self, client: Optional[redis.Redis], default_ttl: int = 300) -> None:
        self.client = client
        self.default_ttl = default_ttl

    @property
    def enabled(self) -> bool:
        return self.client is not None

    # -------------------------------------------------------------------------
    # Core Operations
    # -------------------------------------------------------------------------
    def get(self, key: str) -> Optional[Any]:
        """
        Get a value from the cache.

        Returns:
            Cached value (deserialized from JSON) or None if not found/error
        """
        if self.client is None:
            return None

        try:
            value = self.client.get(key)
        except RedisError as e:
            logger.warning(f"Cache get error for {key}: {e}")
            record_cache_operation("get", "error")
            return None

        if value is None:
            logger.debug(f"Cache MISS: {key}")
            record_cache_operation("get", "miss")
            return None

        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as e:
            logger.warning(f"Cache JSON decode error for {key}: {e}")
            record_cache_operation("get", "error")
            return None

        logger.debug(f"Cache HIT: {key}")
        record_cache_operation("get", "hit")
        return decoded

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set a value in the cache with optional TTL.

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized)
            ttl: Time-to-live in seconds (uses default_ttl if not specified)

        Returns:
            True if successfully cached, False otherwise
        """
        if self.client is None:
            return False

        if ttl is None:
            ttl = self.default_ttl

        try:
            serialized = json.dumps(value, default=str)  # default=str handles datetimes
            self.client.setex(key, ttl, serialized)
        except RedisError as e:
            logger.warning(f"Cache set error for {key}: {e}")
            record_cache_operation("set", "error")
            return False
        except (TypeError, ValueError) as e:
            logger.warning(f"Cache serialization error for {key}: {e}")
            record_cache_operation("set", "error")
            return False

        logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")
        record_cache_operation("set", "ok")
        return True

    def delete(self, *keys: str) -> bool:
        """
        Delete one or more keys from the cache.

        Returns:
            True if the delete was issued, False if caching is off or it failed
        """
        if self.client is None or not keys:
            return False

        try:
            self.client.delete(*keys)
        except RedisError as e:
            logger.warning(f"Cache delete error for {', '.join(keys)}: {e}")
            record_cache_operation("delete", "error")
            return False

        logger.debug(f"Cache DELETE: {', '.join(keys)}")
        record_cache_operation("delete", "ok")
        return True

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a pattern.

        Examples:
            cache.delete_pattern("book:*")   # Every single-book snapshot
            cache.delete_pattern("books:*")  # Lists and search results

        Returns:
            Number of keys deleted
        """
        if self.client is None:
            return 0

        try:
            keys = list(self.client.scan_iter(match=pattern, count=100))
            deleted = self.client.delete(*keys) if keys else 0
        except RedisError as e:
            logger.warning(f"Cache delete pattern error for {pattern}: {e}")
            record_cache_operation("delete_pattern", "error")
            return 0

        logger.debug(f"Cache DELETE PATTERN: {pattern} ({deleted} keys)")
        record_cache_operation("delete_pattern", "ok")
        return deleted

    # -------------------------------------------------------------------------
    # Health & Statistics
    # -------------------------------------------------------------------------
    def ping(self) -> bool:
        """True when Redis answers PING."""
        if self.client is None:
            return False
        try:
            return bool(self.client.ping())
        except RedisError:
            return False

    def stats(self) -> dict:
        """
        Get cache statistics for monitoring.

        Returns:
            Dictionary with connection status, hit/miss counters and key count
        """
        if self.client is None:
            return {"status": "disabled"}
        if not self.ping():
            return {"status": "error"}

        try:
            info = self.client.info("stats")
            return {
                "status": "connected",
                "hits": info.get("keyspace_hits", 0),
                "misses": info.get("keyspace_misses", 0),
                "keys": self.client.dbsize(),
            }
        except RedisError as e:
            logger.warning(f"Cache stats error: {e}")
            return {"status": "error"}

    def close(self) -> None:
        """Release the connection pool on shutdown."""
        if self.client is None:
            return
        try:
            self.client.close()
            self.client.connection_pool.disconnect()
        except RedisError as e:
            logger.warning(f"Error closing Redis connection: {e}")
        logger.info("Redis connection closed")
