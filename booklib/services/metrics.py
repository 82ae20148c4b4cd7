"""
Prometheus Metrics

Application metrics exposed at GET /metrics in the Prometheus text format.

Metric families:
- HTTP: request counts and latency per route template
- Cache: operation outcomes (hit, miss, ok, error)
- Domain: auth attempts and book writes
- Errors: every 5xx, labelled by exception type and component
- Gauges: live book and user counts, refreshed on each scrape

Label cardinality is kept bounded: the endpoint label is the route
template ("/books/{book_id}"), never the raw path.
"""

import logging

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booklib.models import Book, User

logger = logging.getLogger(__name__)

__all__ = [
    "CONTENT_TYPE_LATEST",
    "AUTH_ATTEMPTS",
    "BOOK_OPERATIONS",
    "BOOKS_TOTAL",
    "CACHE_OPERATIONS",
    "ERRORS",
    "HTTP_REQUEST_DURATION",
    "HTTP_REQUESTS",
    "USERS_TOTAL",
    "record_cache_operation",
    "record_error",
    "render_metrics",
]


# =============================================================================
# HTTP
# =============================================================================
HTTP_REQUESTS = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint", "status_code"],
)

# =============================================================================
# Cache
# =============================================================================
CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Total number of cache operations",
    ["operation", "status"],
)

# =============================================================================
# Domain
# =============================================================================
AUTH_ATTEMPTS = Counter(
    "auth_attempts_total",
    "Total number of authentication attempts",
    ["type", "status"],
)

BOOK_OPERATIONS = Counter(
    "book_operations_total",
    "Total number of book write operations",
    ["operation", "status"],
)

ERRORS = Counter(
    "errors_total",
    "Total number of server errors",
    ["type", "component"],
)

BOOKS_TOTAL = Gauge("books_total", "Number of non-deleted books")
USERS_TOTAL = Gauge("users_total", "Number of non-deleted users")


def record_cache_operation(operation: str, status: str) -> None:
    CACHE_OPERATIONS.labels(operation=operation, status=status).inc()


def record_error(error_type: str, component: str) -> None:
    ERRORS.labels(type=error_type, component=component).inc()


def refresh_entity_gauges(db: Session) -> None:
    """
    Set the book and user gauges from the database.

    A failing count leaves the previous gauge values in place; the
    scrape itself still succeeds.
    """
    try:
        books = db.scalar(
            select(func.count()).select_from(Book).where(Book.deleted_at.is_(None))
        )
        users = db.scalar(
            select(func.count()).select_from(User).where(User.deleted_at.is_(None))
        )
    except SQLAlchemyError as e:
        logger.warning(f"Could not refresh entity gauges: {e}")
        record_error(type(e).__name__, "database")
        return

    BOOKS_TOTAL.set(books or 0)
    USERS_TOTAL.set(users or 0)


def render_metrics(db: Session) -> bytes:
    """Refresh gauges and serialize the default registry."""
    refresh_entity_gauges(db)
    return generate_latest()
