"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() function returns configured app
   - Easier to test (can create multiple instances)

2. Lifespan Events
   - startup: connect the cache, optionally create tables and seed
   - shutdown: close the Redis pool, dispose the database engine
   - uvicorn drains in-flight requests first (SHUTDOWN_TIMEOUT)

3. Middleware Stack
   - Request logging and Prometheus metrics
   - Rate limiting (slowapi)
   - CORS

4. Exception Handlers
   - Domain errors carry their own HTTP status
   - Request validation errors become 400
   - Database and unexpected errors become 500, logged and counted
"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from booklib import __version__
from booklib.config import get_settings
from booklib.database import SessionLocal, check_database, create_tables, dispose_engine
from booklib.dependencies import Cache, DbSession
from booklib.exceptions import BookLibraryError
from booklib.routers import admin_router, auth_router, books_router, url_router
from booklib.seed import is_empty, seed_database
from booklib.services.cache import CacheService, create_redis_client
from booklib.services.metrics import (
    CONTENT_TYPE_LATEST,
    HTTP_REQUEST_DURATION,
    HTTP_REQUESTS,
    record_error,
    render_metrics,
)
from booklib.services.rate_limiter import get_client_ip, limiter, rate_limit_exceeded_handler
from booklib.utils.logging import configure_logging

# =============================================================================
# Logging Configuration
# =============================================================================
# Configure logging before creating the app
settings = get_settings()

configure_logging(settings)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Code before yield: Runs on startup
    Code after yield: Runs on shutdown
    """
    # ----- STARTUP -----
    logger.info(f"Starting {settings.app_name} v{__version__} ({settings.environment})")

    app.state.cache = CacheService(create_redis_client(settings), settings.cache_ttl_list)
    if app.state.cache.enabled:
        logger.info("Redis caching enabled")
    else:
        logger.warning("Redis unavailable or disabled - running without cache")

    if settings.db_auto_create:
        create_tables()
        with SessionLocal() as db:
            if is_empty(db):
                seed_database(db)

    yield  # Application runs here

    # ----- SHUTDOWN -----
    logger.info(f"Shutting down {settings.app_name}...")
    app.state.cache.close()
    dispose_engine()


# =============================================================================
# Error Responses
# =============================================================================
def _validation_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Book Library API

A RESTful API for managing a book library.

### Features
- **Books**: CRUD with search, cached in Redis
- **Auth**: Registration and bearer-token login
- **Admin**: User listing and cache management

### Authentication
Book writes require `Authorization: Bearer <token>` from `POST /auth/login`.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Replaced in lifespan; lets the app serve uncached without it
    app.state.cache = CacheService(None, settings.cache_ttl_list)

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Request Logging & Metrics Middleware
    # -------------------------------------------------------------------------
    @app.middleware("http")
    async def log_and_measure_requests(request: Request, call_next):
        """
        Log one line per request and record HTTP metrics.

        The endpoint label is the matched route template, so
        /books/1 and /books/2 share one series.
        """
        start = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start
            route = request.scope.get("route")
            endpoint = getattr(route, "path", "unmatched")

            if settings.metrics_enabled and endpoint != "/metrics":
                labels = {
                    "method": request.method,
                    "endpoint": endpoint,
                    "status_code": str(status_code),
                }
                HTTP_REQUESTS.labels(**labels).inc()
                HTTP_REQUEST_DURATION.labels(**labels).observe(duration)

            level = logging.WARNING if status_code >= 500 else logging.INFO
            logger.log(
                level,
                f"{request.method} {request.url.path} {status_code} "
                f"{duration * 1000:.1f}ms",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": status_code,
                    "ip": get_client_ip(request),
                    "user_agent": request.headers.get("user-agent", ""),
                    "duration_ms": round(duration * 1000, 2),
                },
            )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(BookLibraryError)
    async def domain_exception_handler(
        request: Request,
        exc: BookLibraryError,
    ) -> JSONResponse:
        """
        Map domain errors to their HTTP status.

        4xx errors are expected outcomes and are not logged here; the
        services log 5xx causes with context before raising.
        """
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
            record_error(type(exc).__name__, getattr(exc, "component", "app"))

        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = _validation_errors(exc)
        message = errors[0]["msg"] if errors else "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": f"Invalid request: {message}", "errors": errors},
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        """
        Handle SQLAlchemy errors that escaped the services.

        Logs the actual error while hiding details from users.
        """
        logger.error(f"Database error: {exc}")
        record_error(type(exc).__name__, "database")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "A database error occurred. Please try again later."},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        In production, hide internal errors from users.
        In debug mode, show more details.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)
        record_error(type(exc).__name__, "app")

        detail = str(exc) if settings.debug else "An internal error occurred."
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": detail},
        )

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    app.include_router(auth_router)
    app.include_router(books_router)
    app.include_router(admin_router)
    app.include_router(url_router)

    # -------------------------------------------------------------------------
    # Health Check & Metrics
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Report database reachability and cache status.",
    )
    def health_check(db: DbSession, cache: Cache) -> dict:
        """
        Health check endpoint.

        Used by load balancers, container probes and monitoring. The
        status is "degraded" when the database does not answer; a missing
        cache only shows up in the cache section.
        """
        database_ok = check_database(db)

        return {
            "status": "healthy" if database_ok else "degraded",
            "app": settings.app_name,
            "version": __version__,
            "database": {"connected": database_ok},
            "cache": cache.stats(),
            "rate_limiting": {
                "enabled": settings.rate_limit_enabled,
                "default_limit": settings.rate_limit_default,
            },
        }

    @app.get(
        "/metrics",
        tags=["Health"],
        summary="Prometheus metrics",
        include_in_schema=False,
    )
    def metrics(db: DbSession) -> Response:
        if not settings.metrics_enabled:
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"detail": "Metrics are disabled"},
            )
        return Response(content=render_metrics(db), media_type=CONTENT_TYPE_LATEST)

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
    )
    def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn booklib.main:app

app = create_app()


# =============================================================================
# Development Server
# =============================================================================
# Run directly with: python -m booklib.main

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "booklib.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
