"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

WHY Routers?
============
1. Organization: Group related endpoints together
2. Modularity: Each router can have its own prefix, tags, dependencies
3. Maintainability: Easy to find and modify endpoint code

Router Structure:
- books.py: /books/* endpoints
- auth.py: /auth/* endpoints (registration, login, current user)
- admin.py: /admin/* endpoints (users, cache management)
- url.py: /url/* endpoints (URL cleaner)

Each router is imported and registered in main.py.
"""

from booklib.routers.admin import router as admin_router
from booklib.routers.auth import router as auth_router
from booklib.routers.books import router as books_router
from booklib.routers.url import router as url_router

__all__ = [
    "admin_router",
    "auth_router",
    "books_router",
    "url_router",
]
