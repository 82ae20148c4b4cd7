"""
Domain Exceptions

Services raise these instead of HTTPException so they stay usable outside
a request. Each class carries the HTTP status the boundary maps it to;
main.py registers a single handler for BookLibraryError.

Taxonomy:
- ValidationError        -> 400 (malformed or missing input)
- AuthenticationError    -> 401 (bad credentials or token)
- AuthorizationError     -> 403 (insufficient role)
- NotFoundError          -> 404 (entity absent)
- DependencyError        -> 500 (database or cache failing, logged)
"""

from fastapi import status


class BookLibraryError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An internal error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookLibraryError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class UserExistsError(ValidationError):
    default_message = "User already exists"


class AuthenticationError(BookLibraryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class InvalidCredentialsError(AuthenticationError):
    """Raised for both unknown usernames and wrong passwords."""

    default_message = "Invalid credentials"


class AuthorizationError(BookLibraryError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin privileges required"


class NotFoundError(BookLibraryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class BookNotFoundError(NotFoundError):
    def __init__(self, book_id: int) -> None:
        self.book_id = book_id
        super().__init__(f"Book with id {book_id} not found")


class DependencyError(BookLibraryError):
    """A backing store (database or cache) failed."""

    default_message = "A database error occurred. Please try again later."

    def __init__(self, component: str, message: str | None = None) -> None:
        self.component = component
        super().__init__(message)
