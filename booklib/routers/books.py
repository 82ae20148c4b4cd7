"""
Books Router

CRUD endpoints for books. Reads are public; writes require a bearer token.

Handlers stay thin: they parse the request, call BookService and let the
domain exceptions (BookNotFoundError, ValidationError, DependencyError)
propagate to the handlers registered in main.py.
"""

from fastapi import APIRouter, Query, Request, Response, status

from booklib.config import get_settings
from booklib.dependencies import BookServiceDep, CurrentUser
from booklib.schemas import BookCreate, BookResponse, BookUpdate
from booklib.services.rate_limiter import limiter

settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================
router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


# =============================================================================
# Read Endpoints
# =============================================================================

@router.get(
    "",
    response_model=list[BookResponse],
    summary="List books",
    description="List all books, or only those whose title, author or genre contains `search`.",
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    books: BookServiceDep,
    search: str | None = Query(
        default=None,
        max_length=100,
        description="Case-insensitive search across title, author and genre",
        examples=["orwell"],
    ),
) -> list[BookResponse]:
    """
    List books ordered by id.

    Examples:
        GET /books
        GET /books?search=fiction
    """
    return books.list(search)


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book",
)
@limiter.limit(settings.rate_limit_default)
def get_book(request: Request, book_id: int, books: BookServiceDep) -> BookResponse:
    return books.get(book_id)


# =============================================================================
# Write Endpoints
# =============================================================================

@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a book",
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    book_data: BookCreate,
    books: BookServiceDep,
    current_user: CurrentUser,
) -> BookResponse:
    """
    Create a new book.

    Title, author and year are required; the ISBN, when given, must not
    belong to another book.
    """
    return books.create(book_data)


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book",
    description="Only fields present in the body are changed. "
    "Send null to clear genre or isbn.",
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    book_id: int,
    book_data: BookUpdate,
    books: BookServiceDep,
    current_user: CurrentUser,
) -> BookResponse:
    return books.update(book_id, book_data)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    book_id: int,
    books: BookServiceDep,
    current_user: CurrentUser,
) -> Response:
    books.delete(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
