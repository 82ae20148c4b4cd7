"""
Authentication Router

Handles user authentication endpoints:
- Registration (username/email/password)
- Login (username/password -> JWT access token)
- Get current user (from JWT token)

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Login failures return one generic message
- Register and login share a strict rate limit
"""

from fastapi import APIRouter, Request, status

from booklib.config import get_settings
from booklib.dependencies import AuthServiceDep, CurrentUser
from booklib.schemas.user import LoginRequest, LoginResponse, UserCreate, UserResponse
from booklib.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"description": "Bad request or user already exists"},
        401: {"description": "Unauthorized"},
    },
)


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new user account.

    **Username Requirements:**
    - 3-50 characters
    - Must start with a letter
    - Only letters, numbers, and underscores

    **Password Requirements:**
    - Minimum 6 characters
    """,
)
@limiter.limit(settings.rate_limit_auth)
def register(
    request: Request,
    user_data: UserCreate,
    auth: AuthServiceDep,
) -> UserResponse:
    """
    Register a new user.

    1. Validates username, email and password (handled by Pydantic)
    2. Rejects a username or email already in use
    3. Stores the bcrypt hash with role "user"
    """
    user = auth.register(user_data)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login with username and password",
)
@limiter.limit(settings.rate_limit_auth)
def login(
    request: Request,
    credentials: LoginRequest,
    auth: AuthServiceDep,
) -> LoginResponse:
    """
    Authenticate and issue an access token.

    Use the token in the Authorization header:
        Authorization: Bearer <token>
    """
    user = auth.authenticate(credentials.username, credentials.password)
    return LoginResponse(
        token=auth.issue_token(user),
        expires_in=int(auth.token_lifetime.total_seconds()),
        user=UserResponse.model_validate(user),
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
def get_me(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)
