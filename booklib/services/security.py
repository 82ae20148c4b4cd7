"""
Security Service

Handles password hashing and JWT token operations.

Security Features:
==================
1. Password hashing with bcrypt (passlib)
2. HS256-signed JWT access tokens (python-jose)
3. Token type checking, so only access tokens authorize requests

The signing key is passed in explicitly rather than read from a module
global, which keeps these helpers usable from scripts and tests.

Usage:
    from booklib.services.security import hash_password, verify_password

    hashed = hash_password("secret123")
    is_valid = verify_password("secret123", hashed)
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------
# Password Hashing Configuration
# -------------------------------------------------------------------------
# - schemes: List of hashing algorithms (bcrypt is industry standard)
# - deprecated: "auto" means old hashes are automatically upgraded
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Example:
        >>> hashed = hash_password("secret123")
        >>> hashed.startswith("$2b$")
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Uses constant-time comparison to prevent timing attacks.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


# -------------------------------------------------------------------------
# JWT Token Configuration
# -------------------------------------------------------------------------
ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    data: dict,
    secret_key: str,
    expires_delta: timedelta,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload claims (sub, username, role)
        secret_key: HMAC signing key
        expires_delta: Token lifetime

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token({"sub": "1"}, key, timedelta(hours=24))
        >>> token.count(".") == 2  # JWT format: header.payload.signature
        True
    """
    to_encode = data.copy()
    expire = datetime.now(UTC) + expires_delta
    to_encode.update({"exp": expire, "type": ACCESS_TOKEN_TYPE})

    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


def decode_token(token: str, secret_key: str) -> dict | None:
    """
    Decode and validate a JWT token.

    Signature and expiry are checked by python-jose.

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        return None


def verify_token_type(token: str, secret_key: str, expected_type: str = ACCESS_TOKEN_TYPE) -> dict | None:
    """
    Decode a token and verify its type.

    Returns:
        Decoded payload if valid and correct type, None otherwise
    """
    payload = decode_token(token, secret_key)
    if payload is None:
        return None

    if payload.get("type") != expected_type:
        logger.warning(
            f"Token type mismatch: expected {expected_type}, got {payload.get('type')}"
        )
        return None

    return payload
