"""
User Pydantic Schemas

These schemas define the shape of data for User-related API operations.

Schemas:
- UserCreate: Registration data (username, email, password)
- UserResponse: Public user data (never exposes password)
- LoginRequest: Username/password credentials
- LoginResponse: Issued bearer token plus the authenticated user

Pydantic v2 Features Used:
- model_config: Configure model behavior
- Field(): Define constraints and metadata
- field_validator: Validate and transform field values
- EmailStr: Built-in email validation
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserBase(BaseModel):
    """Base schema with shared user fields."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Unique username (3-50 characters, alphanumeric and underscores)",
        examples=["johndoe", "jane_doe123"],
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["john@example.com"],
    )

    @field_validator("username")
    @classmethod
    def username_must_be_valid(cls, v: str) -> str:
        """
        Validate username format.

        Rules:
        - 3-50 characters
        - Only alphanumeric and underscores
        - Must start with a letter
        """
        if not re.match(r"^[a-zA-Z][a-zA-Z0-9_]*$", v):
            raise ValueError(
                "Username must start with a letter and contain only "
                "letters, numbers, and underscores"
            )
        return v.lower()

    @field_validator("email")
    @classmethod
    def email_to_lower(cls, v: str) -> str:
        return v.lower()


class UserCreate(UserBase):
    """Schema for user registration."""

    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (min 6 characters)",
        examples=["secret123"],
    )


class UserResponse(BaseModel):
    """
    Schema for user responses (what the API returns).

    SECURITY: Never includes the password hash or the soft-delete marker.
    """

    id: int = Field(..., description="Unique user identifier", examples=[1, 42])
    username: str = Field(..., description="Unique username")
    email: EmailStr = Field(..., description="User's email address")
    role: str = Field(..., description="Access role (user or admin)")
    created_at: datetime = Field(..., description="When the user registered")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "username": "johndoe",
                "email": "john@example.com",
                "role": "user",
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class LoginRequest(BaseModel):
    """Schema for username/password login."""

    username: str = Field(..., min_length=1, max_length=50, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")

    @field_validator("username")
    @classmethod
    def username_to_lower(cls, v: str) -> str:
        return v.strip().lower()


class LoginResponse(BaseModel):
    """
    Schema for a successful login.

    The token goes in the Authorization header of later requests:
        Authorization: Bearer <token>
    """

    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type for the Authorization header")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse = Field(..., description="The authenticated user")
