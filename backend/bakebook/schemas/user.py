"""
User Pydantic Schemas
Request and response models for authentication endpoints.

These schemas define the structure of data sent to and received from the API.
They provide automatic validation, serialization, and documentation.
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from bakebook.core.constants import MIN_USERNAME_LENGTH, MIN_PASSWORD_LENGTH


# ============================================================================
# Authentication Schemas
# ============================================================================

class RegisterRequest(BaseModel):
    """
    Schema for user registration request.

    Used in POST /api/auth/register endpoint.

    Example:
        {
            "username": "nonna",
            "password": "applepie"
        }
    """
    username: str = Field(
        ...,
        min_length=MIN_USERNAME_LENGTH,
        max_length=150,
        description=f"Login name (minimum {MIN_USERNAME_LENGTH} characters)",
        examples=["nonna"]
    )
    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        description=f"Password (minimum {MIN_PASSWORD_LENGTH} characters)",
        examples=["applepie"]
    )

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        """Usernames are case-insensitive and stored lower-cased."""
        v = v.strip().lower()
        if len(v) < MIN_USERNAME_LENGTH:
            raise ValueError(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
        return v


class LoginRequest(BaseModel):
    """
    Schema for user login request.

    Used in POST /api/auth/login endpoint.
    """
    username: str = Field(..., description="Login name", examples=["nonna"])
    password: str = Field(..., description="User's password", examples=["applepie"])


class TokenPayload(BaseModel):
    """
    Schema for JWT token payload (internal use).

    Token payload contains:
    - sub: Subject (user id as string)
    - username: Login name at issue time
    - exp: Expiration timestamp
    - type: Token type (always "access")
    """
    sub: str = Field(..., description="Subject (user ID)")
    username: Optional[str] = Field(None, description="Login name")
    exp: int = Field(..., description="Expiration timestamp (Unix)")
    type: str = Field(..., description="Token type")


# ============================================================================
# User Profile Schemas
# ============================================================================

class UserResponse(BaseModel):
    """
    Public user profile. Never includes password_hash.

    Example:
        {
            "id": 1,
            "username": "nonna",
            "email": null,
            "created_at": "2026-01-13T10:30:00Z",
            "updated_at": "2026-01-13T10:30:00Z"
        }
    """
    id: int
    username: str
    email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """
    Returned by /register and /login: the user plus a bearer token.

    The offline client caches both so it can keep authenticating while
    disconnected.
    """
    user: UserResponse
    token: str = Field(..., description="JWT bearer token")


class MeResponse(BaseModel):
    """Returned by GET /api/auth/me."""
    user: UserResponse
