"""
Pydantic Schemas Module
Contains request/response schemas for API validation and serialization.

Pydantic schemas are used for:
- Validating incoming request data
- Serializing database models to JSON responses
- Auto-generating OpenAPI documentation
"""

from bakebook.schemas.user import (
    RegisterRequest,
    LoginRequest,
    TokenPayload,
    UserResponse,
    AuthResponse,
    MeResponse,
)
from bakebook.schemas.recipe import (
    RecipeCreate,
    RecipeUpdate,
    RecipeResponse,
    RecipeTagFilter,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "TokenPayload",
    "UserResponse",
    "AuthResponse",
    "MeResponse",
    "RecipeCreate",
    "RecipeUpdate",
    "RecipeResponse",
    "RecipeTagFilter",
]
