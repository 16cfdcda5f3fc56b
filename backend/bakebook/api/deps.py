"""
API Dependencies
Common dependencies used across API endpoints.

This module provides:
- Database session management (re-exported get_db)
- User authentication (JWT validation)

Dependencies are injected into FastAPI endpoints using Depends().
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from bakebook.db.session import get_db
from bakebook.models.user import User
from bakebook.services.auth_service import verify_token, get_user_by_id


# HTTP Bearer token scheme for JWT authentication
# auto_error=False so a missing header yields our own 401 instead of
# FastAPI's default response.
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Extract and validate current user from JWT token.

    This dependency:
    1. Extracts JWT token from Authorization header
    2. Validates token signature and expiration
    3. Loads user from database
    4. Stores the user on request.state for error logging

    Raises:
        HTTPException 401: If the token is missing, invalid, expired, or
        belongs to a user that no longer exists

    Usage in endpoint:
        @router.get("/recipes")
        def list_recipes(current_user: User = Depends(get_current_user)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Authentication required")

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    try:
        user_id = int(payload.sub)
    except ValueError:
        raise _unauthorized("Invalid or expired token")

    user = get_user_by_id(db, user_id)
    if user is None:
        raise _unauthorized("User not found")

    request.state.user = user
    return user
