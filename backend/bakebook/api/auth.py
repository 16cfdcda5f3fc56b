"""
Authentication Endpoints
Handles user registration, login and the current-user lookup.

Endpoints:
- POST /auth/register - Create new user account
- POST /auth/login - Authenticate and get a bearer token
- GET /auth/me - Profile of the token's owner
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bakebook.api.deps import get_current_user
from bakebook.db.session import get_db
from bakebook.models.user import User
from bakebook.schemas.user import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    MeResponse,
    UserResponse,
)
from bakebook.services import auth_service


# Logger for auth events
auth_logger = logging.getLogger("auth")

# Prefix will be added in main router: /api/auth
router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=auth_service.create_access_token(user)
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    responses={
        400: {"description": "Username already exists"},
        422: {"description": "Validation error (short username or password)"}
    }
)
def register(
    user_data: RegisterRequest,
    db: Session = Depends(get_db)
) -> AuthResponse:
    """
    Register a new user account.

    Creates the user with a hashed password and returns a bearer token
    for immediate authentication.

    Errors:
    - 400: Username already exists (case-insensitive)
    - 422: Username shorter than 3 or password shorter than 6 characters
    """
    auth_logger.info(f"REGISTER_ATTEMPT | username={user_data.username}")

    try:
        user = auth_service.create_user(db, user_data.username, user_data.password)
    except ValueError as e:
        auth_logger.info(f"REGISTER_REJECTED | username={user_data.username} | reason={e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except IntegrityError:
        # Concurrent registration won the unique constraint
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists"
        )

    auth_logger.info(f"REGISTER_SUCCESS | username={user.username} | user_id={user.id}")
    return _auth_response(user)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login user",
    responses={401: {"description": "Invalid username or password"}}
)
def login(
    credentials: LoginRequest,
    request: Request,
    db: Session = Depends(get_db)
) -> AuthResponse:
    """
    Authenticate user and return a bearer token.

    Failed logins don't reveal whether the username exists.
    """
    client_ip = request.client.host if request.client else "unknown"
    auth_logger.info(f"LOGIN_ATTEMPT | username={credentials.username} | ip={client_ip}")

    user = auth_service.authenticate_user(db, credentials.username, credentials.password)
    if not user:
        auth_logger.warning(
            f"LOGIN_FAILED | username={credentials.username} | ip={client_ip} | "
            f"reason=invalid_credentials"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"}
        )

    auth_logger.info(f"LOGIN_SUCCESS | username={user.username} | user_id={user.id} | ip={client_ip}")
    return _auth_response(user)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current user"
)
def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return the profile of the bearer token's owner."""
    return MeResponse(user=UserResponse.model_validate(current_user))
