"""
Authentication Service
Handles JWT token creation, verification, and user authentication.

This service provides core authentication functionality:
- JWT token generation
- Token verification and decoding
- User authentication (login)
- User registration with password hashing
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy import func
from sqlalchemy.orm import Session

from bakebook.core.config import settings
from bakebook.core.security import hash_password, verify_password
from bakebook.models.user import User
from bakebook.schemas.user import TokenPayload


# JWT Configuration
# Algorithm used for signing tokens (HS256 = HMAC with SHA-256)
ALGORITHM = "HS256"
TOKEN_TYPE = "access"


# ============================================================================
# JWT Token Functions
# ============================================================================

def create_access_token(user: User) -> str:
    """
    Create a JWT bearer token for a user.

    Tokens are long-lived (default: 7 days) because the offline client
    keeps using its cached token while disconnected.

    Args:
        user: User to create token for

    Returns:
        Encoded JWT token string

    Example:
        token = create_access_token(user)
        # Use in header: Authorization: Bearer {token}
    """
    expire = datetime.now(timezone.utc) + timedelta(seconds=settings.JWT_EXPIRATION)

    payload = {
        "sub": str(user.id),  # Subject (user ID)
        "username": user.username,
        "exp": expire,
        "type": TOKEN_TYPE
    }

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[TokenPayload]:
    """
    Verify and decode a JWT token.

    Validates token signature, expiration, and type.

    Args:
        token: JWT token string to verify

    Returns:
        TokenPayload if token is valid, None if invalid

    Example:
        payload = verify_token(token)
        if payload:
            user_id = int(payload.sub)
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        # Bad signature, expired, malformed, etc.
        return None

    user_id = payload.get("sub")
    token_type = payload.get("type")
    exp = payload.get("exp")

    if not user_id or not token_type or not exp:
        return None

    if token_type != TOKEN_TYPE:
        return None

    return TokenPayload(
        sub=user_id,
        username=payload.get("username"),
        exp=exp,
        type=token_type
    )


# ============================================================================
# User Functions
# ============================================================================

def normalize_username(username: str) -> str:
    """Usernames are compared and stored trimmed and lower-cased."""
    return username.strip().lower()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Get user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """
    Get user by username (case-insensitive).

    Returns None for blank input.
    """
    if not username or not username.strip():
        return None
    normalized = normalize_username(username)
    return db.query(User).filter(func.lower(User.username) == normalized).first()


def create_user(db: Session, username: str, password: str) -> User:
    """
    Create a new user account.

    Hashes the password before storing.

    Args:
        db: Database session
        username: Login name (normalised before storing)
        password: Plain text password

    Returns:
        Created User object with id and timestamps populated

    Raises:
        ValueError: If the username is blank or already taken
        IntegrityError: If a concurrent registration won the unique constraint
    """
    if not username or not username.strip():
        raise ValueError("Username is required")
    if not password or not password.strip():
        raise ValueError("Password is required")

    if get_user_by_username(db, username):
        raise ValueError("Username already exists")

    user = User(
        username=normalize_username(username),
        password_hash=hash_password(password),
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    return user


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    """
    Authenticate a user by username and password.

    On success the user's updated_at is refreshed as the last login time.

    Args:
        db: Database session
        username: Login name (case-insensitive)
        password: Plain text password to verify

    Returns:
        User object if credentials are valid, None otherwise
    """
    if not username or not password:
        return None

    user = get_user_by_username(db, username)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    return user
