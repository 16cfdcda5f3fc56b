"""
Base Model Class
Provides common fields and functionality for all database models.

All application models should inherit from BaseModel instead of Base directly.
This ensures a consistent integer ID and automatic timestamp tracking.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer

from bakebook.db.base import Base


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class BaseModel(Base):
    """
    Abstract base model with common fields for all tables.

    Provides:
    - Integer primary key (auto-increment; the offline client relies on
      server ids being distinguishable from its "temp_" string ids)
    - created_at timestamp (set on insert)
    - updated_at timestamp (refreshed on every update)

    Example:
        class User(BaseModel):
            __tablename__ = "users"
            username = Column(String, unique=True)
            # id, created_at, updated_at are inherited automatically
    """

    # Make this an abstract base class (no table created for BaseModel itself)
    __abstract__ = True

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        index=True
    )

    # Timestamp: Record Creation
    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )

    # Timestamp: Last Update
    # onupdate refreshes this field on every UPDATE issued through the ORM.
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    def __repr__(self):
        """
        String representation of model instance.
        Useful for debugging and logging.
        """
        return f"<{self.__class__.__name__}(id={self.id})>"
