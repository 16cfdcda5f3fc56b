"""
User Model
Represents users of the recipe collection.

Each user has:
- Unique username for authentication (stored lower-cased and trimmed)
- Encrypted password (never stored in plain text)
- Optional email
- A private list of recipes
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from bakebook.models.base import BaseModel


class User(BaseModel):
    """
    User model for authentication and recipe ownership.

    Fields:
        id (int): Primary key, inherited from BaseModel
        username (str): Unique login name, normalised to lower case
        password_hash (str): Bcrypt hashed password
        email (str): Optional email address
        created_at (datetime): Account creation timestamp
        updated_at (datetime): Last login / profile update timestamp

    Relationships:
        recipes: One-to-many with Recipe (deleted with the user)

    Example usage:
        user = User(
            username="nonna",
            password_hash=hash_password("secret123"),
        )
        db.add(user)
        db.commit()
    """

    __tablename__ = "users"

    # Login name, unique across all users
    # Normalised by the auth service so lookups are case-insensitive
    username = Column(
        String(150),
        unique=True,
        nullable=False,
        index=True,
        comment="Lower-cased login name"
    )

    # Password hash - NEVER store plain text passwords
    password_hash = Column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    email = Column(
        String(255),
        nullable=True,
        comment="Optional email address"
    )

    recipes = relationship(
        "Recipe",
        back_populates="owner",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        """String representation for debugging."""
        return f"<User(id={self.id}, username={self.username})>"
