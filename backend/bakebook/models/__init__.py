"""
Database Models Module
Contains SQLAlchemy ORM models for all database tables.

All models must be imported here to be registered with SQLAlchemy
and created during Base.metadata.create_all().
"""

from bakebook.db.base import Base
from bakebook.models.base import BaseModel
from bakebook.models.user import User
from bakebook.models.recipe import Recipe
from bakebook.models.error_log import ErrorLog

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Recipe",
    "ErrorLog",
]
