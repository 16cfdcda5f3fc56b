"""
Recipe Pydantic Schemas
Request and response models for Recipe API endpoints.

These schemas define the structure of data sent to and received from
the Recipes API. They provide validation, serialization, and documentation.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator


def _clean_ingredients(v: List[str]) -> List[str]:
    cleaned = [ing.strip() for ing in v]
    if any(not ing for ing in cleaned):
        raise ValueError("Ingredient cannot be empty")
    return cleaned


def _clean_tags(v: List[str]) -> List[str]:
    return [tag.strip() for tag in v if tag and tag.strip()]


class RecipeBase(BaseModel):
    """
    Base Recipe schema with the optional fields shared by create/update.
    """
    memory: Optional[str] = Field(None, description="Family memory attached to the recipe")
    photo: Optional[str] = Field(None, description="Photo reference")
    cook_time: Optional[str] = Field(None, max_length=100, description="Free-text cook time")


class RecipeCreate(RecipeBase):
    """
    Schema for creating a new recipe.

    Used by: POST /api/recipes

    The owner is taken from the authenticated user, never from the body.
    Unknown fields (such as the offline client's temporary id) are ignored.

    Example request:
        {
            "title": "Grandma's Apple Pie",
            "ingredients": ["3 apples", "1 pie crust", "1/2 cup sugar"],
            "directions": "Slice apples\\nFill crust\\nBake 45 minutes",
            "memory": "Every Thanksgiving at the farm",
            "tags": ["dessert", "holiday"],
            "cook_time": "1 hour"
        }
    """
    title: str = Field(..., min_length=1, max_length=255, description="Recipe title")
    ingredients: List[str] = Field(
        ...,
        min_length=1,
        description="Ingredient lines (at least 1 required)"
    )
    directions: str = Field(..., min_length=1, description="Cooking instructions")
    tags: List[str] = Field(default_factory=list, description="Recipe tags")

    @field_validator("title", "directions")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject whitespace-only text."""
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v

    @field_validator("ingredients")
    @classmethod
    def validate_ingredients(cls, v: List[str]) -> List[str]:
        """Every ingredient line must have content."""
        return _clean_ingredients(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        """Drop empty tags."""
        return _clean_tags(v)


class RecipeUpdate(RecipeBase):
    """
    Schema for updating an existing recipe.

    Used by: PUT /api/recipes/{id}

    All fields are optional - only provided fields will be updated.

    Example request (partial update):
        {
            "tags": ["dessert", "holiday", "autumn"]
        }
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    ingredients: Optional[List[str]] = Field(None, min_length=1)
    directions: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None

    @field_validator("ingredients")
    @classmethod
    def validate_ingredients(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Ensure at least one non-empty ingredient if updating ingredients."""
        if v is None:
            return v
        return _clean_ingredients(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return _clean_tags(v)


class RecipeResponse(BaseModel):
    """
    Full recipe as returned by the API.

    Example response:
        {
            "id": 7,
            "user_id": 1,
            "title": "Pie",
            "ingredients": ["apples"],
            "directions": "Bake",
            "memory": null,
            "photo": null,
            "tags": [],
            "cook_time": null,
            "created_at": "2026-01-13T10:30:00Z",
            "updated_at": "2026-01-13T10:30:00Z"
        }
    """
    id: int
    user_id: int
    title: str
    ingredients: List[str]
    directions: str
    memory: Optional[str] = None
    photo: Optional[str] = None
    tags: List[str] = []
    cook_time: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecipeTagFilter(BaseModel):
    """
    Body of POST /api/recipes/filter.

    Recipes matching ANY of the tags are returned (case-insensitive).
    """
    tags: List[str] = Field(..., description="Tags to match")
