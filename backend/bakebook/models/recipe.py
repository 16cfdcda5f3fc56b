"""
Recipe Model
Represents a recipe in a user's private collection.

Each recipe contains:
- Title, free-text directions and an optional family "memory"
- Ordered list of ingredient strings (stored as JSON)
- Tags for categorisation (stored as JSON)
- Optional cook time string and photo reference

Recipes belong to exactly one user. Every query in the recipe service is
scoped by user_id, so a user never sees another user's recipes.

Ingredients JSON structure:
    ["2 cups flour", "1 tsp salt", "3 apples, sliced"]
"""

from sqlalchemy import Column, String, Text, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship

from bakebook.models.base import BaseModel


class Recipe(BaseModel):
    """
    Recipe model for storing user-created recipes.

    Fields:
        id (int): Primary key, inherited from BaseModel
        user_id (int): Owner of the recipe
        title (str): Recipe title (e.g., "Grandma's Apple Pie")
        ingredients (list[str]): Ordered ingredient lines
        directions (str): Cooking instructions, one step per line
        memory (str): Optional story attached to the recipe
        photo (str): Optional photo reference (e.g., "/uploads/ab12.jpg")
        tags (list[str]): Tags for categorisation
        cook_time (str): Optional free-text cook time (e.g., "45 minutes")
        created_at (datetime): Recipe creation timestamp
        updated_at (datetime): Last recipe update timestamp

    Example usage:
        recipe = Recipe(
            user_id=user.id,
            title="Apple Pie",
            ingredients=["3 apples", "1 pie crust"],
            directions="Slice apples\\nFill crust\\nBake 45 minutes",
            tags=["dessert"],
            cook_time="1 hour",
        )
        db.add(recipe)
        db.commit()
    """

    __tablename__ = "recipes"

    # Ownership
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="User that owns this recipe"
    )

    title = Column(
        String(255),
        nullable=False,
        index=True,
        comment="Recipe title"
    )

    # Ordered ingredient lines, at least one (validated at schema layer)
    ingredients = Column(
        JSON,
        nullable=False,
        default=list,
        comment="Array of ingredient strings"
    )

    directions = Column(
        Text,
        nullable=False,
        comment="Cooking instructions"
    )

    memory = Column(
        Text,
        nullable=True,
        comment="Family memory attached to the recipe"
    )

    photo = Column(
        String(500),
        nullable=True,
        comment="Photo reference (URL path)"
    )

    tags = Column(
        JSON,
        nullable=False,
        default=list,
        comment="Recipe tags for categorization"
    )

    cook_time = Column(
        String(100),
        nullable=True,
        comment="Free-text cook time"
    )

    owner = relationship("User", back_populates="recipes")

    def __repr__(self):
        """String representation for debugging."""
        return f"<Recipe(id={self.id}, title='{self.title}', user_id={self.user_id})>"
