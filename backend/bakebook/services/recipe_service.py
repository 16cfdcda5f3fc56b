"""
Recipe Service
Business logic for recipe-related operations.

This service provides reusable functions for:
    - Creating, reading, updating, deleting recipes
    - Full-text search over title, memory and ingredients
    - Tag filtering
    - Attaching uploaded photos

Every function takes the owner's user_id and never returns or modifies a
recipe belonging to someone else.
"""

import logging
from typing import Optional, List

from sqlalchemy.orm import Session

from bakebook.models.recipe import Recipe
from bakebook.schemas.recipe import RecipeCreate, RecipeUpdate


logger = logging.getLogger("recipes")

# Columns that must never be set to NULL by a partial update
_REQUIRED_FIELDS = {"title", "ingredients", "directions", "tags"}


# ============================================================================
# RECIPE CRUD FUNCTIONS
# ============================================================================

def create_recipe(db: Session, user_id: int, recipe_data: RecipeCreate) -> Recipe:
    """
    Create a new recipe owned by user_id.

    Args:
        db: Database session
        user_id: ID of the owner
        recipe_data: Validated recipe data from request

    Returns:
        Recipe: Created recipe record

    Example:
        recipe = create_recipe(
            db=db,
            user_id=current_user.id,
            recipe_data=RecipeCreate(
                title="Pie",
                ingredients=["apples"],
                directions="Bake",
            )
        )
    """
    db_recipe = Recipe(
        user_id=user_id,
        title=recipe_data.title,
        ingredients=list(recipe_data.ingredients),
        directions=recipe_data.directions,
        memory=recipe_data.memory,
        photo=recipe_data.photo,
        tags=list(recipe_data.tags),
        cook_time=recipe_data.cook_time,
    )

    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)

    logger.info(f"RECIPE_CREATED | id={db_recipe.id} | user_id={user_id}")
    return db_recipe


def get_recipes(db: Session, user_id: int) -> List[Recipe]:
    """
    Get all recipes owned by user_id, oldest first.
    """
    return (
        db.query(Recipe)
        .filter(Recipe.user_id == user_id)
        .order_by(Recipe.id)
        .all()
    )


def get_recipe_by_id(db: Session, recipe_id: int, user_id: int) -> Optional[Recipe]:
    """
    Get a single recipe.

    Returns:
        Recipe if it exists and belongs to user_id, None otherwise
    """
    recipe = db.query(Recipe).filter(Recipe.id == recipe_id).first()
    if not recipe:
        return None

    if recipe.user_id != user_id:
        logger.info(f"RECIPE_ACCESS_DENIED | id={recipe_id} | user_id={user_id}")
        return None

    return recipe


def update_recipe(
    db: Session,
    recipe_id: int,
    user_id: int,
    recipe_data: RecipeUpdate
) -> Optional[Recipe]:
    """
    Partially update a recipe.

    Only fields present in the request are written; an explicit null for a
    required field (title, ingredients, directions, tags) is ignored.
    created_at is never touched.

    Returns:
        Updated Recipe, or None if not found / not owned
    """
    recipe = get_recipe_by_id(db, recipe_id, user_id)
    if not recipe:
        return None

    update_dict = recipe_data.model_dump(exclude_unset=True)

    for field, value in update_dict.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(recipe, field, value)

    db.commit()
    db.refresh(recipe)

    logger.info(f"RECIPE_UPDATED | id={recipe_id} | fields={sorted(update_dict)}")
    return recipe


def delete_recipe(db: Session, recipe_id: int, user_id: int) -> bool:
    """
    Delete a recipe.

    Returns:
        True if deleted, False if not found / not owned
    """
    recipe = get_recipe_by_id(db, recipe_id, user_id)
    if not recipe:
        return False

    db.delete(recipe)
    db.commit()

    logger.info(f"RECIPE_DELETED | id={recipe_id} | user_id={user_id}")
    return True


def set_recipe_photo(db: Session, recipe_id: int, user_id: int, photo: str) -> Optional[Recipe]:
    """Point a recipe at an uploaded photo. Returns None if not found / not owned."""
    recipe = get_recipe_by_id(db, recipe_id, user_id)
    if not recipe:
        return None

    recipe.photo = photo
    db.commit()
    db.refresh(recipe)
    return recipe


# ============================================================================
# SEARCH AND FILTER FUNCTIONS
# ============================================================================

def search_recipes(db: Session, user_id: int, query: str) -> List[Recipe]:
    """
    Search the user's recipes.

    The query is split on whitespace; a recipe matches when EVERY term
    appears (case-insensitive) in its title, memory or ingredient lines.
    A blank query matches nothing.

    Example:
        search_recipes(db, user.id, "apple cinnamon")
    """
    terms = query.lower().split()
    if not terms:
        return []

    results = []
    for recipe in get_recipes(db, user_id):
        haystack = " ".join(
            [recipe.title or "", recipe.memory or ""]
            + [ing for ing in (recipe.ingredients or []) if isinstance(ing, str)]
        ).lower()
        if all(term in haystack for term in terms):
            results.append(recipe)

    return results


def filter_recipes_by_tags(db: Session, user_id: int, tags: List[str]) -> List[Recipe]:
    """
    Return the user's recipes carrying ANY of the given tags.

    Matching is case-insensitive and ignores surrounding whitespace.
    Empty or non-string tags are skipped; no valid tags matches nothing.
    """
    wanted = {
        tag.strip().lower()
        for tag in tags
        if isinstance(tag, str) and tag.strip()
    }
    if not wanted:
        return []

    results = []
    for recipe in get_recipes(db, user_id):
        recipe_tags = {
            tag.strip().lower()
            for tag in (recipe.tags or [])
            if isinstance(tag, str)
        }
        if wanted & recipe_tags:
            results.append(recipe)

    return results
