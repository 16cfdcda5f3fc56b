"""
Recipes API Endpoints
Provides CRUD, search, tag filtering and photo upload for recipes.

Endpoints:
    - GET /recipes - List the caller's recipes
    - POST /recipes - Create new recipe
    - GET /recipes/search/{query} - Search title, memory and ingredients
    - POST /recipes/filter - Recipes matching any of the given tags
    - GET /recipes/{id} - Get single recipe
    - PUT /recipes/{id} - Partially update recipe
    - DELETE /recipes/{id} - Delete recipe
    - POST /recipes/{id}/photo - Upload a photo for a recipe

All endpoints require authentication. A recipe owned by someone else is
reported as 404, never 403, so ids of other users' recipes don't leak.
"""

import logging
import os
import uuid
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from bakebook.api.deps import get_current_user
from bakebook.core.config import settings
from bakebook.db.session import get_db
from bakebook.models.user import User
from bakebook.schemas.recipe import (
    RecipeCreate,
    RecipeUpdate,
    RecipeResponse,
    RecipeTagFilter,
)
from bakebook.services import recipe_service


logger = logging.getLogger("recipes")

# Prefix will be added in main router: /api/recipes
router = APIRouter(prefix="/recipes", tags=["Recipes"])

RECIPE_NOT_FOUND = "Recipe not found"


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=RECIPE_NOT_FOUND)


@router.get("", response_model=List[RecipeResponse])
def list_recipes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List every recipe owned by the caller, oldest first."""
    return recipe_service.get_recipes(db, current_user.id)


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
def create_new_recipe(
    recipe_data: RecipeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Create a new recipe.

    Request Body:
        RecipeCreate schema with:
            - title: Recipe title (required)
            - ingredients: Ingredient lines (min 1, none empty)
            - directions: Cooking instructions (required)
            - memory, photo, tags, cook_time (optional)

    Errors:
        401 Unauthorized: Missing or invalid authentication
        422 Unprocessable Entity: Validation error
    """
    return recipe_service.create_recipe(db, current_user.id, recipe_data)


# Declared before /{recipe_id} so "search" is never parsed as an id
@router.get("/search/{query}", response_model=List[RecipeResponse])
def search_recipes(
    query: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Search the caller's recipes.

    Every whitespace-separated term must appear (case-insensitive) in the
    title, the memory or one of the ingredient lines.
    """
    return recipe_service.search_recipes(db, current_user.id, query)


@router.post("/filter", response_model=List[RecipeResponse])
def filter_recipes(
    body: RecipeTagFilter,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Return the caller's recipes tagged with ANY of body.tags."""
    return recipe_service.filter_recipes_by_tags(db, current_user.id, body.tags)


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a single recipe. 404 if absent or owned by another user."""
    recipe = recipe_service.get_recipe_by_id(db, recipe_id, current_user.id)
    if not recipe:
        raise _not_found()
    return recipe


@router.put("/{recipe_id}", response_model=RecipeResponse)
def update_existing_recipe(
    recipe_id: int,
    recipe_data: RecipeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Update an existing recipe.

    All fields are optional - only provided fields are updated.
    created_at is preserved, updated_at is refreshed.
    """
    recipe = recipe_service.update_recipe(db, recipe_id, current_user.id, recipe_data)
    if not recipe:
        raise _not_found()
    return recipe


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_existing_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a recipe. Returns 204 No Content."""
    if not recipe_service.delete_recipe(db, recipe_id, current_user.id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{recipe_id}/photo", response_model=RecipeResponse)
async def upload_recipe_photo(
    recipe_id: int,
    file: UploadFile = File(..., description="Recipe photo (any image type)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Upload a photo for a recipe.

    The image is stored under UPLOAD_DIR with a random name and the recipe's
    photo field is set to its public path (/uploads/<file>).

    Errors:
        400 Bad Request: Not an image, or larger than MAX_UPLOAD_SIZE
        404 Not Found: Recipe absent or not owned
    """
    if not recipe_service.get_recipe_by_id(db, recipe_id, current_user.id):
        raise _not_found()

    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed"
        )

    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large (max {settings.MAX_UPLOAD_SIZE} bytes)"
        )

    ext = os.path.splitext(file.filename or "")[1].lower() or ".jpg"
    filename = f"{uuid.uuid4().hex}{ext}"
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    file_path = os.path.join(settings.UPLOAD_DIR, filename)
    with open(file_path, "wb") as buffer:
        buffer.write(contents)

    recipe = recipe_service.set_recipe_photo(db, recipe_id, current_user.id, f"/uploads/{filename}")
    logger.info(f"PHOTO_UPLOADED | recipe_id={recipe_id} | file={filename} | size={len(contents)}")
    return recipe
