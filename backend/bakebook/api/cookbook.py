"""
Cookbook Export Endpoint
Renders the caller's recipes as a downloadable PDF cookbook.

Endpoints:
    - GET /cookbook?title=...&ids=1&ids=2 - PDF of all (or the selected) recipes
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from bakebook.api.deps import get_current_user
from bakebook.core.constants import DEFAULT_COOKBOOK_TITLE
from bakebook.db.session import get_db
from bakebook.models.user import User
from bakebook.services import recipe_service
from bakebook.services.cookbook_service import build_cookbook_pdf, cookbook_filename


logger = logging.getLogger("recipes")

router = APIRouter(tags=["Cookbook"])


@router.get(
    "/cookbook",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}, "description": "PDF cookbook"}}
)
def export_cookbook(
    title: str = Query(DEFAULT_COOKBOOK_TITLE, description="Cookbook title"),
    ids: Optional[List[int]] = Query(None, description="Only these recipes (default: all)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Export recipes as a PDF cookbook.

    Recipes appear in the order they were created. Ids that don't belong to
    the caller are silently skipped.
    """
    recipes = recipe_service.get_recipes(db, current_user.id)
    if ids:
        wanted = set(ids)
        recipes = [recipe for recipe in recipes if recipe.id in wanted]

    title = title.strip() or DEFAULT_COOKBOOK_TITLE
    pdf = build_cookbook_pdf(recipes, title)
    logger.info(f"COOKBOOK_EXPORTED | user_id={current_user.id} | recipes={len(recipes)} | bytes={len(pdf)}")

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{cookbook_filename(title)}"'}
    )
