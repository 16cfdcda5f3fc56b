"""
API Router
Aggregates all endpoint routers. Mounted under /api in main.py.
"""

from fastapi import APIRouter

from bakebook.api import auth, recipes, cookbook


api_router = APIRouter()

# Authentication endpoints: /api/auth/*
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Recipe endpoints: /api/recipes/*
api_router.include_router(recipes.router)

# Cookbook export: /api/cookbook
api_router.include_router(cookbook.router)
