"""
Main FastAPI Application
Entry point for the BakeBook API.

This module creates and configures the FastAPI application instance,
sets up middleware, and defines the health check endpoint.

Run with:
    uvicorn bakebook.main:app --reload   (from the backend/ directory)
"""

import os

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from bakebook.api.router import api_router
from bakebook.core.config import settings
from bakebook.db.session import engine, SessionLocal
from bakebook.middleware.cors import setup_cors
from bakebook.middleware.error_handler import ErrorHandlerMiddleware
from bakebook.models import Base
from bakebook.services.error_logging import configure_error_logging


VERSION = "1.0.0"

# Create FastAPI application instance
# - docs_url: Swagger UI endpoint (interactive API documentation)
# - redoc_url: ReDoc endpoint (alternative documentation style)
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=VERSION,
    docs_url="/docs",  # Swagger UI at http://localhost:8000/docs
    redoc_url="/redoc",  # ReDoc at http://localhost:8000/redoc
    debug=settings.DEBUG,
    description="""
    BakeBook API - family recipe collection REST API.

    Features:
    - User accounts with JWT bearer authentication
    - Private recipe collections with search and tag filtering
    - Recipe photo uploads
    - PDF cookbook export

    The offline client (bakebook.client) replays edits made while
    disconnected against these endpoints.
    """
)


# Setup CORS middleware
setup_cors(app)

# Setup error handler middleware
# Catches all unhandled exceptions and logs them
app.add_middleware(ErrorHandlerMiddleware)

# Uploaded photos are served as static files; the directory must exist
# before StaticFiles is mounted.
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.on_event("startup")
async def startup_event():
    """
    Application startup handler.

    Tasks performed:
    - Create all database tables if they don't exist
    - Configure error logging system (log files + error_logs table)
    """
    Base.metadata.create_all(bind=engine)
    print("✓ Database tables created/verified")

    configure_error_logging(SessionLocal)
    print("✓ Error logging system configured")

    print("✓ API documentation available at http://localhost:8000/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown handler."""
    print("✓ Application shutdown complete")


@app.get(
    "/health",
    tags=["Health"],
    summary="Health Check",
    description="Simple endpoint to verify API is running"
)
async def health_check():
    """
    Health check endpoint.

    The offline client probes this to decide whether it is online.

    Example Response:
        {
            "status": "ok",
            "version": "1.0.0",
            "api": "BakeBook API"
        }
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "version": VERSION,
            "api": settings.PROJECT_NAME
        }
    )


@app.get(
    "/",
    tags=["Root"],
    summary="API Root",
    description="Root endpoint with API information"
)
async def root():
    """Basic information about the API and links to documentation."""
    return {
        "message": "Welcome to BakeBook API",
        "version": VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health"
    }


# All endpoints are prefixed with /api
app.include_router(api_router, prefix="/api")

# Available endpoints:
# - POST /api/auth/register - Create new user account
# - POST /api/auth/login - Authenticate and get a token
# - GET /api/auth/me - Current user profile
# - GET/POST /api/recipes - List / create recipes
# - GET /api/recipes/search/{query} - Search recipes
# - POST /api/recipes/filter - Filter recipes by tags
# - GET/PUT/DELETE /api/recipes/{id} - Single recipe
# - POST /api/recipes/{id}/photo - Upload recipe photo
# - GET /api/cookbook - PDF cookbook export
