"""
CORS Middleware Configuration
Enables Cross-Origin Resource Sharing for frontend-backend communication.

CORS is required when a browser front end served from another origin
calls the API (e.g. a Vite dev server on port 5173).
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bakebook.core.config import settings


def setup_cors(app: FastAPI) -> None:
    """
    Configure CORS middleware for the FastAPI application.

    Args:
        app: FastAPI application instance

    Allowed origins come from settings.CORS_ORIGINS; restrict them to the
    production front end's domain when deploying.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,  # Allow cookies and auth headers
        allow_methods=["*"],
        allow_headers=["*"],  # Content-Type, Authorization, etc.
    )
