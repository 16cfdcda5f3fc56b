"""
Application Configuration
Manages environment variables and application settings using Pydantic Settings.

This module loads configuration from .env file and provides type-safe access
to all application settings, for both the API server and the offline client.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Every setting has a development default so the app starts out of the box;
    SECRET_KEY must be overridden in production.
    """

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./bakebook.db"  # SQLAlchemy connection string

    # Security & Authentication
    SECRET_KEY: str = "change-me-in-production"  # JWT signing key
    JWT_EXPIRATION: int = 604800  # Token expiration in seconds (default: 7 days)

    # Uploaded recipe photos
    UPLOAD_DIR: str = "./uploads"  # Directory served at /uploads
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10 MB

    # Logging
    LOGS_DIR: str = "./logs"  # Rotating log files (console only if not writable)

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    # Offline Client
    API_URL: str = "http://localhost:8000"  # Server the offline client talks to
    CLIENT_STORE_URL: str = "sqlite:///./bakebook-offline.db"  # Local durable store

    # Application Settings
    PROJECT_NAME: str = "BakeBook API"  # Project name for docs
    DEBUG: bool = False  # Debug mode (should be False in production)

    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env file
        env_file_encoding="utf-8",  # UTF-8 encoding
        case_sensitive=False  # Case-insensitive env vars
    )


# Global settings instance
# This singleton is imported throughout the application
settings = Settings()
