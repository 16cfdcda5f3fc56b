"""
Database Session Management
Creates and manages SQLAlchemy database engine and session factory.

This module sets up the database connection using SQLAlchemy 2.0 style
and provides a session factory for creating database sessions in endpoints.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator

from bakebook.core.config import settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared between the request threads FastAPI runs
    sync endpoints on, so check_same_thread is disabled for them.
    An in-memory SQLite database lives only as long as its connection, so
    it is pinned to a single shared connection (tests, offline client).
    Other backends get connection health checks and hourly recycling.
    """
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,  # Check connection health before using
        pool_recycle=3600,  # Recycle connections every hour
    )


# Create SQLAlchemy engine
# - echo=settings.DEBUG: Log all SQL queries when debug mode is enabled
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Session factory
# - autocommit=False: Require explicit commit() calls
# - autoflush=False: Require explicit flush() calls
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that provides database sessions to FastAPI endpoints.

    Yields:
        Database session object

    Usage in FastAPI endpoint:
        @router.get("/recipes")
        def list_recipes(db: Session = Depends(get_db)):
            return db.query(Recipe).all()

    The session is closed after the endpoint returns, even if an
    exception occurs.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
