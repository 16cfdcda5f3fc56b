"""
Middleware Module
Contains FastAPI middleware for cross-cutting concerns.

Middleware processes requests before they reach endpoints
and responses before they're sent to clients.
"""
