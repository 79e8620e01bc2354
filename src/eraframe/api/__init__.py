"""FastAPI application and routes."""

from eraframe.api.app import app, create_app

__all__ = [
    "app",
    "create_app",
]
