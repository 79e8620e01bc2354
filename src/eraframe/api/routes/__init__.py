"""API route modules."""

from eraframe.api.routes.exclusions import router as exclusions_router
from eraframe.api.routes.health import router as health_router
from eraframe.api.routes.images import router as images_router

__all__ = [
    "exclusions_router",
    "health_router",
    "images_router",
]
