"""FastAPI application: lifespan wiring and the app factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eraframe import __version__
from eraframe.api.routes import exclusions_router, health_router, images_router
from eraframe.config import get_settings

if TYPE_CHECKING:
    from eraframe.cache.client import AsyncRedisClient
    from eraframe.config import EraframeSettings

logger = logging.getLogger(__name__)


async def _open_cache(settings: "EraframeSettings") -> "AsyncRedisClient | None":
    """Connect to Redis, or return None so resolution runs uncached."""
    if not settings.redis_url:
        return None

    from eraframe.cache.client import AsyncRedisClient
    from eraframe.core.exceptions import CacheError

    cache_client = AsyncRedisClient(str(settings.redis_url))
    try:
        await cache_client.connect()
        await cache_client.ping()
    except (CacheError, ValueError) as e:
        logger.warning(f"Redis unavailable, resolutions will not be cached: {e}")
        await cache_client.close()
        return None

    logger.info("Resolution cache connected")
    return cache_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Wire shared services into app.state for the lifetime of the app.

    Order matters: the resolver is built last because it consults the
    exclusion store for every candidate.
    """
    settings = get_settings()
    logging.getLogger("eraframe").setLevel(settings.log_level.upper())

    from eraframe.db.session import DatabaseManager
    from eraframe.resolution.registry import ProviderRegistry
    from eraframe.services.exclusions import DatabaseExclusionBackend, ExclusionStore

    app.state.db = DatabaseManager(str(settings.database_url), echo=settings.debug)

    # Falls back to memory-only when the database is down
    app.state.exclusion_store = ExclusionStore(DatabaseExclusionBackend(app.state.db))
    await app.state.exclusion_store.initialize()

    app.state.cache_client = await _open_cache(settings)

    app.state.provider_registry = ProviderRegistry.from_settings(settings)
    app.state.resolver = app.state.provider_registry.get_resolver(
        is_excluded=app.state.exclusion_store.is_excluded
    )
    logger.info(f"eraframe {__version__} ready")

    try:
        yield
    finally:
        await app.state.provider_registry.close_all()
        if app.state.cache_client is not None:
            await app.state.cache_client.close()
        await app.state.db.close()
        logger.info("eraframe stopped")


def create_app(
    *,
    title: str = "Eraframe API",
    description: str = "Resolves text queries about past events into fetchable image URLs",
    version: str = __version__,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """
    Build the FastAPI app with CORS and all routers under /api/v1.

    cors_origins defaults to the configured origins.
    """
    app = FastAPI(
        title=title,
        description=description,
        version=version,
        lifespan=lifespan,
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins if cors_origins is None else cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in (health_router, images_router, exclusions_router):
        app.include_router(router, prefix="/api/v1")

    return app


# uvicorn eraframe.api.app:app
app = create_app()
