"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from eraframe.cache.client import AsyncRedisClient
from eraframe.config import EraframeSettings, get_settings
from eraframe.db.session import DatabaseManager
from eraframe.resolution.resolver import ImageResolver
from eraframe.services.exclusions import ExclusionStore
from eraframe.services.resolution import ResolutionService


async def get_database(request: Request) -> DatabaseManager | None:
    """Get database manager from app state."""
    return getattr(request.app.state, "db", None)


async def get_cache_client(request: Request) -> AsyncRedisClient | None:
    """Get Redis cache client from app state."""
    return getattr(request.app.state, "cache_client", None)


async def get_exclusion_store(request: Request) -> ExclusionStore:
    """Get the process-wide exclusion store, initializing it on first use."""
    store = request.app.state.exclusion_store
    await store.initialize()
    return store


async def get_resolver(request: Request) -> ImageResolver:
    """Get image resolver from app state."""
    return request.app.state.resolver


async def get_resolution_service(
    resolver: ImageResolver = Depends(get_resolver),
    store: ExclusionStore = Depends(get_exclusion_store),
    cache: AsyncRedisClient | None = Depends(get_cache_client),
    settings: EraframeSettings = Depends(get_settings),
) -> ResolutionService:
    """Get resolution service with all dependencies."""
    return ResolutionService(
        resolver=resolver,
        exclusions=store,
        cache=cache,
        cache_ttl=settings.cache_ttl,
    )


# Route parameter aliases
Database = Annotated[DatabaseManager | None, Depends(get_database)]
CacheClient = Annotated[AsyncRedisClient | None, Depends(get_cache_client)]
Exclusions = Annotated[ExclusionStore, Depends(get_exclusion_store)]
ResolveService = Annotated[ResolutionService, Depends(get_resolution_service)]
