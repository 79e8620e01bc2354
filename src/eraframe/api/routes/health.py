"""Liveness and readiness endpoints."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Request

from eraframe import __version__
from eraframe.api.dependencies import CacheClient, Database
from eraframe.api.schemas import HealthResponse
from eraframe.core.exceptions import CacheError

router = APIRouter(tags=["health"])

ServiceState = Literal["up", "down", "unknown"]


async def _database_state(db: Any) -> ServiceState:
    if db is None:
        return "unknown"
    return "up" if await db.ping() else "down"


async def _redis_state(cache_client: Any) -> ServiceState:
    if cache_client is None:
        return "unknown"
    try:
        return "up" if await cache_client.ping() else "down"
    except CacheError:
        return "down"


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Health check",
    description=(
        "Report the state of the database, Redis and the search provider. "
        "A missing search provider makes the service unhealthy; the others only degrade it."
    ),
)
async def health_check(
    request: Request, db: Database, cache_client: CacheClient
) -> HealthResponse:
    resolver = getattr(request.app.state, "resolver", None)
    services: dict[str, ServiceState] = {
        "database": await _database_state(db),
        "redis": await _redis_state(cache_client),
        "search": "up" if resolver is not None and resolver.search_enabled else "down",
    }

    if services["search"] == "down":
        status = "unhealthy"
    elif "down" in services.values():
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(status=status, version=__version__, services=services)


@router.get(
    "/ready",
    operation_id="getReady",
    summary="Readiness check",
    description="Ready once the resolver is wired and the exclusion store has loaded.",
)
async def readiness_check(request: Request) -> dict[str, bool]:
    store = getattr(request.app.state, "exclusion_store", None)
    resolver = getattr(request.app.state, "resolver", None)
    return {"ready": resolver is not None and store is not None and store.is_initialized}
