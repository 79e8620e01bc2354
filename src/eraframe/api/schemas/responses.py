"""Response schemas for API endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from eraframe.api.schemas.base import APIBaseSchema
from eraframe.core.types import ResolutionStatus, Tier, TraceOutcome


class TraceEntryResponse(APIBaseSchema):
    """One step taken while resolving a query."""

    tier: Tier
    target: str
    outcome: TraceOutcome
    elapsed_ms: float
    detail: str | None = None


class ImageResult(APIBaseSchema):
    """Resolution result for one query."""

    event_id: str
    image_url: str | None = None
    source: str | None = None
    status: ResolutionStatus
    reason: str | None = None
    trace: list[TraceEntryResponse] | None = None


class ResolveImagesResponse(APIBaseSchema):
    """Batch image resolution response; one image entry per query."""

    success: bool
    images: list[ImageResult] = Field(default_factory=list)
    error: str | None = None


class ExclusionResponse(APIBaseSchema):
    """A stored exclusion."""

    image_url: str
    title_hint: str | None = None
    query_hint: str | None = None
    inserted_at: datetime


class ExclusionSummary(APIBaseSchema):
    image_url: str


class ExclusionListResponse(APIBaseSchema):
    """All excluded URLs."""

    exclusions: list[ExclusionSummary]
    total: int


class ExclusionCheckResponse(APIBaseSchema):
    image_url: str
    excluded: bool


class HealthResponse(APIBaseSchema):
    """Health check response."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    services: dict[str, Literal["up", "down", "unknown"]]
