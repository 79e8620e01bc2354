"""Domain models for image resolution."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .types import LinkPriority, ResolutionStatus, Tier, TraceOutcome


class SearchRequest(BaseModel):
    """One item that needs an image."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Caller-owned request id")
    query: str = Field(..., description="Loose text query")
    year_hint: int | None = Field(default=None, description="Year the item belongs to")
    image_url: str | None = Field(
        default=None, description="Image the caller already holds, if any"
    )


class WorkItem(BaseModel):
    """Queue entry for a request awaiting dispatch."""

    request: SearchRequest
    generation: int
    submitted_at: float = Field(default_factory=time.monotonic)


class TraceEntry(BaseModel):
    """One step taken while resolving a query."""

    model_config = ConfigDict(frozen=True)

    tier: Tier
    target: str = Field(..., description="Query, URL or title the step worked on")
    outcome: TraceOutcome
    elapsed_ms: float = 0.0
    detail: str | None = None


class _BaseResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    trace: list[TraceEntry] = Field(default_factory=list, exclude=True)


class Found(_BaseResolution):
    """An accepted, directly fetchable image."""

    status: Literal["found"] = "found"
    image_url: str
    source: str | None = None


class NoImage(_BaseResolution):
    """All tiers exhausted without an accepted candidate."""

    status: Literal["none"] = "none"
    source: str | None = None


class Failed(_BaseResolution):
    """Resolution could not be completed."""

    status: Literal["error"] = "error"
    reason: str


Resolution = Annotated[Found | NoImage | Failed, Field(discriminator="status")]


class ResolutionResult(BaseModel):
    """Flattened terminal output for one request id."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: ResolutionStatus
    image_url: str | None = None
    source_url: str | None = None
    reason: str | None = None

    @classmethod
    def from_resolution(cls, request_id: str, resolution: Found | NoImage | Failed) -> ResolutionResult:
        if isinstance(resolution, Found):
            return cls(
                id=request_id,
                status=resolution.status,
                image_url=resolution.image_url,
                source_url=resolution.source,
            )
        if isinstance(resolution, NoImage):
            return cls(id=request_id, status=resolution.status, source_url=resolution.source)
        return cls(id=request_id, status=resolution.status, reason=resolution.reason)

    @property
    def found(self) -> bool:
        return self.status == ResolutionStatus.FOUND and self.image_url is not None


class ExclusionEntry(BaseModel):
    """A permanently rejected image URL."""

    model_config = ConfigDict(frozen=True)

    image_url: str = Field(..., min_length=1)
    title_hint: str | None = None
    query_hint: str | None = None
    inserted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SearchHit(BaseModel):
    """One ranked result from the search provider."""

    url: str
    title: str | None = None
    og_image: str | None = Field(default=None, description="Social-preview image")
    meta_image: str | None = Field(default=None, description="Generic metadata image")


class ResolverCandidate(BaseModel):
    """A discovered URL pending validation."""

    url: str
    tier: Tier
    page_url: str | None = Field(default=None, description="Page the candidate came from")
    priority: LinkPriority = LinkPriority.OTHER
