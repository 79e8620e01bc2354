"""Exclusion store endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from eraframe.api.dependencies import Exclusions
from eraframe.api.schemas import (
    CreateExclusionRequest,
    ExclusionCheckResponse,
    ExclusionListResponse,
    ExclusionResponse,
    ExclusionSummary,
)

router = APIRouter(prefix="/exclusions", tags=["exclusions"])


@router.post(
    "",
    response_model=ExclusionResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createExclusion",
    summary="Exclude an image URL",
    description="Permanently exclude an image URL. Excluding a URL twice is not an error.",
)
async def create_exclusion(
    request: CreateExclusionRequest,
    store: Exclusions,
) -> ExclusionResponse:
    """Add an image URL to the exclusion store."""
    entry = await store.exclude(
        request.image_url,
        title_hint=request.title_hint,
        query_hint=request.query_hint,
    )
    return ExclusionResponse.model_validate(entry)


@router.get(
    "",
    response_model=ExclusionListResponse,
    operation_id="listExclusions",
    summary="List excluded image URLs",
)
async def list_exclusions(store: Exclusions) -> ExclusionListResponse:
    """List every excluded URL."""
    urls = sorted(store.urls)
    return ExclusionListResponse(
        exclusions=[ExclusionSummary(image_url=url) for url in urls],
        total=len(urls),
    )


@router.get(
    "/check",
    response_model=ExclusionCheckResponse,
    operation_id="checkExclusion",
    summary="Check whether an image URL is excluded",
)
async def check_exclusion(
    store: Exclusions,
    url: str = Query(..., min_length=1, description="Image URL to check"),
) -> ExclusionCheckResponse:
    """Check a single URL against the exclusion store."""
    return ExclusionCheckResponse(image_url=url, excluded=store.is_excluded(url))
