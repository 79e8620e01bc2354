"""Image resolution endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from eraframe.api.dependencies import ResolveService
from eraframe.api.schemas import (
    ImageResult,
    ResolveImagesRequest,
    ResolveImagesResponse,
    TraceEntryResponse,
)
from eraframe.core.models import Failed, Found, NoImage, SearchRequest
from eraframe.core.types import ResolutionStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])


def _convert_resolution_to_result(
    event_id: str,
    resolution: Found | NoImage | Failed,
    include_trace: bool = False,
) -> ImageResult:
    """Convert a domain Resolution to an API result."""
    trace = None
    if include_trace:
        trace = [TraceEntryResponse.model_validate(entry) for entry in resolution.trace]

    if isinstance(resolution, Found):
        return ImageResult(
            event_id=event_id,
            image_url=resolution.image_url,
            source=resolution.source,
            status=ResolutionStatus.FOUND,
            trace=trace,
        )
    if isinstance(resolution, NoImage):
        return ImageResult(
            event_id=event_id,
            source=resolution.source,
            status=ResolutionStatus.NONE,
            trace=trace,
        )
    return ImageResult(
        event_id=event_id,
        status=ResolutionStatus.ERROR,
        reason=resolution.reason,
        trace=trace,
    )


@router.post(
    "/resolve",
    response_model=ResolveImagesResponse,
    operation_id="resolveImages",
    summary="Resolve images for a batch of queries",
    description=(
        "Resolve each query to one directly fetchable image URL. All queries of a batch "
        "run in parallel; one output entry is returned per input query."
    ),
)
async def resolve_images(
    request: ResolveImagesRequest,
    resolution_service: ResolveService,
) -> ResolveImagesResponse | JSONResponse:
    """Resolve a batch of image queries."""
    requests = [
        SearchRequest(id=q.event_id, query=q.query, year_hint=q.year) for q in request.queries
    ]

    try:
        resolved = await resolution_service.resolve_batch(requests, request.mode)
    except Exception as e:
        logger.exception("Image batch could not be processed")
        body = ResolveImagesResponse(success=False, error=str(e) or type(e).__name__)
        return JSONResponse(status_code=500, content=body.model_dump(mode="json", by_alias=True))

    return ResolveImagesResponse(
        success=True,
        images=[
            _convert_resolution_to_result(q.event_id, resolved[q.event_id], request.include_trace)
            for q in request.queries
        ],
    )
