"""API schema definitions."""

from eraframe.api.schemas.base import APIBaseSchema
from eraframe.api.schemas.requests import (
    MAX_BATCH_SIZE,
    CreateExclusionRequest,
    ImageQuery,
    ResolveImagesRequest,
)
from eraframe.api.schemas.responses import (
    ExclusionCheckResponse,
    ExclusionListResponse,
    ExclusionResponse,
    ExclusionSummary,
    HealthResponse,
    ImageResult,
    ResolveImagesResponse,
    TraceEntryResponse,
)

__all__ = [
    # Base
    "APIBaseSchema",
    # Requests
    "MAX_BATCH_SIZE",
    "CreateExclusionRequest",
    "ImageQuery",
    "ResolveImagesRequest",
    # Responses
    "ExclusionCheckResponse",
    "ExclusionListResponse",
    "ExclusionResponse",
    "ExclusionSummary",
    "HealthResponse",
    "ImageResult",
    "ResolveImagesResponse",
    "TraceEntryResponse",
]
