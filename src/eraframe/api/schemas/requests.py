"""Request schemas for API endpoints."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from eraframe.api.schemas.base import APIBaseSchema
from eraframe.core.types import ResolverMode

# Largest batch accepted by one resolve call
MAX_BATCH_SIZE = 50


class ImageQuery(APIBaseSchema):
    """One item that needs an image."""

    event_id: Annotated[
        str,
        Field(min_length=1, max_length=200, description="Caller-owned id, echoed in the result"),
    ]

    query: Annotated[
        str,
        Field(max_length=500, description="Loose text query, e.g. 'Berlin Wall falls'"),
    ]

    year: Annotated[
        int | None,
        Field(default=None, ge=1, le=9999, description="Year the item belongs to"),
    ]


class ResolveImagesRequest(APIBaseSchema):
    """Batch image resolution request."""

    queries: Annotated[
        list[ImageQuery],
        Field(max_length=MAX_BATCH_SIZE, description="Items to resolve"),
    ]

    mode: Annotated[
        ResolverMode,
        Field(description="'fast' never scrapes pages for links; 'full' may"),
    ]

    include_trace: Annotated[
        bool,
        Field(default=False, description="Include the resolution trace per item"),
    ]


class CreateExclusionRequest(APIBaseSchema):
    """Permanently exclude an image URL."""

    image_url: Annotated[str, Field(min_length=1, max_length=4096)]
    title_hint: Annotated[str | None, Field(default=None, max_length=1000)]
    query_hint: Annotated[str | None, Field(default=None, max_length=1000)]
