"""Core types, models, and utilities."""

from .exceptions import (
    CacheError,
    CandidateRejectedError,
    ConfigurationError,
    EraframeError,
    NetworkError,
    StoreUnavailableError,
)
from .models import (
    ExclusionEntry,
    Failed,
    Found,
    NoImage,
    Resolution,
    ResolutionResult,
    ResolverCandidate,
    SearchHit,
    SearchRequest,
    TraceEntry,
    WorkItem,
)
from .normalization import (
    THUMB_WIDTH,
    build_search_query,
    is_rejected_url,
    normalize_query,
    strip_decade_hints,
    to_redirector_url,
    to_thumbnail_url,
)
from .types import (
    LinkPriority,
    ResolutionStatus,
    ResolverMode,
    Tier,
    TraceOutcome,
)

__all__ = [
    # Types
    "LinkPriority",
    "ResolutionStatus",
    "ResolverMode",
    "Tier",
    "TraceOutcome",
    # Models
    "ExclusionEntry",
    "Failed",
    "Found",
    "NoImage",
    "Resolution",
    "ResolutionResult",
    "ResolverCandidate",
    "SearchHit",
    "SearchRequest",
    "TraceEntry",
    "WorkItem",
    # Normalization
    "THUMB_WIDTH",
    "build_search_query",
    "is_rejected_url",
    "normalize_query",
    "strip_decade_hints",
    "to_redirector_url",
    "to_thumbnail_url",
    # Exceptions
    "CacheError",
    "CandidateRejectedError",
    "ConfigurationError",
    "EraframeError",
    "NetworkError",
    "StoreUnavailableError",
]
