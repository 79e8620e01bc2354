"""Eraframe - resolves loose text queries about past events into fetchable image URLs."""

from eraframe.client import EraframeClient, resolve_images
from eraframe.core.models import (
    ExclusionEntry,
    Failed,
    Found,
    NoImage,
    ResolutionResult,
    SearchRequest,
)
from eraframe.core.types import ResolutionStatus, ResolverMode
from eraframe.resolution.resolver import ImageResolver
from eraframe.services.exclusions import ExclusionStore, LocalExclusionCache
from eraframe.services.queue import ResolutionQueue

__version__ = "0.1.0"
__all__ = [
    # Client
    "EraframeClient",
    "resolve_images",
    # Types
    "ResolutionStatus",
    "ResolverMode",
    # Models
    "ExclusionEntry",
    "Failed",
    "Found",
    "NoImage",
    "ResolutionResult",
    "SearchRequest",
    # Components
    "ExclusionStore",
    "ImageResolver",
    "LocalExclusionCache",
    "ResolutionQueue",
    # Version
    "__version__",
]
