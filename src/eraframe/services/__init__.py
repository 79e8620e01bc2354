"""Services layer: exclusion store, client queue, cached resolution."""

from .exclusions import (
    DatabaseExclusionBackend,
    ExclusionBackend,
    ExclusionStore,
    LocalExclusionCache,
    RemoteExclusionBackend,
)
from .queue import ResolutionQueue, Resolver
from .resolution import ResolutionService

__all__ = [
    "DatabaseExclusionBackend",
    "ExclusionBackend",
    "ExclusionStore",
    "LocalExclusionCache",
    "RemoteExclusionBackend",
    "ResolutionQueue",
    "ResolutionService",
    "Resolver",
]
