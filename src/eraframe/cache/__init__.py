"""Caching layer with Redis."""

from .client import AsyncRedisClient
from .keys import CacheKeys

__all__ = [
    "AsyncRedisClient",
    "CacheKeys",
]
