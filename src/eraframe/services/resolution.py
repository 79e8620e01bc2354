"""Resolution service: cached, exclusion-aware batch resolution."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from eraframe.cache.keys import CacheKeys
from eraframe.core.exceptions import CacheError
from eraframe.core.models import Failed, Found, NoImage, SearchRequest, TraceEntry
from eraframe.core.types import ResolverMode, Tier, TraceOutcome

if TYPE_CHECKING:
    from eraframe.cache.client import AsyncRedisClient
    from eraframe.resolution.resolver import ImageResolver
    from eraframe.services.exclusions import ExclusionStore

logger = logging.getLogger(__name__)


class ResolutionService:
    """
    Service for resolving image queries with caching and exclusion filtering.

    Orchestrates the resolution flow:
    1. Check the cache for an earlier Found result
    2. Drop the cached entry if its URL has since been excluded
    3. Resolve through the tiered resolver
    4. Filter excluded URLs, cache what remains
    """

    CACHE_TTL = 3600 * 24 * 7  # 7 days

    def __init__(
        self,
        resolver: "ImageResolver",
        exclusions: "ExclusionStore | None" = None,
        cache: "AsyncRedisClient | None" = None,
        cache_ttl: int | None = None,
    ) -> None:
        """
        Initialize the resolution service.

        Args:
            resolver: Tiered image resolver
            exclusions: Optional exclusion store used to filter results
            cache: Optional Redis client for caching Found results
            cache_ttl: Cache TTL in seconds (defaults to CACHE_TTL)
        """
        self._resolver = resolver
        self._exclusions = exclusions
        self._cache = cache
        self._cache_ttl = cache_ttl or self.CACHE_TTL

    async def resolve(
        self,
        query: str,
        year_hint: int | None,
        mode: ResolverMode,
    ) -> Found | NoImage | Failed:
        """Resolve one query, serving from cache when possible."""
        key = CacheKeys.resolution(query, year_hint, mode)

        cached = await self._cache_get(key)
        if cached and cached.get("image_url"):
            if not self._is_excluded(cached["image_url"]):
                logger.debug(f"Cache hit for image resolution: {query}")
                return Found(
                    image_url=cached["image_url"],
                    source=cached.get("source"),
                    trace=[TraceEntry(tier=Tier.CACHE, target=key, outcome=TraceOutcome.ACCEPTED)],
                )
            logger.debug(f"Cached image for '{query}' is excluded, resolving again")
            await self._cache_delete(key)

        resolution = await self._resolver.resolve(query, year_hint, mode)

        if isinstance(resolution, Found):
            if self._is_excluded(resolution.image_url):
                return NoImage(source=resolution.source, trace=resolution.trace)
            await self._cache_set(
                key, {"image_url": resolution.image_url, "source": resolution.source}
            )

        return resolution

    async def resolve_batch(
        self,
        requests: Sequence[SearchRequest],
        mode: ResolverMode,
    ) -> dict[str, Found | NoImage | Failed]:
        """Resolve a batch fully in parallel, keyed by request id."""
        start = time.monotonic()

        results = await asyncio.gather(
            *(self.resolve(r.query, r.year_hint, mode) for r in requests),
            return_exceptions=True,
        )

        resolved: dict[str, Found | NoImage | Failed] = {}
        for request, result in zip(requests, results):
            if isinstance(result, BaseException):
                logger.error(f"Resolution crashed for {request.id}: {result!r}")
                result = Failed(reason=str(result) or type(result).__name__)
            resolved[request.id] = result

        found = sum(1 for r in resolved.values() if isinstance(r, Found))
        duration = time.monotonic() - start
        logger.info(
            f"Image batch resolved in {duration:.2f}s: {found}/{len(requests)} found (mode={mode})"
        )
        return resolved

    def _is_excluded(self, url: str) -> bool:
        return self._exclusions is not None and self._exclusions.is_excluded(url)

    async def _cache_get(self, key: str) -> dict | None:
        if self._cache is None:
            return None
        try:
            value = await self._cache.get(key)
        except CacheError as e:
            logger.warning(f"Cache unavailable: {e.message}")
            return None
        return value if isinstance(value, dict) else None

    async def _cache_set(self, key: str, value: dict) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set(key, value, ttl=self._cache_ttl)
        except CacheError as e:
            logger.warning(f"Cache unavailable: {e.message}")

    async def _cache_delete(self, key: str) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.delete(key)
        except CacheError as e:
            logger.warning(f"Cache unavailable: {e.message}")
