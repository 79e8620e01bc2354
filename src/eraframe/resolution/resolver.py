"""Tiered image resolver."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

from eraframe.core.exceptions import CandidateRejectedError, EraframeError, NetworkError
from eraframe.core.models import (
    Failed,
    Found,
    NoImage,
    ResolverCandidate,
    SearchHit,
    SearchRequest,
    TraceEntry,
)
from eraframe.core.normalization import (
    build_search_query,
    is_asset_host,
    is_file_page,
    is_knowledge_host,
    parse_article,
)
from eraframe.core.types import LinkPriority, ResolverMode, Tier, TraceOutcome
from eraframe.resolution.normalizer import CandidateNormalizer
from eraframe.resolution.providers.firecrawl import FirecrawlProvider
from eraframe.resolution.providers.wikipedia import WikipediaPageImageProvider

logger = logging.getLogger(__name__)


@dataclass
class ResolverConfig:
    """Tuning for one resolver instance."""

    search_result_limit: int = 5
    search_bias: str | None = "wikipedia"
    max_scrape_candidates: int = 10

    # Budget for all tiers of a single query (seconds)
    query_timeout: float = 30.0


@dataclass
class _Trace:
    entries: list[TraceEntry] = field(default_factory=list)

    def add(
        self,
        tier: Tier,
        target: str,
        outcome: TraceOutcome,
        started: float,
        detail: str | None = None,
    ) -> None:
        self.entries.append(
            TraceEntry(
                tier=tier,
                target=target,
                outcome=outcome,
                elapsed_ms=round((time.monotonic() - started) * 1000, 1),
                detail=detail,
            )
        )


def rank_link(url: str) -> LinkPriority:
    """Scraped link priority: asset-host URL, then file page, then anything else."""
    if is_asset_host(url):
        return LinkPriority.ASSET
    if is_file_page(url):
        return LinkPriority.FILE_PAGE
    return LinkPriority.OTHER


class ImageResolver:
    """
    Maps a loose text query to a single directly fetchable image URL.

    Tiers are attempted in order and the first accepted candidate wins:

    1. Web search biased towards the knowledge site
    2. Each hit's own URL, then its og:image, then its metadata image
    3. Page-image lookup for hits that are knowledge-site articles
    4. Link scraping of the first knowledge-site hit (FULL mode only)

    The resolver keeps no state between calls other than HTTP connection
    pools, so one instance can serve any number of concurrent queries.
    """

    def __init__(
        self,
        search: FirecrawlProvider | None,
        page_images: WikipediaPageImageProvider,
        normalizer: CandidateNormalizer,
        config: ResolverConfig | None = None,
        is_excluded: Callable[[str], bool] | None = None,
    ) -> None:
        self._search = search
        self._page_images = page_images
        self._normalizer = normalizer
        self.config = config or ResolverConfig()
        # Excluded URLs are rejected like any other invalid candidate
        self._is_excluded = is_excluded

    @property
    def search_enabled(self) -> bool:
        return self._search is not None

    async def resolve(
        self,
        query: str,
        year_hint: int | None,
        mode: ResolverMode,
    ) -> Found | NoImage | Failed:
        """
        Resolve one query.

        Args:
            query: Loose text query
            year_hint: Year the query refers to, appended to the search text
            mode: FAST skips the scrape tier, FULL allows it

        Returns:
            Found, NoImage or Failed, each carrying the trace of steps taken
        """
        trace = _Trace()
        if not query or not query.strip():
            return Failed(reason="empty query")

        try:
            async with asyncio.timeout(self.config.query_timeout):
                resolution = await self._resolve(query, year_hint, ResolverMode(mode), trace)
        except TimeoutError:
            logger.warning(f"Resolution of '{query}' timed out after {self.config.query_timeout}s")
            return Failed(reason="timeout", trace=trace.entries)
        except EraframeError as e:
            logger.warning(f"Resolution of '{query}' failed: {e.message}")
            return Failed(reason=e.message, trace=trace.entries)

        return resolution

    async def resolve_batch(
        self,
        requests: Sequence[SearchRequest],
        mode: ResolverMode,
    ) -> dict[str, Found | NoImage | Failed]:
        """Resolve all requests concurrently, keyed by request id."""
        results = await asyncio.gather(
            *(self.resolve(r.query, r.year_hint, mode) for r in requests),
            return_exceptions=True,
        )

        resolved: dict[str, Found | NoImage | Failed] = {}
        for request, result in zip(requests, results):
            if isinstance(result, BaseException):
                logger.exception(f"Resolver crashed for request {request.id}", exc_info=result)
                result = Failed(reason=str(result) or type(result).__name__)
            resolved[request.id] = result

        found = sum(1 for r in resolved.values() if isinstance(r, Found))
        logger.info(f"Resolved batch of {len(requests)} ({found} found, mode={mode})")
        return resolved

    async def _resolve(
        self,
        query: str,
        year_hint: int | None,
        mode: ResolverMode,
        trace: _Trace,
    ) -> Found | NoImage | Failed:
        search_text = build_search_query(query, year_hint, self.config.search_bias)

        # Tier 1: search
        started = time.monotonic()
        if self._search is None:
            trace.add(Tier.SEARCH, search_text, TraceOutcome.EMPTY, started, "search not configured")
            return NoImage(trace=trace.entries)
        try:
            hits = await self._search.search(search_text, self.config.search_result_limit)
        except NetworkError as e:
            trace.add(Tier.SEARCH, search_text, TraceOutcome.ERROR, started, e.message)
            return Failed(reason=f"search failed: {e.message}", trace=trace.entries)

        if not hits:
            trace.add(Tier.SEARCH, search_text, TraceOutcome.EMPTY, started)
            return NoImage(trace=trace.entries)
        trace.add(Tier.SEARCH, search_text, TraceOutcome.ACCEPTED, started, f"{len(hits)} results")

        # Tier 2: direct URL, then og:image, then metadata image
        for hit in hits:
            for candidate in self._hit_candidates(hit):
                if accepted := await self._try(candidate, trace):
                    return Found(image_url=accepted, source=hit.url, trace=trace.entries)

        # Tier 3: page-image lookup for article hits
        for hit in hits:
            article = parse_article(hit.url)
            if article is None:
                continue
            if accepted := await self._try_page_image(hit.url, *article, trace=trace):
                return Found(image_url=accepted, source=hit.url, trace=trace.entries)

        # Tier 4: scrape links (never in FAST mode)
        if mode == ResolverMode.FULL:
            target = next(
                (h.url for h in hits if is_knowledge_host(h.url) or is_asset_host(h.url)),
                None,
            )
            if target and (accepted := await self._try_scrape(target, trace)):
                return Found(image_url=accepted, source=target, trace=trace.entries)

        return NoImage(source=hits[0].url, trace=trace.entries)

    def _hit_candidates(self, hit: SearchHit) -> list[ResolverCandidate]:
        candidates = [ResolverCandidate(url=hit.url, tier=Tier.DIRECT, page_url=hit.url)]
        for image in (hit.og_image, hit.meta_image):
            if image:
                candidates.append(
                    ResolverCandidate(url=image, tier=Tier.METADATA, page_url=hit.url)
                )
        return candidates

    async def _try(self, candidate: ResolverCandidate, trace: _Trace) -> str | None:
        """Normalize one candidate, recording the outcome. Returns the accepted URL."""
        started = time.monotonic()
        try:
            accepted = await self._normalizer.normalize(candidate.url)
        except CandidateRejectedError as e:
            trace.add(candidate.tier, candidate.url, TraceOutcome.REJECTED, started, e.message)
            return None
        except NetworkError as e:
            logger.debug(f"Candidate {candidate.url} failed: {e.message}")
            trace.add(candidate.tier, candidate.url, TraceOutcome.ERROR, started, e.message)
            return None

        if self._is_excluded and (
            self._is_excluded(accepted) or self._is_excluded(candidate.url)
        ):
            trace.add(candidate.tier, candidate.url, TraceOutcome.REJECTED, started, "excluded")
            return None

        trace.add(candidate.tier, candidate.url, TraceOutcome.ACCEPTED, started, accepted)
        return accepted

    async def _try_page_image(
        self,
        page_url: str,
        title: str,
        lang: str,
        trace: _Trace,
    ) -> str | None:
        started = time.monotonic()
        try:
            thumbnail = await self._page_images.page_image(title, lang)
        except NetworkError as e:
            logger.debug(f"Page-image lookup for '{title}' ({lang}) failed: {e.message}")
            trace.add(Tier.PAGE_IMAGE, title, TraceOutcome.ERROR, started, e.message)
            return None

        if not thumbnail:
            trace.add(Tier.PAGE_IMAGE, title, TraceOutcome.EMPTY, started)
            return None
        return await self._try(
            ResolverCandidate(url=thumbnail, tier=Tier.PAGE_IMAGE, page_url=page_url), trace
        )

    async def _try_scrape(self, page_url: str, trace: _Trace) -> str | None:
        started = time.monotonic()
        try:
            links = await self._search.scrape_links(page_url)
        except NetworkError as e:
            logger.debug(f"Scrape of {page_url} failed: {e.message}")
            trace.add(Tier.SCRAPE, page_url, TraceOutcome.ERROR, started, e.message)
            return None

        candidates = sorted(
            (
                ResolverCandidate(
                    url=link, tier=Tier.SCRAPE, page_url=page_url, priority=rank_link(link)
                )
                for link in dict.fromkeys(links)
            ),
            key=lambda c: c.priority,
        )
        outcome = TraceOutcome.ACCEPTED if candidates else TraceOutcome.EMPTY
        trace.add(Tier.SCRAPE, page_url, outcome, started, f"{len(candidates)} links")

        for candidate in candidates[: self.config.max_scrape_candidates]:
            if accepted := await self._try(candidate, trace):
                return accepted
        return None

    async def close(self) -> None:
        """Close all providers."""
        if self._search:
            await self._search.close()
        await self._page_images.close()
        await self._normalizer.close()

    async def __aenter__(self) -> "ImageResolver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
