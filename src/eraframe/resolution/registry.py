"""Provider registry for building a configured ImageResolver."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from eraframe.resolution.base import AbstractProvider, ProviderConfig
from eraframe.resolution.normalizer import CandidateNormalizer
from eraframe.resolution.providers.firecrawl import FirecrawlProvider
from eraframe.resolution.providers.wikipedia import WikipediaPageImageProvider
from eraframe.resolution.resolver import ImageResolver, ResolverConfig

if TYPE_CHECKING:
    from eraframe.config import EraframeSettings

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Factory for creating and managing provider instances.

    Handles provider configuration based on available API keys and
    wires them into an ImageResolver.
    """

    def __init__(self) -> None:
        self.search: FirecrawlProvider | None = None
        self.page_images = WikipediaPageImageProvider()
        self.normalizer = CandidateNormalizer()
        self.resolver_config = ResolverConfig()

    @property
    def providers(self) -> list[AbstractProvider]:
        providers: list[AbstractProvider] = [self.page_images, self.normalizer]
        if self.search:
            providers.insert(0, self.search)
        return providers

    def get_resolver(
        self,
        is_excluded: Callable[[str], bool] | None = None,
    ) -> ImageResolver:
        """Get an ImageResolver sharing this registry's providers."""
        return ImageResolver(
            search=self.search,
            page_images=self.page_images,
            normalizer=self.normalizer,
            config=self.resolver_config,
            is_excluded=is_excluded,
        )

    @classmethod
    def from_settings(cls, settings: "EraframeSettings") -> "ProviderRegistry":
        """
        Create a registry with providers configured from settings.

        Without a Firecrawl API key the search tier is disabled and every
        query resolves to no image.
        """
        registry = cls()
        timeout = settings.http_timeout

        if settings.firecrawl_api_key:
            registry.search = FirecrawlProvider(
                ProviderConfig(
                    api_key=settings.firecrawl_api_key,
                    base_url=settings.firecrawl_base_url,
                    timeout=timeout,
                )
            )
        else:
            logger.warning("Firecrawl API key not configured, image search is disabled")

        registry.page_images = WikipediaPageImageProvider(ProviderConfig(timeout=timeout))
        registry.normalizer = CandidateNormalizer(ProviderConfig(timeout=timeout))
        registry.resolver_config = ResolverConfig(
            search_result_limit=settings.search_result_limit,
            search_bias=settings.search_bias or None,
            max_scrape_candidates=settings.max_scrape_candidates,
            query_timeout=settings.query_timeout,
        )
        return registry

    async def close_all(self) -> None:
        """Close all registered providers."""
        for provider in self.providers:
            await provider.close()
