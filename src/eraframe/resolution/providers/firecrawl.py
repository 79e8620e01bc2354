"""Firecrawl search and link-scrape provider."""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from eraframe.core.exceptions import ConfigurationError, NetworkError
from eraframe.core.models import SearchHit
from eraframe.resolution.base import AbstractProvider, ProviderConfig

logger = logging.getLogger(__name__)

# Metadata keys Firecrawl uses for the social-preview image, in lookup order
OG_IMAGE_KEYS = ("ogImage", "og:image", "og:image:url", "og:image:secure_url")
# Generic metadata image keys
META_IMAGE_KEYS = ("image", "twitter:image", "twitterImage", "thumbnail")


def _first_string(metadata: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    """Return the first non-empty string value among keys (lists use their first item)."""
    for key in keys:
        value = metadata.get(key)
        if isinstance(value, list):
            value = next((v for v in value if isinstance(v, str) and v.strip()), None)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class FirecrawlProvider(AbstractProvider):
    """
    Firecrawl API client for web search and link scraping.

    API Documentation: https://docs.firecrawl.dev/api-reference/introduction
    """

    SOURCE_NAME: ClassVar[str] = "firecrawl"
    BASE_URL: ClassVar[str] = "https://api.firecrawl.dev"

    def __init__(self, config: ProviderConfig | None = None) -> None:
        super().__init__(config)
        if not self.config.api_key:
            raise ConfigurationError("Firecrawl API key is required")

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self.config.api_key}"
        headers["Content-Type"] = "application/json"
        return headers

    async def search(self, query: str, limit: int) -> list[SearchHit]:
        """
        Run a web search and return ranked hits with page metadata.

        Args:
            query: Full search text (year hint and bias already applied)
            limit: Maximum number of results

        Returns:
            Hits in rank order; empty when the search matched nothing

        Raises:
            NetworkError: If the request fails or Firecrawl reports failure
        """
        response = await self._request(
            "POST",
            "/v1/search",
            json={
                "query": query,
                "limit": limit,
                # Page metadata (og:image etc.) is only returned for scraped results
                "scrapeOptions": {"formats": ["markdown"], "onlyMainContent": True},
            },
        )
        data = self._json(response)
        if data.get("success") is False:
            raise NetworkError(
                message=f"Firecrawl search failed: {data.get('error', 'unknown error')}",
                source=self.source_name,
            )

        hits = []
        for item in data.get("data") or []:
            hit = self._parse_hit(item) if isinstance(item, dict) else None
            if hit:
                hits.append(hit)
        return hits[:limit]

    async def scrape_links(self, url: str) -> list[str]:
        """Scrape a page and return its outbound links."""
        response = await self._request(
            "POST",
            "/v1/scrape",
            json={"url": url, "formats": ["links"]},
        )
        data = self._json(response)
        if data.get("success") is False:
            raise NetworkError(
                message=f"Firecrawl scrape failed: {data.get('error', 'unknown error')}",
                source=self.source_name,
            )
        page = data.get("data")
        links = page.get("links") if isinstance(page, dict) else None
        if not isinstance(links, list):
            return []
        return [link for link in links if isinstance(link, str) and link]

    def _parse_hit(self, item: dict[str, Any]) -> SearchHit | None:
        """Parse one Firecrawl search result."""
        metadata = item.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        url = item.get("url") or metadata.get("sourceURL") or metadata.get("url")
        if not url:
            return None

        return SearchHit(
            url=url,
            title=item.get("title") or metadata.get("title"),
            og_image=_first_string(metadata, OG_IMAGE_KEYS),
            meta_image=_first_string(metadata, META_IMAGE_KEYS),
        )
