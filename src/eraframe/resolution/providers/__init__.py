"""Upstream providers: web search, link scraping, page images."""

from .firecrawl import FirecrawlProvider
from .wikipedia import WikipediaPageImageProvider

__all__ = ["FirecrawlProvider", "WikipediaPageImageProvider"]
