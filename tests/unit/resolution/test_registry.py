"""Tests for ProviderRegistry."""

from __future__ import annotations

from unittest.mock import AsyncMock

from eraframe.config import EraframeSettings
from eraframe.resolution.providers.firecrawl import FirecrawlProvider
from eraframe.resolution.registry import ProviderRegistry


class TestProviderRegistry:
    """Tests for building a resolver from settings."""

    def test_from_settings_with_key(self, mock_settings: EraframeSettings):
        registry = ProviderRegistry.from_settings(mock_settings)

        assert isinstance(registry.search, FirecrawlProvider)
        assert registry.search.config.api_key == "test-firecrawl-key"
        assert registry.resolver_config.query_timeout == 5.0
        assert len(registry.providers) == 3

    def test_from_settings_without_key(self, mock_settings_minimal: EraframeSettings):
        registry = ProviderRegistry.from_settings(mock_settings_minimal)

        assert registry.search is None
        assert registry.get_resolver().search_enabled is False
        assert len(registry.providers) == 2

    def test_resolver_shares_providers(self, mock_settings: EraframeSettings):
        registry = ProviderRegistry.from_settings(mock_settings)
        excluded = {"https://example.com/a.jpg"}

        resolver = registry.get_resolver(is_excluded=excluded.__contains__)

        assert resolver.search_enabled is True
        assert resolver.config is registry.resolver_config

    async def test_close_all(self, mock_settings: EraframeSettings):
        registry = ProviderRegistry.from_settings(mock_settings)
        for provider in registry.providers:
            provider.close = AsyncMock()

        await registry.close_all()

        for provider in registry.providers:
            provider.close.assert_awaited_once()
