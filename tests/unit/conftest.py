"""Unit test fixtures: provider configs, response builders and upstream payloads."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import Response

from eraframe.resolution.base import ProviderConfig

# ============================================================================
# Provider Configuration Fixtures
# ============================================================================


@pytest.fixture
def provider_config() -> ProviderConfig:
    """Provider config with a dummy API key."""
    return ProviderConfig(
        api_key="test-api-key",
        timeout=5.0,
    )


@pytest.fixture
def provider_config_no_key() -> ProviderConfig:
    """Create a provider config without API key."""
    return ProviderConfig(api_key=None, timeout=5.0)


# ============================================================================
# Mock Response Helpers
# ============================================================================


def mock_json_response(data: dict[str, Any], status_code: int = 200) -> Response:
    """Create a mock JSON response."""
    return Response(
        status_code=status_code,
        json=data,
        headers={"Content-Type": "application/json"},
    )


def mock_error_response(status_code: int, message: str = "Error") -> Response:
    """Create a mock error response."""
    return Response(
        status_code=status_code,
        json={"error": message},
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture
def mock_responses():
    """Response builders, for tests that need a status other than 200."""
    return {
        "json": mock_json_response,
        "error": mock_error_response,
    }


# ============================================================================
# Upstream API Response Fixtures
# ============================================================================


@pytest.fixture
def firecrawl_search_response() -> dict[str, Any]:
    """Sample Firecrawl /v1/search response with scraped metadata."""
    return {
        "success": True,
        "data": [
            {
                "url": "https://en.wikipedia.org/wiki/Fall_of_the_Berlin_Wall",
                "title": "Fall of the Berlin Wall - Wikipedia",
                "description": "The fall of the Berlin Wall on 9 November 1989...",
                "metadata": {
                    "title": "Fall of the Berlin Wall - Wikipedia",
                    "ogImage": (
                        "https://upload.wikimedia.org/wikipedia/commons/a/a1/"
                        "Berlin_Wall_1989.jpg"
                    ),
                    "sourceURL": "https://en.wikipedia.org/wiki/Fall_of_the_Berlin_Wall",
                    "statusCode": 200,
                },
            },
            {
                "url": "https://www.history.com/topics/cold-war/berlin-wall",
                "title": "Berlin Wall - History",
                "metadata": {
                    "og:image": ["https://assets.history.com/berlin-wall-hero.jpg"],
                    "twitter:image": "https://assets.history.com/berlin-wall-card.png",
                },
            },
        ],
    }


@pytest.fixture
def firecrawl_scrape_response() -> dict[str, Any]:
    """Sample Firecrawl /v1/scrape response with links."""
    return {
        "success": True,
        "data": {
            "links": [
                "https://en.wikipedia.org/wiki/East_Germany",
                "https://en.wikipedia.org/wiki/File:Berlin_Wall_1989.jpg",
                "https://upload.wikimedia.org/wikipedia/commons/a/a1/Berlin_Wall_1989.jpg",
                "https://upload.wikimedia.org/wikipedia/commons/b/b2/Anthem.ogg",
            ],
            "metadata": {"sourceURL": "https://en.wikipedia.org/wiki/Fall_of_the_Berlin_Wall"},
        },
    }


@pytest.fixture
def pageimages_response() -> dict[str, Any]:
    """Sample MediaWiki pageimages response (formatversion=2)."""
    return {
        "batchcomplete": True,
        "query": {
            "pages": [
                {
                    "pageid": 12345,
                    "ns": 0,
                    "title": "Fall of the Berlin Wall",
                    "thumbnail": {
                        "source": (
                            "https://upload.wikimedia.org/wikipedia/commons/thumb/a/a1/"
                            "Berlin_Wall_1989.jpg/960px-Berlin_Wall_1989.jpg"
                        ),
                        "width": 960,
                        "height": 640,
                    },
                    "pageimage": "Berlin_Wall_1989.jpg",
                }
            ]
        },
    }
