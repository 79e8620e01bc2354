"""Tests for the HTTP API client and the in-process helper."""

from __future__ import annotations

import json

import pytest
import respx
from httpx import Response

from eraframe.client import EraframeClient, resolve_images
from eraframe.core.exceptions import NetworkError
from eraframe.core.models import Failed, Found, NoImage, SearchRequest
from eraframe.core.types import ResolverMode

BASE_URL = "http://eraframe.test"
IMAGE = "https://images.example.com/berlin-wall.jpg"


@pytest.fixture
async def client():
    client = EraframeClient(f"{BASE_URL}/")
    yield client
    await client.close()


class TestResolve:
    """Tests for remote resolution."""

    @respx.mock
    async def test_resolve_batch(self, client: EraframeClient, sample_requests):
        route = respx.post(f"{BASE_URL}/api/v1/images/resolve").mock(
            return_value=Response(
                200,
                json={
                    "success": True,
                    "images": [
                        {"eventId": "e1", "imageUrl": IMAGE, "source": "https://x", "status": "found"},
                        {"eventId": "e2", "imageUrl": None, "source": None, "status": "none"},
                        {"eventId": "e3", "imageUrl": None, "status": "error", "reason": "timeout"},
                    ],
                },
            )
        )

        results = await client.resolve_batch(sample_requests, ResolverMode.FULL)

        assert results["e1"] == Found(image_url=IMAGE, source="https://x")
        assert results["e2"] == NoImage()
        assert results["e3"] == Failed(reason="timeout")
        assert results["e4"] == Failed(reason="missing from response")

        body = json.loads(route.calls.last.request.content)
        assert body["mode"] == "full"
        assert body["includeTrace"] is False
        assert body["queries"][0] == {"eventId": "e1", "query": "Berlin Wall falls", "year": 1989}

    async def test_empty_batch(self, client: EraframeClient):
        assert await client.resolve_batch([], ResolverMode.FAST) == {}

    @respx.mock
    async def test_resolve_single(self, client: EraframeClient):
        respx.post(f"{BASE_URL}/api/v1/images/resolve").mock(
            return_value=Response(
                200,
                json={
                    "success": True,
                    "images": [{"eventId": "q", "imageUrl": IMAGE, "status": "found"}],
                },
            )
        )

        result = await client.resolve("Walkman", 1979, ResolverMode.FAST)

        assert isinstance(result, Found)
        assert result.image_url == IMAGE

    @respx.mock
    async def test_server_reported_failure(self, client: EraframeClient, sample_requests):
        respx.post(f"{BASE_URL}/api/v1/images/resolve").mock(
            return_value=Response(200, json={"success": False, "images": [], "error": "boom"})
        )

        with pytest.raises(NetworkError, match="boom"):
            await client.resolve_batch(sample_requests, ResolverMode.FAST)

    @respx.mock
    async def test_http_error(self, client: EraframeClient, sample_requests):
        respx.post(f"{BASE_URL}/api/v1/images/resolve").mock(return_value=Response(422))

        with pytest.raises(NetworkError) as exc_info:
            await client.resolve_batch(sample_requests, ResolverMode.FAST)
        assert exc_info.value.status_code == 422


class TestExclusions:
    """Tests for the exclusion endpoints."""

    @respx.mock
    async def test_list_exclusions(self, client: EraframeClient):
        respx.get(f"{BASE_URL}/api/v1/exclusions").mock(
            return_value=Response(200, json={"exclusions": [{"imageUrl": IMAGE}], "total": 1})
        )

        assert await client.list_exclusions() == [IMAGE]

    @respx.mock
    async def test_add_exclusion(self, client: EraframeClient):
        route = respx.post(f"{BASE_URL}/api/v1/exclusions").mock(
            return_value=Response(
                201,
                json={
                    "imageUrl": IMAGE,
                    "titleHint": "Berlin Wall falls",
                    "queryHint": None,
                    "insertedAt": "2024-05-01T12:00:00Z",
                },
            )
        )

        entry = await client.add_exclusion(IMAGE, title_hint="Berlin Wall falls")

        assert entry.image_url == IMAGE
        assert entry.title_hint == "Berlin Wall falls"
        assert entry.inserted_at.year == 2024
        assert json.loads(route.calls.last.request.content)["imageUrl"] == IMAGE

    @respx.mock
    async def test_is_excluded(self, client: EraframeClient):
        route = respx.get(f"{BASE_URL}/api/v1/exclusions/check").mock(
            return_value=Response(200, json={"imageUrl": IMAGE, "excluded": True})
        )

        assert await client.is_excluded(IMAGE) is True
        assert route.calls.last.request.url.params["url"] == IMAGE

    @respx.mock
    async def test_non_json_reply(self, client: EraframeClient):
        respx.get(f"{BASE_URL}/api/v1/exclusions").mock(
            return_value=Response(200, text="<html>proxy error</html>")
        )

        with pytest.raises(NetworkError) as exc_info:
            await client.list_exclusions()
        assert exc_info.value.source == "eraframe-api"


class TestResolveImages:
    """Tests for the in-process convenience function."""

    async def test_without_search_key(self, mock_settings_minimal):
        requests = [SearchRequest(id="a", query="Walkman"), SearchRequest(id="b", query="")]

        results = await resolve_images(requests, settings=mock_settings_minimal)

        assert isinstance(results["a"], NoImage)
        assert results["b"] == Failed(reason="empty query")
