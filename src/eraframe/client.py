"""Library clients: the HTTP API client and an in-process convenience function."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, ClassVar

from eraframe.config import EraframeSettings
from eraframe.core.exceptions import NetworkError
from eraframe.core.models import ExclusionEntry, Failed, Found, NoImage, SearchRequest
from eraframe.core.types import ResolutionStatus, ResolverMode
from eraframe.resolution.base import AbstractProvider, ProviderConfig
from eraframe.resolution.registry import ProviderRegistry

logger = logging.getLogger(__name__)


class EraframeClient(AbstractProvider):
    """
    Client for a running eraframe API.

    Satisfies the resolver interface expected by ResolutionQueue, and the
    remote exclusion backend uses it to reach the durable store.

    Usage:
        async with EraframeClient("http://localhost:8000") as client:
            resolution = await client.resolve("Berlin Wall falls", 1989, ResolverMode.FAST)
            await client.add_exclusion(resolution.image_url)
    """

    SOURCE_NAME: ClassVar[str] = "eraframe-api"
    API_PREFIX: ClassVar[str] = "/api/v1"

    def __init__(self, base_url: str | None = None, *, timeout: float = 60.0) -> None:
        if base_url is None:
            from eraframe.config import get_settings

            base_url = get_settings().api_url
        super().__init__(ProviderConfig(base_url=base_url.rstrip("/"), timeout=timeout))

    async def resolve_batch(
        self,
        requests: Sequence[SearchRequest],
        mode: ResolverMode,
        *,
        include_trace: bool = False,
    ) -> dict[str, Found | NoImage | Failed]:
        """Resolve a batch on the server, keyed by request id."""
        if not requests:
            return {}
        payload: dict[str, Any] = {
            "queries": [
                {"eventId": r.id, "query": r.query, "year": r.year_hint} for r in requests
            ],
            "mode": ResolverMode(mode).value,
            "includeTrace": include_trace,
        }
        response = await self._request(
            "POST", f"{self.API_PREFIX}/images/resolve", json=payload
        )
        data = self._json(response)
        if not data.get("success"):
            raise NetworkError(
                message=f"Batch resolution failed: {data.get('error', 'unknown error')}",
                source=self.source_name,
                status_code=response.status_code,
            )

        resolved: dict[str, Found | NoImage | Failed] = {}
        for image in data.get("images", []):
            resolved[image["eventId"]] = self._parse_image(image)
        # One output per input, even if the server dropped an id
        for request in requests:
            resolved.setdefault(request.id, Failed(reason="missing from response"))
        return resolved

    async def resolve(
        self,
        query: str,
        year_hint: int | None,
        mode: ResolverMode,
    ) -> Found | NoImage | Failed:
        """Resolve one query on the server."""
        request = SearchRequest(id="q", query=query, year_hint=year_hint)
        results = await self.resolve_batch([request], mode)
        return results[request.id]

    async def list_exclusions(self) -> list[str]:
        response = await self._request("GET", f"{self.API_PREFIX}/exclusions")
        return [item["imageUrl"] for item in self._json(response).get("exclusions", [])]

    async def add_exclusion(
        self,
        image_url: str,
        *,
        title_hint: str | None = None,
        query_hint: str | None = None,
    ) -> ExclusionEntry:
        response = await self._request(
            "POST",
            f"{self.API_PREFIX}/exclusions",
            json={"imageUrl": image_url, "titleHint": title_hint, "queryHint": query_hint},
        )
        data = self._json(response)
        return ExclusionEntry(
            image_url=data["imageUrl"],
            title_hint=data.get("titleHint"),
            query_hint=data.get("queryHint"),
            inserted_at=data["insertedAt"],
        )

    async def is_excluded(self, image_url: str) -> bool:
        response = await self._request(
            "GET", f"{self.API_PREFIX}/exclusions/check", params={"url": image_url}
        )
        return bool(self._json(response).get("excluded"))

    @staticmethod
    def _parse_image(image: dict[str, Any]) -> Found | NoImage | Failed:
        status = image.get("status")
        if status == ResolutionStatus.ERROR:
            return Failed(reason=image.get("reason") or "error")
        if image.get("imageUrl"):
            return Found(image_url=image["imageUrl"], source=image.get("source"))
        return NoImage(source=image.get("source"))


# Convenience function for one-off resolutions
async def resolve_images(
    requests: Sequence[SearchRequest],
    mode: ResolverMode | None = None,
    *,
    settings: EraframeSettings | None = None,
) -> dict[str, Found | NoImage | Failed]:
    """
    Resolve a batch in-process, without the web server.

    For repeated batches keep a ProviderRegistry around instead, so HTTP
    connection pools are reused.
    """
    settings = settings or EraframeSettings()
    registry = ProviderRegistry.from_settings(settings)
    try:
        resolver = registry.get_resolver()
        return await resolver.resolve_batch(requests, mode or settings.default_mode)
    finally:
        await registry.close_all()
