"""Shared HTTP plumbing for upstream providers."""

from __future__ import annotations

import time
from abc import ABC
from contextlib import contextmanager
from typing import Any, ClassVar, Iterator

import httpx
from pydantic import BaseModel

from eraframe.core.exceptions import NetworkError


class ProviderConfig(BaseModel):
    """Connection settings for one upstream provider."""

    api_key: str | None = None
    base_url: str | None = None
    timeout: float = 15.0


class AbstractProvider(ABC):
    """
    Base class for anything eraframe talks to over HTTP.

    Subclasses set SOURCE_NAME (and usually BASE_URL) and call ``_request``.
    The underlying httpx.AsyncClient is created on first use and reused
    until ``close()``; redirects are always followed. Transport failures
    and non-2xx responses both surface as NetworkError.
    """

    SOURCE_NAME: ClassVar[str]
    BASE_URL: ClassVar[str] = ""

    def __init__(self, config: ProviderConfig | None = None) -> None:
        self.config = config or ProviderConfig()
        self._client: httpx.AsyncClient | None = None
        self._calls = {"success": 0, "failure": 0}
        self._elapsed_ms = 0.0

    @property
    def source_name(self) -> str:
        return self.SOURCE_NAME

    @property
    def stats(self) -> dict[str, float]:
        """Request counters since construction."""
        done = self._calls["success"] + self._calls["failure"]
        return {
            **self._calls,
            "avg_latency_ms": self._elapsed_ms / done if done else 0.0,
        }

    @property
    def _http(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url or self.BASE_URL,
                timeout=httpx.Timeout(self.config.timeout),
                headers=self._headers(),
                follow_redirects=True,
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        """Headers sent with every request; subclasses extend this for auth."""
        return {
            "User-Agent": "eraframe/0.1 (image resolver)",
            "Accept": "application/json",
        }

    @contextmanager
    def _transport_errors(self) -> Iterator[None]:
        try:
            yield
        except httpx.HTTPError as e:
            self._calls["failure"] += 1
            raise NetworkError(message=f"HTTP error: {e}", source=self.source_name) from e

    def _check_status(self, response: httpx.Response) -> None:
        if response.is_success:
            self._calls["success"] += 1
            return
        self._calls["failure"] += 1
        raise NetworkError(
            message=f"{self.source_name} returned HTTP {response.status_code}",
            source=self.source_name,
            status_code=response.status_code,
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        started = time.monotonic()
        with self._transport_errors():
            response = await self._http.request(method, url, **kwargs)
        self._elapsed_ms += (time.monotonic() - started) * 1000
        self._check_status(response)
        return response

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a JSON object body; anything else is a NetworkError."""
        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(
                message=f"{self.source_name} returned a body that is not JSON",
                source=self.source_name,
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise NetworkError(
                message=f"{self.source_name} returned {type(data).__name__}, not a JSON object",
                source=self.source_name,
                status_code=response.status_code,
            )
        return data

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "AbstractProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
