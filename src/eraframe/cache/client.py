"""Async Redis client wrapper."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from eraframe.core.exceptions import CacheError


class AsyncRedisClient:
    """JSON values in Redis, with every Redis failure raised as CacheError.

    Until connect() is called the client behaves like an empty cache:
    reads miss and writes are dropped.
    """

    def __init__(self, redis_url: str, max_connections: int = 20) -> None:
        self._redis_url = redis_url
        self._max_connections = max_connections
        self._redis: aioredis.Redis | None = None

    @property
    def is_connected(self) -> bool:
        return self._redis is not None

    async def connect(self) -> None:
        """Create the connection pool. Connections are opened on first use."""
        self._redis = aioredis.from_url(
            self._redis_url,
            max_connections=self._max_connections,
            decode_responses=True,
        )

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    @asynccontextmanager
    async def _errors(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except RedisError as e:
            raise CacheError(f"Redis {operation} failed: {e}") from e

    async def ping(self) -> bool:
        if self._redis is None:
            return False
        async with self._errors("ping"):
            return bool(await self._redis.ping())

    async def get(self, key: str) -> Any | None:
        """Return the decoded value, the raw string if it is not JSON, or None."""
        if self._redis is None:
            return None
        async with self._errors("get"):
            raw = await self._redis.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    async def set(self, key: str, value: Any, ttl: int = 3600) -> None:
        if self._redis is None:
            return
        payload = json.dumps(value, default=str)
        async with self._errors("set"):
            await self._redis.set(key, payload, ex=ttl)

    async def delete(self, key: str) -> bool:
        if self._redis is None:
            return False
        async with self._errors("delete"):
            removed = await self._redis.delete(key)
        return removed > 0

    async def __aenter__(self) -> "AsyncRedisClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
