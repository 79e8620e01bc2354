"""Exclusion store: the durable plus locally cached set of rejected image URLs."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from sqlalchemy.exc import SQLAlchemyError

from eraframe.core.exceptions import NetworkError, StoreUnavailableError
from eraframe.core.models import ExclusionEntry
from eraframe.db.repositories.exclusion import ExclusionRepository

if TYPE_CHECKING:
    from eraframe.client import EraframeClient
    from eraframe.db.session import DatabaseManager

logger = logging.getLogger(__name__)


class ExclusionBackend(Protocol):
    """Durable storage for exclusions. Implementations raise StoreUnavailableError."""

    async def load_urls(self) -> list[str]: ...

    async def add(self, entry: ExclusionEntry) -> None: ...


class DatabaseExclusionBackend:
    """Stores exclusions in PostgreSQL through ExclusionRepository."""

    def __init__(self, db: "DatabaseManager") -> None:
        self._db = db

    async def load_urls(self) -> list[str]:
        try:
            async with self._db.session() as session:
                return list(await ExclusionRepository(session).list_urls())
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(f"Could not load exclusions: {e}") from e

    async def add(self, entry: ExclusionEntry) -> None:
        try:
            async with self._db.session() as session:
                await ExclusionRepository(session).add(
                    entry.image_url,
                    title_hint=entry.title_hint,
                    query_hint=entry.query_hint,
                )
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(f"Could not store exclusion: {e}") from e


class RemoteExclusionBackend:
    """Stores exclusions through the HTTP API."""

    def __init__(self, client: "EraframeClient") -> None:
        self._client = client

    async def load_urls(self) -> list[str]:
        try:
            return await self._client.list_exclusions()
        except NetworkError as e:
            raise StoreUnavailableError(f"Could not load exclusions: {e.message}") from e

    async def add(self, entry: ExclusionEntry) -> None:
        try:
            await self._client.add_exclusion(
                entry.image_url,
                title_hint=entry.title_hint,
                query_hint=entry.query_hint,
            )
        except NetworkError as e:
            raise StoreUnavailableError(f"Could not store exclusion: {e.message}") from e


class LocalExclusionCache:
    """
    JSON file holding a flat array of excluded URLs.

    Survives durable-store outages: entries written here while the backend
    is unreachable are merged back in on the next initialize().
    """

    def __init__(self, path: Path | str | None) -> None:
        self.path = Path(path).expanduser() if path else None

    def load(self) -> set[str]:
        if self.path is None or not self.path.exists():
            return set()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable exclusion cache {self.path}: {e}")
            return set()
        if not isinstance(data, list):
            logger.warning(f"Ignoring malformed exclusion cache {self.path}")
            return set()
        return {url for url in data if isinstance(url, str) and url}

    def save(self, urls: Iterable[str]) -> None:
        if self.path is None:
            return
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(sorted(urls)), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.warning(f"Could not write exclusion cache {self.path}: {e}")


class ExclusionStore:
    """
    Process-wide set of permanently rejected image URLs.

    Usage:
        store = ExclusionStore(DatabaseExclusionBackend(db), LocalExclusionCache(path))
        await store.initialize()
        if store.is_excluded(url):
            ...
        await store.exclude(url, title_hint="Walkman")

    The durable backend is optional. When it is missing or unreachable the
    store keeps working from memory and the local cache; backend failures
    are logged and never raised.
    """

    def __init__(
        self,
        backend: ExclusionBackend | None = None,
        local_cache: LocalExclusionCache | None = None,
    ) -> None:
        self._backend = backend
        self._local = local_cache or LocalExclusionCache(None)
        self._urls: set[str] = set()
        self._initialized = False
        self._local_loaded = False
        self._lock = asyncio.Lock()
        self._save_lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def urls(self) -> frozenset[str]:
        return frozenset(self._urls)

    def __len__(self) -> int:
        return len(self._urls)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self.is_excluded(url)

    async def initialize(self) -> None:
        """Load the durable store once and merge it with the local cache."""
        if self._initialized:
            return
        async with self._lock:
            if self._initialized:
                return

            local = self._local.load()
            self._urls |= local
            self._local_loaded = True

            if self._backend is not None:
                try:
                    durable = set(await self._backend.load_urls())
                except StoreUnavailableError as e:
                    logger.warning(f"Exclusion store unavailable, using local cache only: {e}")
                else:
                    self._urls |= durable
                    await self._push_local_only(local - durable)

            await self._save_local()
            self._initialized = True
            logger.info(f"Exclusion store initialized with {len(self._urls)} URLs")

    def is_excluded(self, url: str | None) -> bool:
        """In-memory lookup; before initialize() this reads the local cache."""
        if not url:
            return False
        if not self._initialized and not self._local_loaded:
            self._urls |= self._local.load()
            self._local_loaded = True
        return url.strip() in self._urls

    async def exclude(
        self,
        url: str,
        title_hint: str | None = None,
        query_hint: str | None = None,
    ) -> ExclusionEntry:
        """
        Permanently exclude an image URL.

        The URL is excluded in memory before the durable write starts, so
        is_excluded() is true as soon as this coroutine is entered.
        """
        entry = ExclusionEntry(image_url=url.strip(), title_hint=title_hint, query_hint=query_hint)
        if not self._local_loaded:
            self._urls |= self._local.load()
            self._local_loaded = True
        self._urls.add(entry.image_url)
        await self._save_local()

        if self._backend is not None:
            try:
                await self._backend.add(entry)
            except StoreUnavailableError as e:
                logger.warning(f"Exclusion of {entry.image_url} kept locally only: {e}")

        return entry

    def reset(self) -> None:
        """Forget in-memory state; the next initialize() reloads everything."""
        self._urls.clear()
        self._initialized = False
        self._local_loaded = False

    async def _save_local(self) -> None:
        """Write a snapshot of the set to the local cache off the event loop."""
        async with self._save_lock:
            await asyncio.to_thread(self._local.save, frozenset(self._urls))

    async def _push_local_only(self, urls: set[str]) -> None:
        """Write entries that only exist locally back to the durable store."""
        for url in sorted(urls):
            try:
                await self._backend.add(ExclusionEntry(image_url=url))
            except StoreUnavailableError as e:
                logger.warning(f"Could not sync local exclusions to the durable store: {e}")
                return
        if urls:
            logger.info(f"Synced {len(urls)} locally cached exclusions to the durable store")
