"""Bounded-concurrency client queue for image resolution."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Protocol

from eraframe.core.models import Failed, Found, NoImage, ResolutionResult, SearchRequest, WorkItem
from eraframe.core.normalization import is_rejected_url
from eraframe.core.types import ResolutionStatus, ResolverMode

if TYPE_CHECKING:
    from eraframe.services.exclusions import ExclusionStore

logger = logging.getLogger(__name__)

ResultCallback = Callable[[ResolutionResult], Awaitable[None] | None]


class Resolver(Protocol):
    """Anything that can resolve one query (ImageResolver, EraframeClient)."""

    async def resolve(
        self,
        query: str,
        year_hint: int | None,
        mode: ResolverMode,
    ) -> Found | NoImage | Failed: ...


class ResolutionQueue:
    """
    Dispatches resolution requests to a resolver with bounded concurrency.

    Requests are deduplicated by id within a generation, dispatched in
    submission order as slots free up, and each terminal result is handed
    to ``on_result``. Completion order is not submission order; consumers
    must key updates by request id.

    Usage:
        queue = ResolutionQueue(resolver, mode=ResolverMode.FAST, on_result=update)
        queue.add_to_queue(requests)
        await queue.join()

        # user rejected the image for "e1"
        await store.exclude(url)
        queue.force_research(request_e1)
    """

    def __init__(
        self,
        resolver: Resolver,
        *,
        mode: ResolverMode,
        on_result: ResultCallback | None = None,
        max_concurrent: int | None = None,
        exclusions: "ExclusionStore | None" = None,
        skip: Callable[[SearchRequest], bool] | None = None,
    ) -> None:
        if max_concurrent is None:
            from eraframe.config import get_settings

            max_concurrent = get_settings().max_concurrent
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")

        self._resolver = resolver
        self.mode = ResolverMode(mode)
        self._on_result = on_result
        self.max_concurrent = max_concurrent
        self._exclusions = exclusions
        self._skip = skip

        self._pending: deque[WorkItem] = deque()
        self._queued_ids: set[str] = set()
        self._in_flight: dict[str, asyncio.Task] = {}
        self._completed: set[str] = set()
        self._generation = 0

        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._dispatcher: asyncio.Task | None = None
        self._workers: set[asyncio.Task] = set()
        self._idle = asyncio.Event()
        self._idle.set()

        self._searched = 0
        self._found = 0

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def searched_count(self) -> int:
        """Requests completed in the current generation."""
        return self._searched

    @property
    def found_count(self) -> int:
        return self._found

    @property
    def active_count(self) -> int:
        """Calls in flight for the current generation."""
        return len(self._in_flight)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def is_searching(self) -> bool:
        return bool(self._pending or self._in_flight)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def add_to_queue(self, requests: Iterable[SearchRequest]) -> int:
        """
        Enqueue requests that still need an image.

        Skips blank queries, ids already queued, in flight or completed in
        this generation, requests that already hold a usable image, and
        anything matched by the skip predicate.

        Returns:
            Number of requests enqueued
        """
        added = 0
        for request in requests:
            if not self._should_enqueue(request):
                continue
            self._enqueue(request)
            added += 1

        if added:
            logger.debug(f"Enqueued {added} requests (generation {self._generation})")
            self._ensure_dispatcher()
        return added

    def force_research(self, request: SearchRequest) -> None:
        """
        Resolve one id again, even if it already completed.

        Any call still in flight for the id is cancelled first, and any
        queued copy is dropped, so the id is dispatched exactly once more.
        """
        task = self._in_flight.pop(request.id, None)
        if task is not None and not task.done():
            logger.debug(f"Cancelling in-flight resolution for {request.id}")
            task.cancel()

        self._completed.discard(request.id)
        if request.id in self._queued_ids:
            self._pending = deque(i for i in self._pending if i.request.id != request.id)
            self._queued_ids.discard(request.id)

        self._enqueue(request)
        self._ensure_dispatcher()

    def reset(self) -> None:
        """
        Start a new generation.

        Clears the queue, dedup memory and counters. Calls already in flight
        run to completion, keep their slot until then, and their results are
        discarded.
        """
        self._generation += 1
        self._pending.clear()
        self._queued_ids.clear()
        self._in_flight.clear()
        self._completed.clear()
        self._searched = 0
        self._found = 0
        self._check_idle()

    async def join(self) -> None:
        """Wait until nothing is queued or in flight (stale calls included)."""
        await self._idle.wait()

    async def shutdown(self) -> None:
        """Cancel the dispatcher and every worker, then wait for them to exit."""
        self.reset()
        tasks = list(self._workers)
        if self._dispatcher is not None:
            tasks.append(self._dispatcher)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _should_enqueue(self, request: SearchRequest) -> bool:
        if not request.query or not request.query.strip():
            return False
        rid = request.id
        if rid in self._queued_ids or rid in self._in_flight or rid in self._completed:
            return False
        if self._has_usable_image(request):
            return False
        if self._skip is not None and self._skip(request):
            return False
        return True

    def _has_usable_image(self, request: SearchRequest) -> bool:
        url = request.image_url
        if not url or is_rejected_url(url):
            return False
        return not (self._exclusions is not None and self._exclusions.is_excluded(url))

    def _enqueue(self, request: SearchRequest) -> None:
        self._pending.append(WorkItem(request=request, generation=self._generation))
        self._queued_ids.add(request.id)
        self._idle.clear()

    def _ensure_dispatcher(self) -> None:
        if self._dispatcher is None or self._dispatcher.done():
            self._dispatcher = asyncio.create_task(self._dispatch_loop())

    async def _dispatch_loop(self) -> None:
        try:
            while self._pending:
                # Block until a slot frees up
                await self._semaphore.acquire()
                if not self._pending:
                    self._semaphore.release()
                    break

                item = self._pending.popleft()
                rid = item.request.id
                self._queued_ids.discard(rid)
                if item.generation != self._generation or rid in self._in_flight:
                    self._semaphore.release()
                    continue

                worker = asyncio.create_task(self._run(item))
                self._in_flight[rid] = worker
                self._workers.add(worker)
                worker.add_done_callback(self._on_worker_done)
        finally:
            self._dispatcher = None
            self._check_idle()

    async def _run(self, item: WorkItem) -> None:
        request = item.request
        try:
            resolution = await self._resolver.resolve(request.query, request.year_hint, self.mode)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Resolution failed for {request.id}: {e}")
            resolution = Failed(reason=str(e) or type(e).__name__)

        result = ResolutionResult.from_resolution(request.id, resolution)
        excluded = self._exclusions is not None and self._exclusions.is_excluded(result.image_url)
        if result.found and excluded:
            logger.debug(f"Dropping excluded image for {request.id}: {result.image_url}")
            result = ResolutionResult(
                id=request.id,
                status=ResolutionStatus.NONE,
                source_url=result.source_url,
            )

        if item.generation != self._generation:
            logger.debug(f"Discarding stale result for {request.id}")
            return

        # Released before the callback so it may call force_research for this id
        if self._in_flight.get(request.id) is asyncio.current_task():
            del self._in_flight[request.id]
        self._completed.add(request.id)
        self._searched += 1
        if result.found:
            self._found += 1

        await self._emit(result)

    def _on_worker_done(self, task: asyncio.Task) -> None:
        self._workers.discard(task)
        for rid, in_flight in list(self._in_flight.items()):
            if in_flight is task:
                del self._in_flight[rid]
        self._semaphore.release()

        if not task.cancelled() and (exc := task.exception()) is not None:
            logger.error(f"Resolution worker crashed: {exc!r}")
        self._check_idle()

    async def _emit(self, result: ResolutionResult) -> None:
        if self._on_result is None:
            return
        try:
            outcome = self._on_result(result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception(f"Result callback failed for {result.id}")

    def _check_idle(self) -> None:
        if not self._pending and not self._workers and self._dispatcher is None:
            self._idle.set()
