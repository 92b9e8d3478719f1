"""Generated-page cache with stale-while-revalidate and on-demand fallback."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    generated_at: float


@dataclass(frozen=True)
class CacheResult:
    """Outcome of a cache lookup.

    ``pending`` is set when a page was not generated yet and generation did not
    finish within the fallback wait; ``value`` is None in that case.
    """

    value: Any = None
    stale: bool = False
    pending: bool = False


class PageCache:
    """Keeps the last generated props per page key.

    Entries older than ``revalidate_seconds`` are still served, and the first
    request to see them starts one background regeneration. Concurrent
    generations of the same key share a single task. At most ``max_entries``
    pages are kept; the least recently used one is evicted first.
    """

    def __init__(
        self,
        revalidate_seconds: float,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._revalidate_seconds = revalidate_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._inflight: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def peek(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.generated_at < self._revalidate_seconds

    def is_generating(self, key: str) -> bool:
        return key in self._inflight

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def _start(self, key: str, generate: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._run(key, generate))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._finish(key, done))
        return task

    async def _run(self, key: str, generate: Callable[[], Awaitable[Any]]) -> Any:
        started_at = self._clock()
        value = await generate()
        self._entries[key] = CacheEntry(value=value, generated_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Page evicted — key=%s", evicted)
        logger.debug("Page generated — key=%s duration_ms=%.0f", key, (self._clock() - started_at) * 1000)
        return value

    def _finish(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Page generation failed — key=%s error=%s", key, exc)

    async def generate(self, key: str, generate: Callable[[], Awaitable[Any]]) -> Any:
        """Generate ``key`` now, joining a generation already in flight."""
        return await asyncio.shield(self._start(key, generate))

    async def get(
        self,
        key: str,
        generate: Callable[[], Awaitable[Any]],
        *,
        fallback_wait: float | None = None,
    ) -> CacheResult:
        """Return the cached value for ``key``, generating it if missing.

        With ``fallback_wait`` set, a missing page is waited on for at most that
        many seconds; generation keeps running in the background past the wait.
        """
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
            if self.is_fresh(entry):
                return CacheResult(value=entry.value)
            if key not in self._inflight:
                logger.info("Serving stale page, revalidating — key=%s", key)
            self._start(key, generate)
            return CacheResult(value=entry.value, stale=True)

        task = self._start(key, generate)
        if fallback_wait is None:
            return CacheResult(value=await asyncio.shield(task))
        try:
            value = await asyncio.wait_for(asyncio.shield(task), timeout=fallback_wait)
        except TimeoutError:
            logger.info("Page still generating, serving fallback — key=%s", key)
            return CacheResult(pending=True)
        return CacheResult(value=value)
