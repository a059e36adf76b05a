"""Time-windowed cache of transformed odds payloads."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

Payload = dict[str, Any]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Last good payload for a key and the clock reading when its fetch started."""

    payload: Payload
    fetched_at: float


class PayloadCache:
    """In-memory, lazily populated cache with a fixed freshness window.

    Shared by every REST request and every push cycle for the process. All
    access happens on the event loop, so no lock is needed; the only ordering
    rule is that an entry is never replaced by one whose fetch started earlier.
    Concurrent misses for the same key share a single in-flight fetch.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._inflight: dict[Hashable, asyncio.Task] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    async def get_or_fetch(
        self,
        key: Hashable,
        fetch: Callable[[], Awaitable[Payload | None]],
        failure_message: str = "Failed to fetch data",
    ) -> Payload:
        """Return a fresh cached payload, or call ``fetch`` and cache its result.

        ``fetch`` returns a transformed payload, or None when the upstream call
        failed. On None an error result is returned and any stale entry is kept
        but not served. Payloads with ``success`` false are returned uncached.
        """
        fresh = self.get(key)
        if fresh is not None:
            return fresh

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, fetch))
            self._inflight[key] = task
            task.add_done_callback(lambda _t: self._inflight.pop(key, None))

        # A cancelled caller must not cancel a fetch other callers are waiting on
        payload = await asyncio.shield(task)
        if payload is None:
            return {"success": False, "message": failure_message}
        return payload

    def get(self, key: Hashable) -> Payload | None:
        """The cached payload if it is still inside the freshness window, else None."""
        entry = self._entries.get(key)
        if entry is None or self._clock() - entry.fetched_at >= self._ttl:
            return None
        return entry.payload

    def store(self, key: Hashable, payload: Payload, fetched_at: float) -> bool:
        """Write an entry unless a newer one is already stored. Returns True if written."""
        current = self._entries.get(key)
        if current is not None and current.fetched_at > fetched_at:
            logger.debug("Discarding stale payload for %s", key)
            return False
        self._entries[key] = CacheEntry(payload=payload, fetched_at=fetched_at)
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    # --- Internal ---

    async def _fetch_and_store(
        self,
        key: Hashable,
        fetch: Callable[[], Awaitable[Payload | None]],
    ) -> Payload | None:
        started_at = self._clock()
        payload = await fetch()
        if payload is None:
            logger.debug("Fetch failed for %s; keeping existing entry", key)
            return None
        if payload.get("success"):
            self.store(key, payload, started_at)
        return payload
