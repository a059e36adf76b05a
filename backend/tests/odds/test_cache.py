"""Tests for PayloadCache."""

import asyncio

import pytest

from oddsfeed.odds.cache import PayloadCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _counting_fetch(payloads):
    """Fetch function that returns the given payloads in order and counts calls."""
    calls = []

    async def fetch():
        calls.append(None)
        return payloads[min(len(calls), len(payloads)) - 1]

    return fetch, calls


@pytest.mark.asyncio
class TestPayloadCache:
    """Unit tests for the PayloadCache."""

    async def test_fresh_entry_skips_fetch(self):
        """Test that two calls within the window fetch once and return the same payload."""
        clock = FakeClock()
        cache = PayloadCache(ttl=300, clock=clock)
        fetch, calls = _counting_fetch([{"success": True, "n": 1}])

        first = await cache.get_or_fetch("cricket", fetch)
        clock.advance(299)
        second = await cache.get_or_fetch("cricket", fetch)

        assert len(calls) == 1
        assert second is first

    async def test_expired_entry_refetches(self):
        """Test that a call after the window triggers a second fetch."""
        clock = FakeClock()
        cache = PayloadCache(ttl=300, clock=clock)
        fetch, calls = _counting_fetch([{"success": True, "n": 1}, {"success": True, "n": 2}])

        await cache.get_or_fetch("cricket", fetch)
        await cache.get_or_fetch("cricket", fetch)
        clock.advance(300)
        third = await cache.get_or_fetch("cricket", fetch)

        assert len(calls) == 2
        assert third == {"success": True, "n": 2}

    async def test_failed_fetch_returns_error_result(self):
        """Test that a None fetch result becomes an explicit error payload."""
        cache = PayloadCache(ttl=10, clock=FakeClock())
        fetch, _ = _counting_fetch([None])

        result = await cache.get_or_fetch("k", fetch, failure_message="Failed to fetch cricket data")

        assert result == {"success": False, "message": "Failed to fetch cricket data"}
        assert "k" not in cache

    async def test_failed_fetch_keeps_stale_entry_without_serving_it(self):
        """Test that a failed refresh neither serves nor evicts the stale entry."""
        clock = FakeClock()
        cache = PayloadCache(ttl=10, clock=clock)
        fetch, _ = _counting_fetch([{"success": True, "n": 1}, None])

        await cache.get_or_fetch("k", fetch)
        clock.advance(11)
        result = await cache.get_or_fetch("k", fetch)

        assert result["success"] is False
        assert "k" in cache
        clock.advance(-11)
        assert cache.get("k") == {"success": True, "n": 1}

    async def test_transform_failure_not_cached(self):
        """Test that failure payloads from the transformer are returned but not stored."""
        cache = PayloadCache(ttl=10, clock=FakeClock())
        failure = {"success": False, "message": "Invalid data format", "sport": "cricket"}
        fetch, calls = _counting_fetch([failure])

        assert await cache.get_or_fetch("k", fetch) == failure
        assert await cache.get_or_fetch("k", fetch) == failure
        assert len(calls) == 2

    async def test_entry_timestamp_is_fetch_start(self):
        """Test that entries are stamped with the time their fetch started."""
        clock = FakeClock(now=50.0)
        cache = PayloadCache(ttl=10, clock=clock)

        async def slow_fetch():
            clock.advance(3)
            return {"success": True}

        await cache.get_or_fetch("k", slow_fetch)
        clock.advance(6)
        assert cache.get("k") == {"success": True}
        clock.advance(1)
        assert cache.get("k") is None

    async def test_concurrent_misses_share_one_fetch(self):
        """Test that simultaneous misses for a key trigger a single fetch."""
        cache = PayloadCache(ttl=10)
        release = asyncio.Event()
        calls = []

        async def fetch():
            calls.append(None)
            await release.wait()
            return {"success": True}

        waiters = [asyncio.create_task(cache.get_or_fetch("k", fetch)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters)

        assert len(calls) == 1
        assert all(r == {"success": True} for r in results)

    async def test_cancelled_caller_does_not_cancel_shared_fetch(self):
        """Test that one waiter being cancelled leaves the fetch running for others."""
        cache = PayloadCache(ttl=10)
        release = asyncio.Event()

        async def fetch():
            await release.wait()
            return {"success": True}

        first = asyncio.create_task(cache.get_or_fetch("k", fetch))
        second = asyncio.create_task(cache.get_or_fetch("k", fetch))
        await asyncio.sleep(0)
        first.cancel()
        release.set()

        assert await second == {"success": True}
        assert "k" in cache

    async def test_keys_are_independent(self):
        """Test that different keys are cached separately."""
        cache = PayloadCache(ttl=10, clock=FakeClock())
        fetch, calls = _counting_fetch([{"success": True}])

        await cache.get_or_fetch(("cricket", "E1"), fetch)
        await cache.get_or_fetch(("cricket", "E2"), fetch)

        assert len(calls) == 2
        assert len(cache) == 2


class TestPayloadCacheStore:
    """Unit tests for the monotonic store guard."""

    def test_older_fetch_does_not_overwrite_newer(self):
        """Test that a slow, stale fetch cannot replace a newer entry."""
        cache = PayloadCache(ttl=10, clock=FakeClock(now=21.0))
        assert cache.store("k", {"v": "new"}, fetched_at=20.0) is True
        assert cache.store("k", {"v": "old"}, fetched_at=15.0) is False
        assert cache.get("k") == {"v": "new"}

    def test_newer_fetch_overwrites(self):
        """Test that entries are replaced in place by newer fetches."""
        cache = PayloadCache(ttl=10, clock=FakeClock(now=3.0))
        cache.store("k", {"v": 1}, fetched_at=1.0)
        cache.store("k", {"v": 2}, fetched_at=2.0)
        assert cache.get("k") == {"v": 2}
        assert len(cache) == 1

    def test_get_respects_window(self):
        """Test that get() hides entries older than the ttl."""
        clock = FakeClock(now=100.0)
        cache = PayloadCache(ttl=10, clock=clock)
        cache.store("k", {"v": 1}, fetched_at=95.0)
        assert cache.get("k") == {"v": 1}
        clock.advance(5)
        assert cache.get("k") is None
