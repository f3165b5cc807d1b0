"""
Tests for CachingChildSource.

Covers cache hits, sharing of in-flight fetches between concurrent
callers, and the rule that failures and "no result" are never cached.
"""

import asyncio

import pytest

from lazyforest import TreeStore
from lazyforest.aio import CachingChildSource
from lazyforest.testing import GatedChildSource, MockChildSource, sample_forest


@pytest.mark.asyncio
class TestCaching:
    """Basic cache behaviour."""

    async def test_second_fetch_is_cached(self):
        """Repeated fetches for one id hit the backend once."""
        base = MockChildSource()
        cached = CachingChildSource(base)

        first = await cached.fetch_children('root-2')
        second = await cached.fetch_children('root-2')

        assert first == second
        assert isinstance(second, tuple)
        assert base.call_count == 1
        stats = cached.get_cache_stats()
        assert stats['cache_hits'] == 1
        assert stats['cache_misses'] == 1
        assert stats['hit_rate'] == 0.5

    async def test_ids_cached_separately(self):
        """Each node id has its own entry."""
        base = MockChildSource()
        cached = CachingChildSource(base)
        await cached.fetch_children('a')
        await cached.fetch_children('b')
        assert base.calls == ['a', 'b']
        assert cached.get_cache_stats()['cache_size'] == 2

    async def test_failure_not_cached(self):
        """A failed fetch is retried on the next request."""
        base = MockChildSource()
        base.fail_next('root-2')
        cached = CachingChildSource(base)

        with pytest.raises(ConnectionError):
            await cached.fetch_children('root-2')
        children = await cached.fetch_children('root-2')

        assert len(children) == 2
        assert base.call_count == 2

    async def test_none_not_cached(self):
        """'No result' answers are passed through but not stored."""
        calls = []

        async def fetch(node_id):
            calls.append(node_id)
            return None

        cached = CachingChildSource(fetch)
        assert await cached.fetch_children('x') is None
        assert await cached.fetch_children('x') is None
        assert len(calls) == 2

    async def test_invalidate(self):
        """Invalidated ids are fetched again."""
        base = MockChildSource()
        cached = CachingChildSource(base)
        await cached.fetch_children('root-2')

        assert cached.invalidate('root-2') is True
        assert cached.invalidate('root-2') is False
        await cached.fetch_children('root-2')
        assert base.call_count == 2

    async def test_max_size(self):
        """The cache never grows past max_size."""
        cached = CachingChildSource(MockChildSource(), max_size=2)
        for node_id in ('a', 'b', 'c'):
            await cached.fetch_children(node_id)
        assert cached.get_cache_stats()['cache_size'] == 2

    async def test_clear_and_close(self):
        """close() clears the cache and resets counters."""
        cached = CachingChildSource(MockChildSource())
        await cached.fetch_children('a')
        async with cached:
            pass
        stats = cached.get_cache_stats()
        assert stats['cache_size'] == 0
        assert stats['cache_misses'] == 0

    async def test_get_stats_merges_base(self):
        """Async stats include the wrapped source's counters."""
        cached = CachingChildSource(MockChildSource())
        await cached.fetch_children('a')
        await cached.fetch_children('a')
        stats = await cached.get_stats()
        assert stats['fetch_count'] == 1
        assert stats['cache_hits'] == 1


@pytest.mark.asyncio
class TestConcurrentFetches:
    """Concurrent requests for one id share a single backend call."""

    async def test_in_flight_fetch_is_shared(self):
        """Waiters join the pending fetch instead of starting another."""
        base = GatedChildSource()
        cached = CachingChildSource(base)

        first = asyncio.create_task(cached.fetch_children('root-2'))
        await base.wait_started('root-2')
        second = asyncio.create_task(cached.fetch_children('root-2'))
        await asyncio.sleep(0)

        base.release('root-2')
        results = await asyncio.gather(first, second)

        assert base.calls == ['root-2']
        assert results[0] == results[1]
        assert cached.concurrent_waits == 1

    async def test_shared_failure_retries(self):
        """If the shared fetch fails, the waiter fetches on its own."""
        base = GatedChildSource()
        cached = CachingChildSource(base)

        first = asyncio.create_task(cached.fetch_children('root-2'))
        await base.wait_started('root-2')
        second = asyncio.create_task(cached.fetch_children('root-2'))
        await asyncio.sleep(0)

        base.fail('root-2', ConnectionError("down"))
        with pytest.raises(ConnectionError):
            await first

        await base.wait_started('root-2')
        base.release('root-2')
        children = await second

        assert len(children) == 2
        assert base.calls == ['root-2', 'root-2']

    async def test_cancelled_fetch_releases_waiters(self):
        """Cancelling the fetching task makes waiters fetch again instead of hanging."""
        base = GatedChildSource()
        cached = CachingChildSource(base)

        first = asyncio.create_task(cached.fetch_children('root-2'))
        await base.wait_started('root-2')
        second = asyncio.create_task(cached.fetch_children('root-2'))
        await asyncio.sleep(0)

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        await base.wait_started('root-2')
        base.release('root-2')
        children = await asyncio.wait_for(second, timeout=1.0)

        assert [c.id for c in children] == ['root-2-new-1', 'root-2-new-2']
        assert base.calls == ['root-2', 'root-2']
        assert cached._fetches_in_progress == {}

    async def test_cancelled_waiter_does_not_cancel_fetch(self):
        """A waiter giving up leaves the shared fetch running."""
        base = GatedChildSource()
        cached = CachingChildSource(base)

        first = asyncio.create_task(cached.fetch_children('root-2'))
        await base.wait_started('root-2')
        second = asyncio.create_task(cached.fetch_children('root-2'))
        await asyncio.sleep(0)

        second.cancel()
        with pytest.raises(asyncio.CancelledError):
            await second

        base.release('root-2')
        children = await first
        assert len(children) == 2
        assert base.calls == ['root-2']


@pytest.mark.asyncio
async def test_two_stores_share_cached_children():
    """Stores sharing a cached source only hit the backend once per id."""
    base = MockChildSource()
    cached = CachingChildSource(base)
    left = TreeStore(sample_forest(), cached)
    right = TreeStore(sample_forest(), cached)

    await left.toggle_node('root-2')
    await right.toggle_node('root-2')

    assert base.call_count == 1
    assert left.snapshot.find('root-2').children == right.snapshot.find('root-2').children
