"""
Caching source implementation for LazyForest.

Provides a transparent caching layer that can wrap any child source.
Useful when several stores share one backend, or when the same ids are
expanded again after the nodes were removed and re-created.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from cachetools import TTLCache

from .source import ChildSource, FetchResult, as_child_source

logger = logging.getLogger(__name__)


class CachingChildSource(ChildSource):
    """
    Optional caching layer for any child source.

    Caches the fetched children of each node id for a limited time. Uses
    Future-based coordination so that concurrent requests for the same id
    share a single fetch from the wrapped source.

    Example:
        base = CallableChildSource(fetch_from_api)
        cached = CachingChildSource(base, max_size=5000, ttl=60.0)
        store = TreeStore(initial, cached)
    """

    def __init__(
        self,
        base_source: Any,
        max_size: int = 10000,
        ttl: float = 300.0  # 5 minutes
    ):
        """
        Initialize caching source.

        Args:
            base_source: The underlying source to wrap (ChildSource or callable)
            max_size: Maximum number of entries in cache
            ttl: Time-to-live for cache entries in seconds
        """
        super().__init__()
        self._base_source = as_child_source(base_source)
        self._cache = TTLCache(maxsize=max_size, ttl=ttl)
        self._fetches_in_progress: Dict[str, asyncio.Future] = {}

        # Statistics
        self.cache_hits = 0
        self.cache_misses = 0
        self.concurrent_waits = 0

    async def fetch_children(self, node_id: str) -> FetchResult:
        """
        Fetch children with caching and async coordination.

        This method:
        1. Joins a fetch already in progress for the same id
        2. Checks the cache for existing results
        3. Performs the fetch if needed
        4. Shares results with all waiting tasks
        """
        # 1. Join a fetch already in progress
        pending = self._fetches_in_progress.get(node_id)
        while pending is not None:
            self.concurrent_waits += 1
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                # Only a cancelled shared fetch is retried; our own
                # cancellation propagates
                if not pending.cancelled():
                    raise
                logger.debug("Shared fetch for %r was cancelled, fetching again", node_id)
            except Exception:
                logger.debug("Shared fetch for %r failed, fetching again", node_id)
            # Another waiter may already have started the replacement fetch
            current = self._fetches_in_progress.get(node_id)
            pending = current if current is not pending else None

        # 2. Check cache
        cached = self._check_cache(node_id)
        if cached is not None:
            self.cache_hits += 1
            return cached

        # 3. Cache miss - need to fetch
        self.cache_misses += 1
        future = asyncio.get_running_loop().create_future()
        self._fetches_in_progress[node_id] = future

        try:
            children = await self._base_source.fetch_children(node_id)
            if children is not None:
                children = tuple(children)
                self._update_cache(node_id, children)
            future.set_result(children)
            return children
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unawaited future does not warn on collection
            future.exception()
            raise
        finally:
            # Settle the future on cancellation too, so waiters never hang
            if not future.done():
                future.cancel()
            if self._fetches_in_progress.get(node_id) is future:
                del self._fetches_in_progress[node_id]

    def _check_cache(self, node_id: str) -> Optional[tuple]:
        """
        Check cache for existing results.

        Returns None if not found or expired.
        """
        return self._cache.get(node_id)

    def _update_cache(self, node_id: str, children: tuple) -> None:
        """
        Update cache with new results.
        """
        self._cache[node_id] = children

    def invalidate(self, node_id: str) -> bool:
        """
        Drop the cached children of one node.

        Returns:
            True if an entry was removed
        """
        return self._cache.pop(node_id, None) is not None

    def get_cache_stats(self) -> dict:
        """
        Get cache statistics for monitoring and debugging.
        """
        total_requests = self.cache_hits + self.cache_misses
        hit_rate = self.cache_hits / total_requests if total_requests > 0 else 0

        return {
            'cache_hits': self.cache_hits,
            'cache_misses': self.cache_misses,
            'hit_rate': hit_rate,
            'concurrent_waits': self.concurrent_waits,
            'cache_size': len(self._cache),
            'max_size': self._cache.maxsize,
            'ttl': self._cache.ttl
        }

    async def get_stats(self) -> dict:
        stats = dict(await self._base_source.get_stats())
        stats.update(self.get_cache_stats())
        return stats

    def clear_cache(self) -> None:
        """
        Clear all cached entries.
        """
        self._cache.clear()
        self.cache_hits = 0
        self.cache_misses = 0
        self.concurrent_waits = 0

    async def close(self):
        self.clear_cache()
        await self._base_source.close()

    def __repr__(self) -> str:
        return f"CachingChildSource({self._base_source!r}, max_size={self._cache.maxsize})"
