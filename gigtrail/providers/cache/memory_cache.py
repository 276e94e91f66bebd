"""In-memory TTL cache provider using cachetools.TLRUCache.

Each entry carries its own time-to-live, so one cache can hold results
with different lifetimes.  Expired entries disappear lazily on access and
proactively through a background sweep task started with
:meth:`MemoryCacheProvider.start_auto_cleanup`.
"""

from __future__ import annotations

import asyncio
import sys
import time
from typing import Any, Callable, NamedTuple

import structlog
from cachetools import TLRUCache

from gigtrail.interfaces.cache_provider import CacheStats, ICacheProvider
from gigtrail.models.performance import WORLDWIDE

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_TTL = 3600.0  # seconds
DEFAULT_CLEANUP_INTERVAL = 300.0  # seconds


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


def generate_cache_key(artist: str, country: str | None = None) -> str:
    """Build the cache key for an (artist, country) query.

    ``"Coldplay", "US"`` and ``" coldplay ", " us "`` share one key; no
    country maps to ``"worldwide"``.
    """
    location = (country or "").strip().lower() or WORLDWIDE
    return f"{artist.strip().lower()}:{location}"


class MemoryCacheProvider(ICacheProvider):
    """In-memory cache with per-entry TTL backed by ``cachetools.TLRUCache``.

    The cache has no size bound; entries leave only through expiry,
    :meth:`delete` or :meth:`clear`.

    Parameters
    ----------
    default_ttl:
        Time-to-live in seconds for entries stored without an explicit TTL.
    timer:
        Monotonic clock in seconds.  Tests inject a fake clock here.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._cache: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=sys.maxsize, ttu=_time_to_use, timer=timer
        )
        self._cleanup_task: asyncio.Task[None] | None = None

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    def get(self, key: str) -> Any | None:
        """Return the live value for *key*, dropping it first if expired."""
        expired = self._cache.expire()
        if any(expired_key == key for expired_key, _ in expired):
            logger.debug("cache_expired", key=key)
            return None

        entry = self._cache.get(key)
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None

        logger.debug("cache_hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key* for *ttl* seconds (default TTL when ``None``)."""
        effective_ttl = self._default_ttl if ttl is None else ttl
        self._cache[key] = _Entry(value=value, ttl=effective_ttl)
        logger.debug("cache_set", key=key, ttl=effective_ttl)

    def has(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
        return key in self._cache

    def delete(self, key: str) -> bool:
        """Remove *key*; ``False`` when it was absent or already expired."""
        self._cache.expire()
        removed = self._cache.pop(key, None) is not None
        logger.debug("cache_delete", key=key, removed=removed)
        return removed

    def clear(self) -> None:
        """Remove every entry."""
        self._cache.clear()
        logger.info("cache_cleared")

    def get_stats(self) -> CacheStats:
        """Sweep, then return the live entry count and keys."""
        self.cleanup_expired()
        keys = list(self._cache.keys())
        return CacheStats(size=len(keys), keys=keys)

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    def cleanup_expired(self) -> int:
        """Drop all expired entries now; return how many were removed."""
        removed = len(self._cache.expire())
        if removed:
            logger.debug("cache_cleanup", removed=removed, remaining=len(self._cache))
        return removed

    def start_auto_cleanup(
        self, interval: float = DEFAULT_CLEANUP_INTERVAL
    ) -> asyncio.Task[None]:
        """Start (or return the running) background sweep task.

        Must be called from inside a running event loop.
        """
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return self._cleanup_task

        async def _sweep_forever() -> None:
            while True:
                await asyncio.sleep(interval)
                self.cleanup_expired()

        self._cleanup_task = asyncio.get_running_loop().create_task(_sweep_forever())
        logger.info("cache_auto_cleanup_started", interval=interval)
        return self._cleanup_task

    async def stop_auto_cleanup(self) -> None:
        """Cancel the background sweep task if it is running."""
        task, self._cleanup_task = self._cleanup_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("cache_auto_cleanup_stopped")
