"""Abstract base class for the performance-result cache.

The cache lives in process memory and every operation completes without
awaiting, so concurrent aggregations on one event loop can share it
without a lock.  A network-backed store would need an async variant of
this contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, NamedTuple


class CacheStats(NamedTuple):
    """Live-entry count and keys, taken right after an expiry sweep."""

    size: int
    keys: list[str]


class ICacheProvider(ABC):
    """Contract for key-value caches with per-entry time-to-live."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.

        Returns
        -------
        Any or None
            The cached value if present and not expired; ``None`` otherwise.
            An expired entry is removed as a side effect.
        """

    @abstractmethod
    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key*.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The value to store, kept by reference.
        ttl:
            Time-to-live in seconds.  ``None`` uses the provider default.
        """

    @abstractmethod
    def has(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove *key*; return ``True`` if a live entry was removed."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""

    @abstractmethod
    def get_stats(self) -> CacheStats:
        """Sweep expired entries, then report the live size and keys."""
