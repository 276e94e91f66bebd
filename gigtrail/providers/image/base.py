"""Shared per-artist caching for image providers.

Every concrete image provider answers through :class:`CachedImageProvider`,
which keeps one result per lowercased artist name for the provider's
lifetime.  Misses are cached too, so an artist without a photo costs one
lookup per process.  There is no TTL: this cache is separate from the
performance-result cache.
"""

from __future__ import annotations

from abc import abstractmethod

import structlog

from gigtrail.interfaces.image_provider import IArtistImageProvider
from gigtrail.utils.errors import GigTrailError

logger = structlog.get_logger(logger_name=__name__)


class CachedImageProvider(IArtistImageProvider):
    """Base class adding the per-artist cache and error boundary."""

    def __init__(self) -> None:
        self._image_cache: dict[str, str | None] = {}

    async def get_image(self, artist_name: str) -> str | None:
        key = artist_name.strip().lower()
        if not key:
            return None
        if key in self._image_cache:
            return self._image_cache[key]

        if not self.is_available():
            logger.debug("image_provider_unavailable", provider=self.get_provider_name())
            return None

        try:
            image = await self._lookup(artist_name.strip())
        except GigTrailError as exc:
            # Transport failures are not cached; the next request retries.
            logger.warning(
                "image_lookup_failed",
                provider=self.get_provider_name(),
                artist=artist_name,
                error=str(exc),
            )
            return None
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(
                "image_lookup_malformed",
                provider=self.get_provider_name(),
                artist=artist_name,
                error=str(exc),
            )
            return None

        self._image_cache[key] = image
        logger.debug(
            "image_lookup_complete",
            provider=self.get_provider_name(),
            artist=artist_name,
            found=image is not None,
        )
        return image

    def clear_cache(self) -> None:
        self._image_cache.clear()

    @abstractmethod
    async def _lookup(self, artist_name: str) -> str | None:
        """Query the provider; raise GigTrailError on transport failure."""
