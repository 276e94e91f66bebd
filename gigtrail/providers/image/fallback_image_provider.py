"""Composite image provider: first non-null answer wins.

Providers are tried strictly in the given order (by default Spotify, then
Last.fm, then MusicBrainz).  Each underlying provider keeps its own
per-artist cache, so a repeat lookup never re-queries a provider that
already answered.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

import structlog

from gigtrail.interfaces.image_provider import IArtistImageProvider

logger = structlog.get_logger(logger_name=__name__)


class FallbackImageProvider(IArtistImageProvider):
    """Try each provider in priority order until one returns an image."""

    def __init__(self, providers: Sequence[IArtistImageProvider]) -> None:
        self._providers = list(providers)

    @property
    def providers(self) -> list[IArtistImageProvider]:
        return list(self._providers)

    def get_provider_name(self) -> str:
        return "multi"

    def is_available(self) -> bool:
        return any(p.is_available() for p in self._providers)

    def clear_cache(self) -> None:
        for provider in self._providers:
            provider.clear_cache()

    async def get_image(self, artist_name: str) -> str | None:
        for provider in self._providers:
            try:
                image = await provider.get_image(artist_name)
            except Exception as exc:
                logger.warning(
                    "image_provider_error",
                    provider=provider.get_provider_name(),
                    artist=artist_name,
                    error=str(exc),
                )
                continue
            if image:
                logger.debug(
                    "image_provider_hit", provider=provider.get_provider_name(), artist=artist_name
                )
                return image

        logger.debug("image_not_found", artist=artist_name)
        return None

    async def compare_all(self, artist_name: str) -> dict[str, str | None]:
        """Query every provider concurrently and report each answer by name."""
        results = await asyncio.gather(
            *(p.get_image(artist_name) for p in self._providers), return_exceptions=True
        )
        return {
            provider.get_provider_name(): (None if isinstance(result, BaseException) else result)
            for provider, result in zip(self._providers, results)
        }
