"""Abstract base class for artist-photo providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class IArtistImageProvider(ABC):
    """Contract for artist image lookups.

    Implementations cache results per artist name for their own lifetime,
    negative results included, so repeated lookups cost no network calls.
    """

    @abstractmethod
    async def get_image(self, artist_name: str) -> str | None:
        """Return an image URL for *artist_name*, or ``None`` if none is found.

        Must not raise; provider errors are logged and reported as ``None``.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the short machine id, e.g. ``"spotify"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the provider has the credentials it needs."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Forget every cached lookup."""
