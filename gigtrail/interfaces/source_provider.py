"""Abstract base class for source-link providers (encyclopedia, news).

Source providers do not produce events; they return supporting links
(articles, encyclopedia pages) that back up the aggregated answer.  They
receive the user's original country phrasing since free-text search
engines match "France" better than "FR".
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gigtrail.models.performance import SearchParams, ServiceResponse, SourceLink


class ISourceProvider(ABC):
    """Contract for search/news adapters."""

    @abstractmethod
    async def search(self, params: SearchParams) -> ServiceResponse[list[SourceLink]]:
        """Return supporting links for ``params.artist`` in ``params.country``."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the short machine id, e.g. ``"wikipedia"``."""

    @abstractmethod
    def get_display_name(self) -> str:
        """Return the human-facing name, e.g. ``"Wikipedia"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the adapter has the credentials it needs."""
