"""Abstract base class for event-database providers.

An event provider answers "where and when has this artist played?" from
one external catalogue (Setlist.fm, Songkick, Ticketmaster, MusicBrainz).
Implementations normalize the provider's payload into
:class:`~gigtrail.models.performance.Event` records and never raise from
:meth:`search`: every failure comes back as a failed
:class:`~gigtrail.models.performance.ServiceResponse`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gigtrail.models.performance import Event, SearchParams, ServiceResponse


class IEventProvider(ABC):
    """Contract for event/setlist database adapters."""

    @abstractmethod
    async def search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        """Look up performances for ``params.artist``.

        Parameters
        ----------
        params:
            The lookup request.  ``params.country`` is already an ISO
            alpha-2 code when the aggregator could map it.

        Returns
        -------
        ServiceResponse[list[Event]]
            ``success=True`` with a (possibly empty) list, or
            ``success=False`` with a human-readable error.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the short machine id, e.g. ``"setlistfm"``."""

    @abstractmethod
    def get_display_name(self) -> str:
        """Return the human-facing name, e.g. ``"Setlist.fm"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the adapter has the credentials it needs."""
