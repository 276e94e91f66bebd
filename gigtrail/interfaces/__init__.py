"""Public interface definitions for all external service providers.

Every external API is reached through one of the abstract base classes in
this package; concrete adapters live in ``gigtrail/providers/`` and are
wired together in ``gigtrail/main.py``.  Tests inject fakes through the
same interfaces.

    Interface              ->  Concrete implementations
    ----------------------------------------------------------------
    IEventProvider         ->  SetlistFmProvider, SongkickProvider,
                               TicketmasterProvider, MusicBrainzProvider
    ISourceProvider        ->  WikipediaProvider, NewsApiProvider
    IArtistImageProvider   ->  MusicBrainzImageProvider, LastFmImageProvider,
                               SpotifyImageProvider, FallbackImageProvider
    ICacheProvider         ->  MemoryCacheProvider
"""

from gigtrail.interfaces.cache_provider import CacheStats, ICacheProvider
from gigtrail.interfaces.event_provider import IEventProvider
from gigtrail.interfaces.image_provider import IArtistImageProvider
from gigtrail.interfaces.source_provider import ISourceProvider

__all__ = [
    "CacheStats",
    "IArtistImageProvider",
    "ICacheProvider",
    "IEventProvider",
    "ISourceProvider",
]
