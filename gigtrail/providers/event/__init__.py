"""Event-database adapters (Setlist.fm, Songkick, Ticketmaster, MusicBrainz)."""

from gigtrail.providers.event.musicbrainz_provider import MusicBrainzProvider
from gigtrail.providers.event.setlistfm_provider import SetlistFmProvider
from gigtrail.providers.event.songkick_provider import SongkickProvider
from gigtrail.providers.event.ticketmaster_provider import TicketmasterProvider

__all__ = [
    "MusicBrainzProvider",
    "SetlistFmProvider",
    "SongkickProvider",
    "TicketmasterProvider",
]
