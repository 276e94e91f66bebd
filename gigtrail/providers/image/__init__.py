"""Artist image providers and the provider-selection policy.

``IMAGE_PROVIDER`` picks one of:

- ``musicbrainz`` -- album covers via the Cover Art Archive (no key),
- ``lastfm`` -- Last.fm artist images,
- ``spotify`` -- Spotify artist photos,
- ``multi`` -- try Spotify, Last.fm, MusicBrainz in that order.

Unknown values fall back to MusicBrainz with a warning.
"""

from __future__ import annotations

import httpx
import structlog

from gigtrail.config.settings import Settings
from gigtrail.interfaces.image_provider import IArtistImageProvider
from gigtrail.providers.image.fallback_image_provider import FallbackImageProvider
from gigtrail.providers.image.lastfm_image_provider import LastFmImageProvider
from gigtrail.providers.image.musicbrainz_image_provider import MusicBrainzImageProvider
from gigtrail.providers.image.spotify_image_provider import SpotifyImageProvider
from gigtrail.utils.concurrency import RequestThrottle

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_FALLBACK_ORDER = ("spotify", "lastfm", "musicbrainz")


def build_image_provider(
    settings: Settings,
    http_client: httpx.AsyncClient,
    *,
    musicbrainz_throttle: RequestThrottle | None = None,
    fallback_order: tuple[str, ...] | list[str] = DEFAULT_FALLBACK_ORDER,
) -> IArtistImageProvider:
    """Construct the image provider named by ``settings.image_provider``.

    Parameters
    ----------
    settings:
        Application settings (credentials and ``image_provider``).
    http_client:
        Shared ``httpx.AsyncClient``.
    musicbrainz_throttle:
        Throttle shared with the MusicBrainz event adapter so both stay
        under one request per second together.
    fallback_order:
        Priority order used when ``image_provider`` is ``multi``.
    """
    factories = {
        "musicbrainz": lambda: MusicBrainzImageProvider(
            http_client,
            user_agent=settings.musicbrainz_user_agent,
            base_url=settings.musicbrainz_base_url,
            throttle=musicbrainz_throttle,
        ),
        "lastfm": lambda: LastFmImageProvider(http_client, api_key=settings.lastfm_api_key),
        "spotify": lambda: SpotifyImageProvider(
            http_client,
            client_id=settings.spotify_client_id,
            client_secret=settings.spotify_client_secret,
        ),
    }

    choice = (settings.image_provider or "musicbrainz").strip().lower()
    if choice == "multi":
        ordered = [factories[name]() for name in fallback_order if name in factories]
        logger.info("image_provider_selected", provider="multi", order=list(fallback_order))
        return FallbackImageProvider(ordered)

    if choice not in factories:
        logger.warning("image_provider_unknown", requested=choice, fallback="musicbrainz")
        choice = "musicbrainz"

    logger.info("image_provider_selected", provider=choice)
    return factories[choice]()


__all__ = [
    "DEFAULT_FALLBACK_ORDER",
    "FallbackImageProvider",
    "LastFmImageProvider",
    "MusicBrainzImageProvider",
    "SpotifyImageProvider",
    "build_image_provider",
]
