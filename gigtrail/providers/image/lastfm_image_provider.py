"""Last.fm artist image provider.

Calls ``artist.getinfo`` and picks the largest image size available
(mega, then extralarge, then large).  Last.fm serves a generic star
placeholder for most artists; those hashes are treated as "no image".
"""

from __future__ import annotations

import httpx

from gigtrail.providers.image.base import CachedImageProvider
from gigtrail.utils.http import get_json

_API_URL = "https://ws.audioscrobbler.com/2.0/"
_SIZE_PREFERENCE = ("mega", "extralarge", "large")
_PLACEHOLDER_HASHES = (
    "2a96cbd8b46e442fc41c2b86b821562f",
    "c6f59c1e5e7240a4c0d427abd71f3dbb",
)


class LastFmImageProvider(CachedImageProvider):
    """Last.fm adapter; requires ``LASTFM_API_KEY``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        api_url: str = _API_URL,
    ) -> None:
        super().__init__()
        self._http = http_client
        self._api_key = api_key
        self._api_url = api_url

    def get_provider_name(self) -> str:
        return "lastfm"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def _lookup(self, artist_name: str) -> str | None:
        data = await get_json(
            self._http,
            self._api_url,
            provider=self.get_provider_name(),
            params={
                "method": "artist.getinfo",
                "artist": artist_name,
                "api_key": self._api_key,
                "format": "json",
            },
        ) or {}
        images = (data.get("artist") or {}).get("image") or []
        by_size = {img.get("size"): img.get("#text") for img in images if img.get("#text")}

        for size in _SIZE_PREFERENCE:
            url = by_size.get(size)
            if url and not any(marker in url for marker in _PLACEHOLDER_HASHES):
                return url
        return None
