"""MusicBrainz + Cover Art Archive image provider.

MusicBrainz stores no artist photos, so this provider returns album art:
it resolves the artist, then asks the Cover Art Archive for the front
cover of the artist's first album release group.  Cover Art Archive
answers with redirects, resolved via
HEAD so the returned URL points straight at the image.
"""

from __future__ import annotations

from typing import Any

import httpx

from gigtrail.providers.image.base import CachedImageProvider
from gigtrail.utils.concurrency import RequestThrottle
from gigtrail.utils.http import get_json, resolve_redirect
from gigtrail.utils.text_normalizer import best_artist_match

_BASE_URL = "https://musicbrainz.org/ws/2"
_COVER_ART_URL = "https://coverartarchive.org"
_MIN_REQUEST_INTERVAL = 1.0  # seconds between MusicBrainz requests


class MusicBrainzImageProvider(CachedImageProvider):
    """Album-cover fallback image provider (no key required)."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        user_agent: str,
        base_url: str = _BASE_URL,
        cover_art_url: str = _COVER_ART_URL,
        throttle: RequestThrottle | None = None,
    ) -> None:
        super().__init__()
        self._http = http_client
        self._user_agent = user_agent
        self._base_url = base_url.rstrip("/")
        self._cover_art_url = cover_art_url.rstrip("/")
        self._throttle = throttle or RequestThrottle(_MIN_REQUEST_INTERVAL)

    def get_provider_name(self) -> str:
        return "musicbrainz"

    def is_available(self) -> bool:
        return True

    async def _get(self, path: str, query: dict[str, Any]) -> dict[str, Any]:
        await self._throttle.wait()
        return await get_json(
            self._http,
            f"{self._base_url}{path}",
            provider=self.get_provider_name(),
            params={**query, "fmt": "json"},
            headers={"User-Agent": self._user_agent, "Accept": "application/json"},
        ) or {}

    async def _front_cover(self, release_group_id: str) -> str | None:
        return await resolve_redirect(
            self._http,
            f"{self._cover_art_url}/release-group/{release_group_id}/front",
            provider="coverartarchive",
        )

    async def _lookup(self, artist_name: str) -> str | None:
        escaped = artist_name.replace('"', '\\"')
        data = await self._get("/artist", {"query": f'artist:"{escaped}"', "limit": 5})
        artist = best_artist_match(artist_name, data.get("artists") or [], lambda a: a.get("name"))
        if artist is None:
            return None

        groups = await self._get(
            "/release-group", {"artist": artist["id"], "type": "album", "limit": 1}
        )
        for group in groups.get("release-groups") or []:
            if group.get("id"):
                cover = await self._front_cover(group["id"])
                if cover:
                    return cover
        return None
