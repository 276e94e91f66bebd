"""Spotify artist image provider (client-credentials flow).

The access token is requested on first use and kept on the instance until
60 seconds before it expires.  Artist search returns images largest
first, so the first image is used.
"""

from __future__ import annotations

import time
from typing import Callable

import httpx
import structlog

from gigtrail.providers.image.base import CachedImageProvider
from gigtrail.utils.errors import ConfigurationError, ProviderError, ProviderUnavailableError
from gigtrail.utils.http import get_json

logger = structlog.get_logger(logger_name=__name__)

_AUTH_URL = "https://accounts.spotify.com/api/token"
_API_URL = "https://api.spotify.com/v1"
_EXPIRY_MARGIN = 60.0  # seconds


class SpotifyImageProvider(CachedImageProvider):
    """Spotify adapter; requires ``SPOTIFY_CLIENT_ID`` and ``SPOTIFY_CLIENT_SECRET``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        auth_url: str = _AUTH_URL,
        api_url: str = _API_URL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self._http = http_client
        self._client_id = client_id
        self._client_secret = client_secret
        self._auth_url = auth_url
        self._api_url = api_url.rstrip("/")
        self._clock = clock
        self._access_token: str | None = None
        self._token_expiry: float = 0.0

    def get_provider_name(self) -> str:
        return "spotify"

    def is_available(self) -> bool:
        return bool(self._client_id and self._client_secret)

    async def _get_access_token(self) -> str:
        if self._access_token and self._clock() < self._token_expiry:
            return self._access_token
        if not self.is_available():
            raise ConfigurationError(
                message="Spotify credentials not configured", provider_name="spotify"
            )

        try:
            response = await self._http.post(
                self._auth_url,
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
                timeout=15.0,
            )
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message=f"Spotify auth request failed: {exc}", provider_name="spotify"
            ) from exc

        if response.status_code != 200:
            raise ProviderError(
                message=f"Spotify auth error: HTTP {response.status_code}",
                provider_name="spotify",
                status_code=response.status_code,
            )

        payload = response.json()
        self._access_token = payload["access_token"]
        expires_in = float(payload.get("expires_in") or 3600)
        self._token_expiry = self._clock() + expires_in - _EXPIRY_MARGIN
        logger.debug("spotify_token_refreshed", expires_in=expires_in)
        return self._access_token

    async def _lookup(self, artist_name: str) -> str | None:
        token = await self._get_access_token()
        try:
            data = await get_json(
                self._http,
                f"{self._api_url}/search",
                provider=self.get_provider_name(),
                params={"q": artist_name, "type": "artist", "limit": 1},
                headers={"Authorization": f"Bearer {token}"},
            ) or {}
        except ProviderError as exc:
            if exc.status_code == 401:
                self._access_token = None
            raise
        artists = (data.get("artists") or {}).get("items") or []
        if not artists:
            return None
        images = artists[0].get("images") or []
        return images[0].get("url") if images else None
