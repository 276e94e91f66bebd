"""Setlist.fm event provider implementing IEventProvider.

Uses the Setlist.fm REST API (``x-api-key`` header).  Lookup is two-step:
``/search/artists`` resolves the name to a MusicBrainz id, then
``/search/setlists`` pages through that artist's setlists, optionally
filtered server-side by ISO ``countryCode``.

Page 1 is fetched up front to learn ``total``/``itemsPerPage``; the
remaining pages go through the paginated fetcher and page 1 is reused.
Setlist.fm answers 404 when a search has no hits, which is treated as an
empty result rather than an error.
"""

from __future__ import annotations

import math
from typing import Any

import httpx
import structlog

from gigtrail.interfaces.event_provider import IEventProvider
from gigtrail.models.performance import Confidence, Event, SearchParams, ServiceResponse
from gigtrail.utils.concurrency import RetryPolicy, retry_async
from gigtrail.utils.country_mapping import extract_country
from gigtrail.utils.dates import to_iso_date
from gigtrail.utils.errors import GigTrailError, ProviderError
from gigtrail.utils.http import get_json
from gigtrail.utils.pagination import PageBudget, PaginationOptions, fetch_pages_in_parallel
from gigtrail.utils.text_normalizer import best_artist_match
from gigtrail.utils.venue_capacity import get_venue_capacity_with_fallback

logger = structlog.get_logger(logger_name=__name__)

_BASE_URL = "https://api.setlist.fm/rest/1.0"
_SITE_URL = "https://www.setlist.fm"
_DEFAULT_ITEMS_PER_PAGE = 20


class SetlistFmProvider(IEventProvider):
    """Setlist.fm adapter.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    api_key:
        Setlist.fm API key; empty means not configured.
    base_url:
        API root, overridable for tests and mirrors.
    page_budget:
        Page limits for country-filtered vs. worldwide lookups.
    pagination:
        Batch and retry knobs for the paginated fetcher.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = _BASE_URL,
        page_budget: PageBudget | None = None,
        pagination: PaginationOptions | None = None,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._page_budget = page_budget or PageBudget(country=3, worldwide=10)
        self._pagination = pagination or PaginationOptions()
        self._retry = RetryPolicy(
            retries=self._pagination.retries, delay=self._pagination.retry_delay
        )

    # ------------------------------------------------------------------
    # IEventProvider implementation
    # ------------------------------------------------------------------

    def get_provider_name(self) -> str:
        return "setlistfm"

    def get_display_name(self) -> str:
        return "Setlist.fm"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        if not self.is_available():
            return ServiceResponse.fail(
                "Setlist.fm API key not configured", source=self.get_provider_name()
            )

        try:
            return await self._search(params)
        except GigTrailError as exc:
            logger.warning("setlistfm_search_failed", artist=params.artist, error=str(exc))
            return ServiceResponse.fail(exc.message, source=self.get_provider_name())
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("setlistfm_malformed_response", artist=params.artist, error=str(exc))
            return ServiceResponse.fail(
                f"Malformed Setlist.fm response: {exc}", source=self.get_provider_name()
            )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @property
    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "x-api-key": self._api_key}

    async def _get(self, path: str, query: dict[str, Any]) -> dict[str, Any]:
        try:
            return await get_json(
                self._http,
                f"{self._base_url}{path}",
                provider=self.get_provider_name(),
                params=query,
                headers=self._headers,
            )
        except ProviderError as exc:
            if exc.status_code == 404:
                return {}
            raise

    async def _resolve_artist(self, name: str) -> dict[str, Any] | None:
        data = await retry_async(
            lambda: self._get(
                "/search/artists", {"artistName": name, "p": 1, "sort": "relevance"}
            ),
            self._retry,
            label="setlistfm:artist",
        )
        candidates = [a for a in data.get("artist") or [] if a.get("mbid")]
        return best_artist_match(name, candidates, lambda a: a.get("name"))

    async def _fetch_setlists(
        self, mbid: str, page: int, country: str | None
    ) -> dict[str, Any]:
        query: dict[str, Any] = {"artistMbid": mbid, "p": page}
        if country:
            query["countryCode"] = country.upper()
        return await self._get("/search/setlists", query)

    async def _search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        artist = await self._resolve_artist(params.artist)
        if artist is None:
            logger.info("setlistfm_artist_not_found", artist=params.artist)
            return ServiceResponse.ok([], source=self.get_provider_name())

        mbid = artist["mbid"]
        artist_name = artist.get("name") or params.artist

        first_page = await retry_async(
            lambda: self._fetch_setlists(mbid, 1, params.country),
            self._retry,
            label="setlistfm:page1",
        )
        total = int(first_page.get("total") or 0)
        per_page = int(first_page.get("itemsPerPage") or _DEFAULT_ITEMS_PER_PAGE)
        available_pages = max(1, math.ceil(total / per_page)) if total else 1
        pages = min(self._page_budget.pages_for(params.country), available_pages)

        async def _page(page: int) -> list[dict[str, Any]]:
            if page == 1:
                return list(first_page.get("setlist") or [])
            data = await self._fetch_setlists(mbid, page, params.country)
            return list(data.get("setlist") or [])

        setlists = await fetch_pages_in_parallel(
            _page,
            total_pages=pages,
            provider=self.get_provider_name(),
            **self._pagination.as_kwargs(),
        )

        events = [self._to_event(setlist, artist_name) for setlist in setlists]
        logger.info(
            "setlistfm_search_complete",
            artist=artist_name,
            country=params.country,
            events=len(events),
            total=total,
            pages=pages,
        )
        return ServiceResponse.ok(
            events, source=self.get_provider_name(), total_available=total or None
        )

    def _to_event(self, setlist: dict[str, Any], artist_name: str) -> Event:
        venue = setlist.get("venue") or {}
        city = venue.get("city") or {}
        country_info = city.get("country") or {}

        venue_name = venue.get("name")
        city_name = city.get("name")
        country = extract_country(country_info.get("name"), country_info.get("code"))

        url = setlist.get("url")
        if not url and setlist.get("id"):
            url = f"{_SITE_URL}/setlist/{artist_name}/{setlist['id']}.html"

        songs = self._songs(setlist)
        return Event(
            date=to_iso_date(setlist.get("eventDate")),
            venue=venue_name,
            city=city_name,
            country=country,
            source=self.get_display_name(),
            source_url=url or "",
            confidence=Confidence.HIGH,
            setlist=songs or None,
            capacity=get_venue_capacity_with_fallback(venue_name, city_name, country),
        )

    @staticmethod
    def _songs(setlist: dict[str, Any]) -> list[str]:
        songs: list[str] = []
        for song_set in (setlist.get("sets") or {}).get("set") or []:
            for song in song_set.get("song") or []:
                name = song.get("name")
                if not name:
                    continue
                cover = song.get("cover") or {}
                songs.append(f"{name} ({cover['name']} cover)" if cover.get("name") else name)
        return songs
