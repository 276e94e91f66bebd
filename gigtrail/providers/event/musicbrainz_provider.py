"""MusicBrainz event provider implementing IEventProvider.

Talks to the MusicBrainz JSON web service directly over httpx.  No API key
is needed, but every request must carry an identifying User-Agent and
clients must stay at or under one request per second; the adapter owns a
:class:`~gigtrail.utils.concurrency.RequestThrottle` for that.

Events are browsed with ``inc=place-rels+area-rels`` so each one carries
its "held at" place (venue, area) and "held in" area relations.  Country
filtering happens here, against the ISO 3166-1 codes of those areas.
"""

from __future__ import annotations

import math
from typing import Any

import httpx
import structlog

from gigtrail.interfaces.event_provider import IEventProvider
from gigtrail.models.performance import Confidence, Event, SearchParams, ServiceResponse
from gigtrail.utils.concurrency import RequestThrottle, RetryPolicy, retry_async
from gigtrail.utils.country_mapping import extract_country, normalize_country_name
from gigtrail.utils.dates import to_iso_date
from gigtrail.utils.errors import GigTrailError
from gigtrail.utils.http import get_json
from gigtrail.utils.pagination import PageBudget, PaginationOptions, fetch_pages_in_parallel
from gigtrail.utils.text_normalizer import best_artist_match
from gigtrail.utils.venue_capacity import get_venue_capacity_with_fallback

logger = structlog.get_logger(logger_name=__name__)

_BASE_URL = "https://musicbrainz.org/ws/2"
_SITE_URL = "https://musicbrainz.org"
_PAGE_LIMIT = 100
_MIN_REQUEST_INTERVAL = 1.0  # seconds between requests


class MusicBrainzProvider(IEventProvider):
    """MusicBrainz event adapter with built-in rate limiting.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    user_agent:
        ``app/version ( contact )`` string MusicBrainz requires.
    base_url:
        Web-service root.
    page_budget:
        Page limits (100 events each) for country-filtered vs. worldwide lookups.
    pagination:
        Batch and retry knobs for the paginated fetcher.
    throttle:
        Request spacing; a fresh 1 req/s throttle when omitted.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        user_agent: str,
        base_url: str = _BASE_URL,
        page_budget: PageBudget | None = None,
        pagination: PaginationOptions | None = None,
        throttle: RequestThrottle | None = None,
    ) -> None:
        self._http = http_client
        self._user_agent = user_agent
        self._base_url = base_url.rstrip("/")
        self._page_budget = page_budget or PageBudget(country=1, worldwide=3)
        self._pagination = pagination or PaginationOptions()
        self._throttle = throttle or RequestThrottle(_MIN_REQUEST_INTERVAL)
        self._retry = RetryPolicy(
            retries=self._pagination.retries, delay=self._pagination.retry_delay
        )

    def get_provider_name(self) -> str:
        return "musicbrainz"

    def get_display_name(self) -> str:
        return "MusicBrainz"

    def is_available(self) -> bool:
        return True

    async def search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        try:
            return await self._search(params)
        except GigTrailError as exc:
            logger.warning("musicbrainz_search_failed", artist=params.artist, error=str(exc))
            return ServiceResponse.fail(exc.message, source=self.get_provider_name())
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("musicbrainz_malformed_response", artist=params.artist, error=str(exc))
            return ServiceResponse.fail(
                f"Malformed MusicBrainz response: {exc}", source=self.get_provider_name()
            )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get(self, path: str, query: dict[str, Any]) -> dict[str, Any]:
        await self._throttle.wait()
        return await get_json(
            self._http,
            f"{self._base_url}{path}",
            provider=self.get_provider_name(),
            params={**query, "fmt": "json"},
            headers={"User-Agent": self._user_agent, "Accept": "application/json"},
        ) or {}

    async def _resolve_artist(self, name: str) -> dict[str, Any] | None:
        escaped = name.replace('"', '\\"')
        data = await retry_async(
            lambda: self._get("/artist", {"query": f'artist:"{escaped}"', "limit": 5}),
            self._retry,
            label="musicbrainz:artist",
        )
        return best_artist_match(name, data.get("artists") or [], lambda a: a.get("name"))

    async def _events_page(self, mbid: str, page: int) -> dict[str, Any]:
        return await self._get(
            "/event",
            {
                "artist": mbid,
                "limit": _PAGE_LIMIT,
                "offset": (page - 1) * _PAGE_LIMIT,
                "inc": "place-rels+area-rels",
            },
        )

    async def _search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        artist = await self._resolve_artist(params.artist)
        if artist is None:
            logger.info("musicbrainz_artist_not_found", artist=params.artist)
            return ServiceResponse.ok([], source=self.get_provider_name())

        mbid = artist["id"]
        first_page = await retry_async(
            lambda: self._events_page(mbid, 1),
            self._retry,
            label="musicbrainz:page1",
        )
        total = int(first_page.get("event-count") or 0)
        available_pages = max(1, math.ceil(total / _PAGE_LIMIT)) if total else 1
        pages = min(self._page_budget.pages_for(params.country), available_pages)

        async def _page(page: int) -> list[dict[str, Any]]:
            data = first_page if page == 1 else await self._events_page(mbid, page)
            return list(data.get("events") or [])

        raw_events = await fetch_pages_in_parallel(
            _page,
            total_pages=pages,
            provider=self.get_provider_name(),
            **self._pagination.as_kwargs(),
        )

        if params.country:
            raw_events = [e for e in raw_events if self._in_country(e, params.country)]

        events = [self._to_event(raw) for raw in raw_events]
        logger.info(
            "musicbrainz_search_complete",
            artist=artist.get("name"),
            country=params.country,
            events=len(events),
            total=total,
        )
        return ServiceResponse.ok(
            events, source=self.get_provider_name(), total_available=total or None
        )

    # ------------------------------------------------------------------
    # Relation parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _places(raw: dict[str, Any]) -> list[dict[str, Any]]:
        return [
            rel["place"]
            for rel in raw.get("relations") or []
            if rel.get("type") == "held at" and rel.get("place")
        ]

    @staticmethod
    def _areas(raw: dict[str, Any]) -> list[dict[str, Any]]:
        return [
            rel["area"]
            for rel in raw.get("relations") or []
            if rel.get("target-type") == "area" and rel.get("area")
        ]

    def _in_country(self, raw: dict[str, Any], country: str) -> bool:
        code = country.upper()
        wanted_name = normalize_country_name(country).lower()
        for place in self._places(raw):
            area = place.get("area") or {}
            if code in (area.get("iso-3166-1-codes") or []):
                return True
            if (place.get("country") or "").upper() == code:
                return True
            if code in (place.get("iso-3166-1-codes") or []):
                return True
            if (area.get("name") or "").lower() == wanted_name:
                return True
        for area in self._areas(raw):
            if code in (area.get("iso-3166-1-codes") or []):
                return True
        return False

    def _to_event(self, raw: dict[str, Any]) -> Event:
        venue_name = city_name = country = None

        places = self._places(raw)
        if places:
            place = places[0]
            venue_name = place.get("name")
            area = place.get("area") or {}
            codes = area.get("iso-3166-1-codes") or []
            if codes:
                country = extract_country(area.get("name"), codes[0])
            else:
                city_name = area.get("name")
            if country is None and place.get("country"):
                country = extract_country(None, place["country"])

        if country is None:
            for area in self._areas(raw):
                codes = area.get("iso-3166-1-codes") or []
                if codes:
                    country = extract_country(area.get("name"), codes[0])
                    break
                if city_name is None:
                    city_name = area.get("name")

        life_span = raw.get("life-span") or {}
        return Event(
            date=to_iso_date(life_span.get("begin") or raw.get("begin")),
            venue=venue_name,
            city=city_name,
            country=country,
            source=self.get_display_name(),
            source_url=f"{_SITE_URL}/event/{raw['id']}" if raw.get("id") else "",
            confidence=Confidence.HIGH,
            capacity=get_venue_capacity_with_fallback(venue_name, city_name, country),
        )
