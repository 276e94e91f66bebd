"""Songkick event provider implementing IEventProvider.

Songkick authenticates with an ``apikey`` query parameter.  The artist is
resolved through ``/search/artists.json``; past shows come from the
paginated ``/artists/{id}/gigography.json`` and upcoming ones from
``/artists/{id}/calendar.json``.

Songkick has no server-side country filter, so events are filtered here:
the caller's ISO code is turned into a canonical country name and
compared with each event's normalized country.
"""

from __future__ import annotations

import math
from typing import Any

import httpx
import structlog

from gigtrail.interfaces.event_provider import IEventProvider
from gigtrail.models.performance import Confidence, Event, SearchParams, ServiceResponse
from gigtrail.utils.concurrency import RetryPolicy, retry_async
from gigtrail.utils.country_mapping import extract_country, get_country_name, normalize_country_name
from gigtrail.utils.dates import to_iso_date
from gigtrail.utils.errors import GigTrailError
from gigtrail.utils.http import get_json
from gigtrail.utils.pagination import PageBudget, PaginationOptions, fetch_pages_in_parallel
from gigtrail.utils.text_normalizer import best_artist_match
from gigtrail.utils.venue_capacity import get_venue_capacity_with_fallback

logger = structlog.get_logger(logger_name=__name__)

_BASE_URL = "https://api.songkick.com/api/3.0"
_PER_PAGE = 50


class SongkickProvider(IEventProvider):
    """Songkick adapter.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    api_key:
        Songkick API key; empty means not configured.
    base_url:
        API root.
    page_budget:
        Gigography page limits for country-filtered vs. worldwide lookups.
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
        self._page_budget = page_budget or PageBudget(country=2, worldwide=5)
        self._pagination = pagination or PaginationOptions()
        self._retry = RetryPolicy(
            retries=self._pagination.retries, delay=self._pagination.retry_delay
        )

    def get_provider_name(self) -> str:
        return "songkick"

    def get_display_name(self) -> str:
        return "Songkick"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        if not self.is_available():
            return ServiceResponse.fail(
                "Songkick API key not configured", source=self.get_provider_name()
            )

        try:
            return await self._search(params)
        except GigTrailError as exc:
            logger.warning("songkick_search_failed", artist=params.artist, error=str(exc))
            return ServiceResponse.fail(exc.message, source=self.get_provider_name())
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("songkick_malformed_response", artist=params.artist, error=str(exc))
            return ServiceResponse.fail(
                f"Malformed Songkick response: {exc}", source=self.get_provider_name()
            )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get(self, path: str, query: dict[str, Any] | None = None) -> dict[str, Any]:
        data = await get_json(
            self._http,
            f"{self._base_url}{path}",
            provider=self.get_provider_name(),
            params={"apikey": self._api_key, **(query or {})},
        )
        return (data or {}).get("resultsPage") or {}

    async def _resolve_artist(self, name: str) -> dict[str, Any] | None:
        page = await retry_async(
            lambda: self._get("/search/artists.json", {"query": name}),
            self._retry,
            label="songkick:artist",
        )
        candidates = (page.get("results") or {}).get("artist") or []
        return best_artist_match(name, candidates, lambda a: a.get("displayName"))

    async def _gigography_page(self, artist_id: Any, page: int) -> dict[str, Any]:
        return await self._get(
            f"/artists/{artist_id}/gigography.json",
            {"page": page, "per_page": _PER_PAGE, "order": "desc"},
        )

    async def _calendar(self, artist_id: Any) -> list[dict[str, Any]]:
        """Upcoming shows; a failure here only loses the upcoming part."""
        try:
            page = await self._get(f"/artists/{artist_id}/calendar.json")
        except GigTrailError as exc:
            logger.warning("songkick_calendar_failed", artist_id=artist_id, error=str(exc))
            return []
        return list((page.get("results") or {}).get("event") or [])

    async def _search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        artist = await self._resolve_artist(params.artist)
        if artist is None:
            logger.info("songkick_artist_not_found", artist=params.artist)
            return ServiceResponse.ok([], source=self.get_provider_name())

        artist_id = artist["id"]
        first_page = await retry_async(
            lambda: self._gigography_page(artist_id, 1),
            self._retry,
            label="songkick:page1",
        )
        total = int(first_page.get("totalEntries") or 0)
        per_page = int(first_page.get("perPage") or _PER_PAGE)
        available_pages = max(1, math.ceil(total / per_page)) if total else 1
        pages = min(self._page_budget.pages_for(params.country), available_pages)

        async def _page(page: int) -> list[dict[str, Any]]:
            data = first_page if page == 1 else await self._gigography_page(artist_id, page)
            return list((data.get("results") or {}).get("event") or [])

        past = await fetch_pages_in_parallel(
            _page,
            total_pages=pages,
            provider=self.get_provider_name(),
            **self._pagination.as_kwargs(),
        )
        upcoming = await self._calendar(artist_id)

        events = [self._to_event(raw) for raw in [*upcoming, *past]]
        if params.country:
            events = [e for e in events if self._matches_country(e, params.country)]

        logger.info(
            "songkick_search_complete",
            artist=artist.get("displayName"),
            country=params.country,
            events=len(events),
            total=total,
        )
        return ServiceResponse.ok(
            events, source=self.get_provider_name(), total_available=total or None
        )

    @staticmethod
    def _matches_country(event: Event, country: str) -> bool:
        actual = event.country.lower()
        resolved = get_country_name(country) if len(country) == 2 else None
        if resolved:
            return actual == resolved.lower()

        # Free text that maps to no ISO code: exact canonical name, else substring.
        wanted = normalize_country_name(country).lower()
        return actual == wanted or (len(wanted) > 2 and wanted in actual)

    def _to_event(self, raw: dict[str, Any]) -> Event:
        venue = raw.get("venue") or {}
        location_city = (raw.get("location") or {}).get("city")
        if isinstance(location_city, dict):
            city_info = location_city
        else:
            city_info = (venue.get("metroArea") or {})
        country_info = city_info.get("country") or {}

        venue_name = venue.get("displayName")
        city_name = city_info.get("displayName")
        if city_name is None and isinstance(location_city, str):
            # Songkick sends "City, Country" as a plain string on some payloads.
            city_name = location_city.split(",")[0].strip()
        country = extract_country(country_info.get("displayName"), None)

        return Event(
            date=to_iso_date((raw.get("start") or {}).get("date")),
            venue=venue_name,
            city=city_name,
            country=country,
            source=self.get_display_name(),
            source_url=raw.get("uri") or "",
            confidence=Confidence.HIGH,
            capacity=get_venue_capacity_with_fallback(venue_name, city_name, country),
        )
