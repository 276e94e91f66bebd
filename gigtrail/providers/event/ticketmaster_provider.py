"""Ticketmaster Discovery API event provider implementing IEventProvider.

Queries ``/events.json`` by keyword restricted to the ``music``
classification, optionally filtered server-side by ISO ``countryCode``
and a ``startDateTime`` lower bound.  Ticketmaster pages are 0-indexed;
the paginated fetcher's page ``n`` maps to API page ``n - 1``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from gigtrail.interfaces.event_provider import IEventProvider
from gigtrail.models.performance import Confidence, Event, SearchParams, ServiceResponse
from gigtrail.utils.concurrency import RetryPolicy, retry_async
from gigtrail.utils.country_mapping import extract_country
from gigtrail.utils.dates import to_iso_date
from gigtrail.utils.errors import GigTrailError
from gigtrail.utils.http import get_json
from gigtrail.utils.pagination import PageBudget, PaginationOptions, fetch_pages_in_parallel
from gigtrail.utils.venue_capacity import get_venue_capacity_with_fallback

logger = structlog.get_logger(logger_name=__name__)

_BASE_URL = "https://app.ticketmaster.com/discovery/v2"
_PAGE_SIZE = 50
# Discovery API refuses page * size beyond this depth.
_MAX_DEPTH = 1000


class TicketmasterProvider(IEventProvider):
    """Ticketmaster adapter.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    api_key:
        Ticketmaster consumer key; empty means not configured.
    base_url:
        API root.
    page_budget:
        Page limits for country-filtered vs. worldwide lookups.
    pagination:
        Batch and retry knobs for the paginated fetcher.
    page_size:
        Events per API page.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = _BASE_URL,
        page_budget: PageBudget | None = None,
        pagination: PaginationOptions | None = None,
        page_size: int = _PAGE_SIZE,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._page_budget = page_budget or PageBudget(country=2, worldwide=5)
        self._pagination = pagination or PaginationOptions()
        self._page_size = page_size
        self._retry = RetryPolicy(
            retries=self._pagination.retries, delay=self._pagination.retry_delay
        )

    def get_provider_name(self) -> str:
        return "ticketmaster"

    def get_display_name(self) -> str:
        return "Ticketmaster"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        if not self.is_available():
            return ServiceResponse.fail(
                "Ticketmaster API key not configured", source=self.get_provider_name()
            )

        try:
            return await self._search(params)
        except GigTrailError as exc:
            logger.warning("ticketmaster_search_failed", artist=params.artist, error=str(exc))
            return ServiceResponse.fail(exc.message, source=self.get_provider_name())
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("ticketmaster_malformed_response", artist=params.artist, error=str(exc))
            return ServiceResponse.fail(
                f"Malformed Ticketmaster response: {exc}", source=self.get_provider_name()
            )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _query(self, params: SearchParams, api_page: int) -> dict[str, Any]:
        query: dict[str, Any] = {
            "apikey": self._api_key,
            "keyword": params.artist,
            "classificationName": "music",
            "size": self._page_size,
            "page": api_page,
        }
        if params.country:
            query["countryCode"] = params.country.upper()
        if params.date_from:
            start = params.date_from
            query["startDateTime"] = start if "T" in start else f"{start}T00:00:00Z"
        if params.date_to:
            end = params.date_to
            query["endDateTime"] = end if "T" in end else f"{end}T23:59:59Z"
        return query

    async def _fetch(self, params: SearchParams, api_page: int) -> dict[str, Any]:
        return await get_json(
            self._http,
            f"{self._base_url}/events.json",
            provider=self.get_provider_name(),
            params=self._query(params, api_page),
        ) or {}

    async def _search(self, params: SearchParams) -> ServiceResponse[list[Event]]:
        first_page = await retry_async(
            lambda: self._fetch(params, 0),
            self._retry,
            label="ticketmaster:page1",
        )
        page_info = first_page.get("page") or {}
        total = int(page_info.get("totalElements") or 0)
        api_pages = int(page_info.get("totalPages") or 1)
        depth_limit = max(1, _MAX_DEPTH // self._page_size)
        pages = min(self._page_budget.pages_for(params.country), api_pages, depth_limit)

        async def _page(page: int) -> list[dict[str, Any]]:
            data = first_page if page == 1 else await self._fetch(params, page - 1)
            return list((data.get("_embedded") or {}).get("events") or [])

        raw_events = await fetch_pages_in_parallel(
            _page,
            total_pages=max(1, pages),
            provider=self.get_provider_name(),
            **self._pagination.as_kwargs(),
        )

        events = [self._to_event(raw) for raw in raw_events]
        logger.info(
            "ticketmaster_search_complete",
            artist=params.artist,
            country=params.country,
            events=len(events),
            total=total,
        )
        return ServiceResponse.ok(
            events, source=self.get_provider_name(), total_available=total or None
        )

    def _to_event(self, raw: dict[str, Any]) -> Event:
        venues = (raw.get("_embedded") or {}).get("venues") or [{}]
        venue = venues[0] or {}
        country_info = venue.get("country") or {}

        venue_name = venue.get("name")
        city_name = (venue.get("city") or {}).get("name")
        country = extract_country(country_info.get("name"), country_info.get("countryCode"))
        start = (raw.get("dates") or {}).get("start") or {}

        return Event(
            date=to_iso_date(start.get("localDate") or start.get("dateTime")),
            venue=venue_name,
            city=city_name,
            country=country,
            source=self.get_display_name(),
            source_url=raw.get("url") or "",
            confidence=Confidence.HIGH,
            capacity=get_venue_capacity_with_fallback(venue_name, city_name, country),
        )
