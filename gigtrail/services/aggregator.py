"""Parallel performance aggregator across every configured provider.

Answers "has artist X performed in Y?" by fanning out to every event
adapter, source adapter and the image provider at once, then merging the
event lists into one deduplicated, date-sorted :class:`PerformanceResult`.

Architecture role: **Facade / Dispatcher**
------------------------------------------
The aggregator holds no provider-specific logic.  It

1. short-circuits on a cache hit,
2. maps the requested country to an ISO code for the event APIs,
3. runs all adapters concurrently via ``asyncio.gather`` with
   ``return_exceptions=True``, so one broken adapter cannot cancel the rest,
4. merges, deduplicates and sorts events, caps source links, and caches
   the result.

Provider failures only ever remove that provider's contribution; when
nothing at all is found, the failed providers' errors become the message.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Sequence

import structlog

from gigtrail.interfaces.cache_provider import ICacheProvider
from gigtrail.interfaces.event_provider import IEventProvider
from gigtrail.interfaces.image_provider import IArtistImageProvider
from gigtrail.interfaces.source_provider import ISourceProvider
from gigtrail.models.performance import (
    WORLDWIDE,
    Event,
    PerformanceResult,
    SearchParams,
    ServiceResponse,
    SourceLink,
)
from gigtrail.providers.cache.memory_cache import generate_cache_key
from gigtrail.utils.country_mapping import to_iso_country_code
from gigtrail.utils.dates import parse_sortable_date
from gigtrail.utils.logging import get_logger

DEFAULT_MAX_SOURCES = 10


# ---------------------------------------------------------------------------
# Merge helpers
# ---------------------------------------------------------------------------


def _dedup_key(event: Event) -> tuple[str, str, str]:
    return (event.date.lower(), event.venue.lower(), event.city.lower())


def deduplicate_events(events: Sequence[Event]) -> list[Event]:
    """Drop repeats of the same (date, venue, city), case-insensitively.

    The first occurrence wins, so provider order decides which record
    survives.  Venues spelled differently across providers are not merged.
    """
    seen: set[tuple[str, str, str]] = set()
    unique: list[Event] = []
    for event in events:
        key = _dedup_key(event)
        if key not in seen:
            seen.add(key)
            unique.append(event)
    return unique


def _sort_key(event: Event) -> tuple[int, int]:
    parsed: date | None = parse_sortable_date(event.date) if event.has_known_date else None
    if parsed is None:
        return (1, 0)
    return (0, -parsed.toordinal())


def sort_events_by_date(events: Sequence[Event]) -> list[Event]:
    """Most recent first; unknown or unparseable dates always last.

    The sort is stable, so events on the same date keep their merge order.
    """
    return sorted(events, key=_sort_key)


def compose_summary(result: PerformanceResult) -> str:
    """One-line human-readable digest of an aggregated result."""
    if not result.performed or not result.events:
        return result.message or "No performances found."

    latest = result.events[0]
    return (
        f"Yes, {result.artist} has performed in {result.location}. "
        f"Found {len(result.events)} event(s). "
        f"Most recent: {latest.venue}, {latest.city} on {latest.date}."
    )


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


class PerformanceAggregator:
    """Fan-out/fan-in over every provider, with result caching.

    Parameters
    ----------
    event_providers:
        Event-database adapters, in merge-priority order.
    source_providers:
        Source-link adapters, in display order.
    cache:
        Result cache keyed by :func:`generate_cache_key`.
    image_provider:
        Optional artist photo lookup.
    cache_ttl:
        Seconds a result stays cached; ``None`` uses the cache default.
    max_sources:
        Cap on the number of source links returned.
    """

    def __init__(
        self,
        event_providers: Sequence[IEventProvider],
        source_providers: Sequence[ISourceProvider],
        cache: ICacheProvider,
        image_provider: IArtistImageProvider | None = None,
        cache_ttl: float | None = None,
        max_sources: int = DEFAULT_MAX_SOURCES,
    ) -> None:
        self._event_providers = list(event_providers)
        self._source_providers = list(source_providers)
        self._cache = cache
        self._image_provider = image_provider
        self._cache_ttl = cache_ttl
        self._max_sources = max_sources
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def event_providers(self) -> list[IEventProvider]:
        return list(self._event_providers)

    @property
    def source_providers(self) -> list[ISourceProvider]:
        return list(self._source_providers)

    # -- Public API -----------------------------------------------------------

    async def aggregate(self, params: SearchParams) -> PerformanceResult:
        """Collect, merge and cache every provider's answer for *params*.

        Never raises for provider failures; the result's ``message`` explains
        an empty answer.
        """
        cache_key = generate_cache_key(params.artist, params.country)
        cached = self._cache.get(cache_key)
        if cached is not None:
            self._logger.info("aggregate_cache_hit", key=cache_key)
            return cached.model_copy(update={"cached": True})

        iso_country = to_iso_country_code(params.country)
        provider_params = params.model_copy(update={"country": iso_country})
        self._logger.info(
            "aggregate_started",
            artist=params.artist,
            country=params.country,
            iso_country=iso_country,
            event_providers=len(self._event_providers),
            source_providers=len(self._source_providers),
        )

        event_tasks = [p.search(provider_params) for p in self._event_providers]
        source_tasks = [p.search(params) for p in self._source_providers]
        image_task = (
            [self._image_provider.get_image(params.artist)] if self._image_provider else []
        )
        raw = await asyncio.gather(
            *event_tasks, *source_tasks, *image_task, return_exceptions=True
        )

        n_events = len(event_tasks)
        n_sources = len(source_tasks)
        event_responses = [
            self._as_response(provider, outcome)
            for provider, outcome in zip(self._event_providers, raw[:n_events])
        ]
        source_responses = [
            self._as_response(provider, outcome)
            for provider, outcome in zip(
                self._source_providers, raw[n_events:n_events + n_sources]
            )
        ]
        artist_image = self._image_result(raw[n_events + n_sources:])

        merged: list[Event] = []
        counts: dict[str, Any] = {}
        for provider, response in zip(self._event_providers, event_responses):
            if response.success and response.data:
                merged.extend(response.data)
                counts[provider.get_provider_name()] = len(response.data)
            elif response.success:
                counts[provider.get_provider_name()] = 0
            else:
                counts[provider.get_provider_name()] = f"error: {response.error}"
        self._logger.info("aggregate_provider_counts", artist=params.artist, **counts)

        events = sort_events_by_date(deduplicate_events(merged))
        performed = bool(events)

        totals = [
            r.total_available for r in event_responses if r.success and r.total_available is not None
        ]
        total_available = max(totals) if totals else None

        message = None
        if not performed:
            message = self._empty_message(params, event_responses)

        sources: list[SourceLink] = []
        for response in source_responses:
            if response.success and response.data:
                sources.extend(response.data)

        result = PerformanceResult(
            artist=params.artist,
            location=params.country or WORLDWIDE,
            performed=performed,
            events=events,
            sources=sources[: self._max_sources],
            message=message,
            artist_image=artist_image,
            total_available=total_available,
            cached=False,
        )
        self._cache.set(cache_key, result, self._cache_ttl)

        self._logger.info(
            "aggregate_complete",
            artist=params.artist,
            location=result.location,
            merged=len(merged),
            events=len(events),
            sources=len(result.sources),
            performed=performed,
        )
        return result

    async def summarize(self, artist: str, country: str | None = None) -> str:
        """Aggregate and render the one-line digest."""
        result = await self.aggregate(SearchParams(artist=artist, country=country))
        return compose_summary(result)

    # -- Private helpers ------------------------------------------------------

    def _as_response(self, provider: Any, outcome: Any) -> ServiceResponse:
        """Turn an unexpected exception from an adapter into a failure envelope."""
        if isinstance(outcome, BaseException):
            self._logger.error(
                "provider_raised",
                provider=provider.get_provider_name(),
                error=str(outcome),
                error_type=type(outcome).__name__,
            )
            return ServiceResponse.fail(
                str(outcome) or type(outcome).__name__, source=provider.get_provider_name()
            )
        return outcome

    def _image_result(self, outcomes: list[Any]) -> str | None:
        if not outcomes:
            return None
        outcome = outcomes[0]
        if isinstance(outcome, BaseException):
            self._logger.warning("image_lookup_raised", error=str(outcome))
            return None
        return outcome

    def _empty_message(
        self, params: SearchParams, event_responses: list[ServiceResponse]
    ) -> str:
        errors = [
            f"{provider.get_display_name()}: {response.error}"
            for provider, response in zip(self._event_providers, event_responses)
            if not response.success
        ]
        if errors:
            return f"No performances found. Some services had errors: {'; '.join(errors)}"
        location = f" in {params.country}" if params.country else ""
        return f"No performance records found for {params.artist}{location}."
