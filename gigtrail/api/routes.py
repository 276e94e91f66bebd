"""FastAPI routes for the gigtrail lookup service.

Service dependencies are resolved from ``app.state`` (populated by the
lifespan in ``gigtrail/main.py``) through ``Depends`` using the
``Annotated`` pattern, so tests can mount the router on a bare app and set
mocks on its state.

    Endpoint                        Method  Description
    ----------------------------------------------------------------------
    /                               GET     API self-description
    /api/health                     GET     Key presence, config check, cache stats
    /api/performances               GET     Aggregated PerformanceResult JSON
    /api/summary                    GET     One-line plain-text digest
    /api/autocomplete               GET     Popular-artist suggestions
    /api/autocomplete/countries     GET     Country suggestions
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from gigtrail import __version__
from gigtrail.api.schemas import (
    CacheStatsResponse,
    ErrorResponse,
    HealthResponse,
    RootResponse,
)
from gigtrail.config.settings import Settings
from gigtrail.interfaces.cache_provider import ICacheProvider
from gigtrail.models.performance import PerformanceResult, SearchParams
from gigtrail.services.aggregator import PerformanceAggregator
from gigtrail.utils.errors import ConfigurationError
from gigtrail.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter()

_MAX_SUGGESTIONS = 10

POPULAR_ARTISTS: tuple[str, ...] = (
    "Coldplay", "Taylor Swift", "The Beatles", "BTS", "Ed Sheeran",
    "Beyoncé", "Drake", "Ariana Grande", "The Rolling Stones", "Queen",
    "Adele", "Billie Eilish", "The Weeknd", "Radiohead", "Metallica",
    "Pink Floyd", "Led Zeppelin", "Nirvana", "AC/DC", "U2",
    "Rihanna", "Justin Bieber", "Lady Gaga", "Kanye West", "Eminem",
    "Post Malone", "Harry Styles", "Dua Lipa", "Shakira", "Elton John",
    "David Bowie", "Madonna", "Michael Jackson", "Prince", "Bob Marley",
    "Arctic Monkeys", "Foo Fighters", "Green Day", "Linkin Park", "Muse",
    "Red Hot Chili Peppers", "Imagine Dragons", "Twenty One Pilots", "The Killers", "Maroon 5",
    "Bruno Mars", "Katy Perry", "Miley Cyrus", "Selena Gomez", "Shawn Mendes",
    "Travis Scott", "Cardi B", "Nicki Minaj", "Kendrick Lamar", "Jay-Z",
    "Fleetwood Mac", "The Who", "Black Sabbath", "Iron Maiden", "Guns N' Roses",
    "Pearl Jam", "Soundgarden", "R.E.M.", "The Smiths", "Joy Division",
    "Depeche Mode", "The Cure", "Oasis", "Blur", "Gorillaz",
    "Daft Punk", "Calvin Harris", "David Guetta", "Avicii", "Swedish House Mafia",
    "One Direction", "5 Seconds of Summer", "Jonas Brothers", "NSYNC", "Backstreet Boys",
    "Spice Girls", "Destiny's Child", "TLC", "No Doubt", "Paramore",
    "Evanescence", "Bring Me The Horizon", "My Chemical Romance", "Fall Out Boy",
    "Panic! At The Disco", "John Mayer", "Jack Johnson", "Jason Mraz", "Train", "OneRepublic",
    "Bastille", "Mumford & Sons", "The Lumineers", "Of Monsters and Men",
    "Florence + The Machine", "Lana Del Rey", "Lorde", "Halsey", "Sia",
    "Sam Smith", "John Legend", "Alicia Keys", "Usher", "Chris Brown",
    "The Chainsmokers", "Marshmello", "Zedd", "Tiësto", "Martin Garrix",
    "Bob Dylan", "Neil Young", "Bruce Springsteen", "Tom Petty", "Eagles",
    "Stevie Wonder", "Marvin Gaye", "Aretha Franklin", "Ray Charles", "James Brown",
    "Frank Sinatra", "Elvis Presley", "Chuck Berry", "Little Richard", "Buddy Holly",
)

COUNTRIES: tuple[str, ...] = (
    "United States", "United Kingdom", "Canada", "Australia", "Germany",
    "France", "Spain", "Italy", "Netherlands", "Belgium",
    "Switzerland", "Austria", "Sweden", "Norway", "Denmark",
    "Finland", "Poland", "Czech Republic", "Hungary", "Greece",
    "Portugal", "Ireland", "Japan", "South Korea", "China",
    "Singapore", "Thailand", "Malaysia", "Indonesia", "Philippines",
    "Taiwan", "Hong Kong", "India", "Brazil", "Argentina",
    "Chile", "Mexico", "Colombia", "Peru", "New Zealand",
    "South Africa", "Russia", "Turkey", "Israel", "United Arab Emirates",
    "Saudi Arabia", "Egypt",
)

DATA_SOURCES = ["Setlist.fm", "MusicBrainz", "Songkick", "Ticketmaster", "Wikipedia", "News API"]


# ---------------------------------------------------------------------------
# Dependency injection helpers
# ---------------------------------------------------------------------------


def _get_aggregator(request: Request) -> PerformanceAggregator:
    """Return the performance aggregator from application state.

    Raises ``ConfigurationError`` when the lifespan never built one, which
    the error middleware turns into a JSON 500.
    """
    aggregator = getattr(request.app.state, "aggregator", None)
    if aggregator is None:
        raise ConfigurationError("Performance aggregator is not initialised")
    return aggregator


def _get_settings(request: Request) -> Settings:
    """Return the application settings from application state."""
    return request.app.state.settings


def _get_cache(request: Request) -> ICacheProvider | None:
    """Return the result cache from application state, or ``None``."""
    return getattr(request.app.state, "cache", None)


AggregatorDep = Annotated[PerformanceAggregator, Depends(_get_aggregator)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]
CacheDep = Annotated[Any, Depends(_get_cache)]


def _missing_artist(usage: str | None = None) -> JSONResponse:
    body = ErrorResponse(error="Missing required parameter: artist", detail=usage)
    return JSONResponse(status_code=400, content=body.model_dump())


def _suggest(candidates: tuple[str, ...], query: str | None) -> list[str]:
    """Case-insensitive substring match, capped at ``_MAX_SUGGESTIONS``."""
    needle = (query or "").strip().lower()
    if not needle:
        return []
    return [c for c in candidates if needle in c.lower()][:_MAX_SUGGESTIONS]


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get("/", response_model=RootResponse, summary="API description")
async def root() -> RootResponse:
    """Describe the API, its endpoints and its data sources."""
    return RootResponse(
        name="gigtrail",
        version=__version__,
        description="Search for musician performances across multiple data sources",
        endpoints={
            "GET /api/health": "Check API health and configuration",
            "GET /api/performances": "Search for performances (params: artist, country)",
            "GET /api/summary": "Get quick text summary (params: artist, country)",
            "GET /api/autocomplete": "Get artist suggestions (params: q)",
            "GET /api/autocomplete/countries": "Get country suggestions (params: q)",
        },
        data_sources=DATA_SOURCES,
        examples=[
            "/api/performances?artist=Coldplay&country=Brazil",
            "/api/performances?artist=Taylor%20Swift&country=France",
            "/api/summary?artist=The%20Beatles&country=USA",
            "/api/autocomplete?q=cold",
            "/api/autocomplete/countries?q=uni",
        ],
    )


@router.get("/api/health", response_model=HealthResponse, summary="Application health check")
async def health_check(settings: SettingsDep, cache: CacheDep) -> HealthResponse:
    """Report which services have credentials and the cache's live contents."""
    valid, missing = settings.validate_config()
    cache_stats = None
    if cache is not None:
        stats = cache.get_stats()
        cache_stats = CacheStatsResponse(size=stats.size, keys=list(stats.keys))

    return HealthResponse(
        status="ok",
        version=__version__,
        services=settings.get_service_status(),
        config_valid=valid,
        missing_keys=missing,
        cache=cache_stats,
    )


# ---------------------------------------------------------------------------
# Lookup endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/api/performances",
    response_model=PerformanceResult,
    responses={400: {"model": ErrorResponse}},
    summary="Aggregate performances for an artist",
)
async def get_performances(
    aggregator: AggregatorDep,
    artist: Annotated[str | None, Query(description="Artist or band name")] = None,
    country: Annotated[str | None, Query(description="Country name or ISO code")] = None,
) -> Any:
    """Return the merged, deduplicated, date-sorted performance history."""
    if not artist or not artist.strip():
        return _missing_artist("/api/performances?artist=<name>&country=<country>")

    _logger.info("performances_query", artist=artist, country=country or "all")
    return await aggregator.aggregate(SearchParams(artist=artist, country=country))


@router.get(
    "/api/summary",
    response_class=PlainTextResponse,
    responses={400: {"model": ErrorResponse}},
    summary="One-line performance summary",
)
async def get_summary(
    aggregator: AggregatorDep,
    artist: Annotated[str | None, Query(description="Artist or band name")] = None,
    country: Annotated[str | None, Query(description="Country name or ISO code")] = None,
) -> Any:
    """Return the plain-text digest produced by ``summarize``."""
    if not artist or not artist.strip():
        return _missing_artist()

    summary = await aggregator.summarize(artist, country)
    return PlainTextResponse(summary)


@router.get("/api/autocomplete", response_model=list[str], summary="Artist suggestions")
async def autocomplete_artists(q: Annotated[str | None, Query()] = None) -> list[str]:
    """Popular artists whose name contains *q*."""
    return _suggest(POPULAR_ARTISTS, q)


@router.get(
    "/api/autocomplete/countries", response_model=list[str], summary="Country suggestions"
)
async def autocomplete_countries(q: Annotated[str | None, Query()] = None) -> list[str]:
    """Countries whose name contains *q*."""
    return _suggest(COUNTRIES, q)
