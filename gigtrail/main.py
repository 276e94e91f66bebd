"""gigtrail FastAPI application entry point.

Wires every provider, the result cache and the aggregator together via
dependency injection.  Loads configuration from ``.env`` and
``config/config.yaml`` and configures structured logging.

Also exposes ``build_components`` for the CLI, which needs the same wiring
without the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from gigtrail import __version__
from gigtrail.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from gigtrail.api.routes import router as api_router
from gigtrail.config.loader import load_config, page_budget, pagination_options
from gigtrail.config.settings import Settings
from gigtrail.interfaces.event_provider import IEventProvider
from gigtrail.interfaces.source_provider import ISourceProvider
from gigtrail.providers.cache.memory_cache import MemoryCacheProvider
from gigtrail.providers.event import (
    MusicBrainzProvider,
    SetlistFmProvider,
    SongkickProvider,
    TicketmasterProvider,
)
from gigtrail.providers.image import DEFAULT_FALLBACK_ORDER, build_image_provider
from gigtrail.providers.search import NewsApiProvider, WikipediaProvider
from gigtrail.services.aggregator import PerformanceAggregator
from gigtrail.utils.concurrency import RequestThrottle
from gigtrail.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def _build_event_providers(
    app_settings: Settings,
    app_config: dict,
    http_client: httpx.AsyncClient,
    musicbrainz_throttle: RequestThrottle,
) -> list[IEventProvider]:
    """Event adapters in merge-priority order (Setlist.fm records win duplicates)."""
    pagination = pagination_options(app_config)
    ticketmaster_cfg = (app_config.get("providers", {}) or {}).get("ticketmaster", {}) or {}

    return [
        SetlistFmProvider(
            http_client,
            api_key=app_settings.setlistfm_api_key,
            base_url=app_settings.setlistfm_base_url,
            page_budget=page_budget(app_config, "setlistfm"),
            pagination=pagination,
        ),
        SongkickProvider(
            http_client,
            api_key=app_settings.songkick_api_key,
            base_url=app_settings.songkick_base_url,
            page_budget=page_budget(app_config, "songkick"),
            pagination=pagination,
        ),
        TicketmasterProvider(
            http_client,
            api_key=app_settings.ticketmaster_api_key,
            base_url=app_settings.ticketmaster_base_url,
            page_budget=page_budget(app_config, "ticketmaster"),
            pagination=pagination,
            page_size=int(ticketmaster_cfg.get("page_size", 50)),
        ),
        MusicBrainzProvider(
            http_client,
            user_agent=app_settings.musicbrainz_user_agent,
            base_url=app_settings.musicbrainz_base_url,
            page_budget=page_budget(app_config, "musicbrainz"),
            pagination=pagination,
            throttle=musicbrainz_throttle,
        ),
    ]


def _build_source_providers(
    app_settings: Settings, http_client: httpx.AsyncClient
) -> list[ISourceProvider]:
    return [
        WikipediaProvider(http_client, api_url=app_settings.wikipedia_api_url),
        NewsApiProvider(
            http_client,
            api_key=app_settings.news_api_key,
            base_url=app_settings.news_api_base_url,
        ),
    ]


def build_components(
    custom_settings: Settings | None = None,
    custom_config: dict | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance.

    Parameters
    ----------
    custom_settings:
        Application settings.  Uses module-level ``settings`` if not provided.
    custom_config:
        Resolved YAML config.  Uses module-level ``config`` if not provided.

    Returns
    -------
    dict
        Named components to be stored on ``app.state`` (or used directly by
        the CLI).  The caller owns ``http_client`` and must close it.
    """
    app_settings = custom_settings or settings
    app_config = custom_config if custom_config is not None else config

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=app_settings.http_timeout_seconds)
    mb_cfg = (app_config.get("providers", {}) or {}).get("musicbrainz", {}) or {}
    # One throttle for every MusicBrainz caller: events and cover art share the limit.
    musicbrainz_throttle = RequestThrottle(
        float(mb_cfg.get("min_request_interval_seconds", 1.0))
    )

    # -- Providers --
    event_providers = _build_event_providers(
        app_settings, app_config, http_client, musicbrainz_throttle
    )
    source_providers = _build_source_providers(app_settings, http_client)
    images_cfg = app_config.get("images", {}) or {}
    image_provider = build_image_provider(
        app_settings,
        http_client,
        musicbrainz_throttle=musicbrainz_throttle,
        fallback_order=tuple(images_cfg.get("fallback_order") or DEFAULT_FALLBACK_ORDER),
    )

    # -- Cache & aggregator --
    cache_cfg = app_config.get("cache", {}) or {}
    cache_ttl = float(cache_cfg.get("ttl_seconds", app_settings.cache_ttl_seconds))
    cache = MemoryCacheProvider(default_ttl=cache_ttl)

    aggregation_cfg = app_config.get("aggregation", {}) or {}
    aggregator = PerformanceAggregator(
        event_providers=event_providers,
        source_providers=source_providers,
        cache=cache,
        image_provider=image_provider,
        cache_ttl=cache_ttl,
        max_sources=int(
            aggregation_cfg.get("max_source_links", app_settings.max_source_links)
        ),
    )

    return {
        "http_client": http_client,
        "settings": app_settings,
        "config": app_config,
        "cache": cache,
        "cache_cleanup_interval": float(
            cache_cfg.get(
                "cleanup_interval_seconds", app_settings.cache_cleanup_interval_seconds
            )
        ),
        "image_provider": image_provider,
        "aggregator": aggregator,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build components and start the cache sweep on startup; clean up on shutdown."""
    components = build_components(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    cache: MemoryCacheProvider = components["cache"]
    cache.start_auto_cleanup(components["cache_cleanup_interval"])

    valid, missing = settings.validate_config()
    if not valid:
        _logger.warning("missing_api_keys", missing=missing)
    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        event_providers=len(components["aggregator"].event_providers),
        config_valid=valid,
    )

    yield

    # -- Shutdown: stop the sweep, close shared httpx client --
    await cache.stop_auto_cleanup()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="gigtrail API",
        version=__version__,
        description=(
            "Has an artist performed in a given country? Aggregates concert "
            "history from Setlist.fm, Songkick, Ticketmaster and MusicBrainz, "
            "with source links from Wikipedia and News API."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "gigtrail.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
