"""Integration tests for the FastAPI endpoints using TestClient."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gigtrail import __version__
from gigtrail.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from gigtrail.api.routes import router as api_router
from gigtrail.config.settings import Settings
from gigtrail.models.performance import PerformanceResult
from gigtrail.providers.cache.memory_cache import MemoryCacheProvider
from gigtrail.utils.errors import ProviderError
from tests.conftest import make_event


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _performance_result() -> PerformanceResult:
    return PerformanceResult(
        artist="Coldplay",
        location="Brazil",
        performed=True,
        events=[make_event(venue="Allianz Parque", city="São Paulo", country="Brazil")],
        total_available=120,
    )


def _create_app(settings: Settings, aggregator: MagicMock | None = None) -> FastAPI:
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router)

    if aggregator is None:
        aggregator = MagicMock()
        aggregator.aggregate = AsyncMock(return_value=_performance_result())
        aggregator.summarize = AsyncMock(
            return_value="Yes, Coldplay has performed in Brazil. Found 1 event(s)."
        )
    cache = MemoryCacheProvider()
    cache.set("coldplay:brazil", "cached")

    app.state.aggregator = aggregator
    app.state.settings = settings
    app.state.cache = cache
    return app


@pytest.fixture
def aggregator() -> MagicMock:
    mock = MagicMock()
    mock.aggregate = AsyncMock(return_value=_performance_result())
    mock.summarize = AsyncMock(return_value="Yes, Coldplay has performed in Brazil.")
    return mock


@pytest.fixture
def client(test_settings: Settings, aggregator: MagicMock) -> TestClient:
    return TestClient(_create_app(test_settings, aggregator))


# ======================================================================
# /api/performances
# ======================================================================


class TestPerformancesEndpoint:
    def test_returns_result_json(self, client: TestClient, aggregator: MagicMock) -> None:
        resp = client.get("/api/performances", params={"artist": "Coldplay", "country": "Brazil"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["artist"] == "Coldplay"
        assert body["performed"] is True
        assert body["total_available"] == 120
        assert body["events"][0]["venue"] == "Allianz Parque"
        assert body["cached"] is False

        params = aggregator.aggregate.await_args.args[0]
        assert params.artist == "Coldplay"
        assert params.country == "Brazil"

    def test_country_is_optional(self, client: TestClient, aggregator: MagicMock) -> None:
        resp = client.get("/api/performances", params={"artist": "Coldplay"})

        assert resp.status_code == 200
        assert aggregator.aggregate.await_args.args[0].country is None

    @pytest.mark.parametrize("query", [{}, {"artist": ""}, {"artist": "   "}])
    def test_missing_artist_is_400(
        self, client: TestClient, aggregator: MagicMock, query: dict
    ) -> None:
        resp = client.get("/api/performances", params=query)

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Missing required parameter: artist"
        assert "artist=" in body["detail"]
        aggregator.aggregate.assert_not_awaited()


# ======================================================================
# /api/summary
# ======================================================================


class TestSummaryEndpoint:
    def test_returns_plain_text(self, client: TestClient, aggregator: MagicMock) -> None:
        resp = client.get("/api/summary", params={"artist": "Coldplay", "country": "Brazil"})

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text == "Yes, Coldplay has performed in Brazil."
        aggregator.summarize.assert_awaited_once_with("Coldplay", "Brazil")

    def test_missing_artist_is_400(self, client: TestClient) -> None:
        resp = client.get("/api/summary")

        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing required parameter: artist"


# ======================================================================
# Autocomplete
# ======================================================================


class TestAutocompleteEndpoints:
    def test_artist_suggestions_case_insensitive(self, client: TestClient) -> None:
        resp = client.get("/api/autocomplete", params={"q": "COLD"})

        assert resp.status_code == 200
        assert resp.json() == ["Coldplay"]

    def test_artist_suggestions_capped(self, client: TestClient) -> None:
        resp = client.get("/api/autocomplete", params={"q": "the"})

        suggestions = resp.json()
        assert len(suggestions) == 10
        assert all("the" in s.lower() for s in suggestions)

    @pytest.mark.parametrize("query", [{}, {"q": ""}, {"q": "  "}])
    def test_empty_query_returns_nothing(self, client: TestClient, query: dict) -> None:
        assert client.get("/api/autocomplete", params=query).json() == []

    def test_country_suggestions(self, client: TestClient) -> None:
        resp = client.get("/api/autocomplete/countries", params={"q": "uni"})

        assert resp.json() == ["United States", "United Kingdom", "United Arab Emirates"]


# ======================================================================
# System endpoints
# ======================================================================


class TestSystemEndpoints:
    def test_health_with_all_keys(self, client: TestClient) -> None:
        resp = client.get("/api/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["version"] == __version__
        assert body["config_valid"] is True
        assert body["missing_keys"] == []
        assert body["services"]["setlistfm"] is True
        assert body["cache"] == {"size": 1, "keys": ["coldplay:brazil"]}

    def test_health_reports_missing_keys(self) -> None:
        settings = Settings(
            _env_file=None,
            setlistfm_api_key="",
            songkick_api_key="",
            ticketmaster_api_key="",
            news_api_key="",
        )
        client = TestClient(_create_app(settings))

        body = client.get("/api/health").json()

        assert body["config_valid"] is False
        assert "SETLISTFM_API_KEY" in body["missing_keys"]
        assert body["services"]["musicbrainz"] is True

    def test_root_describes_api(self, client: TestClient) -> None:
        body = client.get("/").json()

        assert body["name"] == "gigtrail"
        assert "GET /api/performances" in body["endpoints"]
        assert "Setlist.fm" in body["data_sources"]


# ======================================================================
# Middleware
# ======================================================================


class TestErrorHandling:
    def test_application_error_becomes_json_500(self, test_settings: Settings) -> None:
        failing = MagicMock()
        failing.aggregate = AsyncMock(side_effect=ProviderError("HTTP 503", provider_name="setlistfm"))
        client = TestClient(_create_app(test_settings, failing))

        resp = client.get("/api/performances", params={"artist": "Coldplay"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "ProviderError", "detail": "HTTP 503"}

    def test_missing_aggregator_becomes_json_500(self, test_settings: Settings) -> None:
        app = FastAPI()
        app.add_middleware(ErrorHandlingMiddleware)
        app.include_router(api_router)
        app.state.settings = test_settings
        client = TestClient(app)

        resp = client.get("/api/summary", params={"artist": "Coldplay"})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "ConfigurationError",
            "detail": "Performance aggregator is not initialised",
        }
