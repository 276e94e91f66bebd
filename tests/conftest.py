"""Shared pytest fixtures for the gigtrail test suite."""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from gigtrail.config.settings import Settings
from gigtrail.models.performance import Event
from gigtrail.utils.pagination import PaginationOptions

# ---------------------------------------------------------------------------
# Clocks
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# HTTP doubles
# ---------------------------------------------------------------------------


def make_response(payload: Any = None, status_code: int = 200) -> MagicMock:
    """A stand-in for ``httpx.Response`` with ``status_code`` and ``json()``."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload if payload is not None else {}
    resp.text = ""
    return resp


@pytest.fixture
def response_factory() -> Callable[..., MagicMock]:
    return make_response


@pytest.fixture
def mock_http_client() -> MagicMock:
    """An ``httpx.AsyncClient`` double; tests set ``get.side_effect``."""
    client = MagicMock()
    client.get = AsyncMock(return_value=make_response({}))
    client.post = AsyncMock(return_value=make_response({}))
    client.head = AsyncMock(return_value=make_response({}))
    return client


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fast_pagination() -> PaginationOptions:
    """Pagination knobs with no sleeping between batches or retries."""
    return PaginationOptions(batch_size=3, batch_delay=0.0, retries=2, retry_delay=0.0)


def make_event(**overrides: Any) -> Event:
    defaults: dict[str, Any] = {
        "date": "2023-06-15",
        "venue": "Madison Square Garden",
        "city": "New York",
        "country": "United States",
        "source": "Setlist.fm",
        "source_url": "https://www.setlist.fm/setlist/x.html",
    }
    defaults.update(overrides)
    return Event(**defaults)


@pytest.fixture
def sample_events() -> list[Event]:
    return [
        make_event(date="2023-06-15", venue="Madison Square Garden", city="New York"),
        make_event(date="2022-08-01", venue="O2 Arena", city="London", country="United Kingdom"),
        make_event(date="2024-01-20", venue="Allianz Parque", city="São Paulo", country="Brazil"),
    ]


@pytest.fixture
def test_settings() -> Settings:
    """Settings with every key configured and no .env influence."""
    return Settings(
        _env_file=None,
        setlistfm_api_key="sfm-key",
        songkick_api_key="sk-key",
        ticketmaster_api_key="tm-key",
        news_api_key="news-key",
        lastfm_api_key="lfm-key",
        spotify_client_id="sp-id",
        spotify_client_secret="sp-secret",
    )
