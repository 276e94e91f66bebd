"""Unit tests for the event-database provider adapters."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from gigtrail.models.performance import SearchParams
from gigtrail.utils.concurrency import RequestThrottle
from gigtrail.utils.pagination import PageBudget, PaginationOptions
from tests.conftest import make_response


def _router(routes: dict[str, Any]) -> AsyncMock:
    """``client.get`` double dispatching on the URL suffix.

    Route values are either a response or a callable ``(params) -> response``.
    """

    async def _get(url: str, params: dict | None = None, headers: dict | None = None,
                   timeout: float | None = None) -> MagicMock:
        for suffix, answer in routes.items():
            if url.endswith(suffix):
                if isinstance(answer, MagicMock):
                    return answer
                return answer(params or {})
        return make_response({}, status_code=404)

    return AsyncMock(side_effect=_get)


def _calls_to(client: MagicMock, suffix: str) -> list:
    return [c for c in client.get.await_args_list if c.args[0].endswith(suffix)]


# ======================================================================
# Setlist.fm
# ======================================================================


def _setlist(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": "63de4613",
        "eventDate": "15-06-2023",
        "url": "https://www.setlist.fm/setlist/coldplay/2023/msg-63de4613.html",
        "venue": {
            "name": "Madison Square Garden",
            "city": {
                "name": "New York",
                "country": {"code": "US", "name": "United States"},
            },
        },
        "sets": {
            "set": [
                {
                    "song": [
                        {"name": "Yellow"},
                        {"name": "Heroes", "cover": {"name": "David Bowie"}},
                        {"name": ""},
                    ]
                }
            ]
        },
    }
    data.update(overrides)
    return data


class TestSetlistFmProvider:
    @pytest.fixture()
    def client(self) -> MagicMock:
        client = MagicMock()
        client.get = _router({
            "/search/artists": make_response(
                {"artist": [{"mbid": "mb-tribute", "name": "Coldplay Tribute"},
                            {"mbid": "mb-1", "name": "Coldplay"}]}
            ),
            "/search/setlists": make_response({
                "total": 2,
                "itemsPerPage": 20,
                "setlist": [
                    _setlist(),
                    _setlist(id="abc123", url=None, eventDate="01-08-2022",
                             venue={"name": "Venue unknown", "city": {}}, sets={}),
                ],
            }),
        })
        return client

    def _provider(self, client: MagicMock, pagination: PaginationOptions, api_key: str = "key"):
        from gigtrail.providers.event.setlistfm_provider import SetlistFmProvider
        return SetlistFmProvider(client, api_key=api_key, pagination=pagination)

    def test_names(self, client: MagicMock, fast_pagination: PaginationOptions) -> None:
        provider = self._provider(client, fast_pagination)
        assert provider.get_provider_name() == "setlistfm"
        assert provider.get_display_name() == "Setlist.fm"

    @pytest.mark.asyncio
    async def test_missing_key_returns_failure(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        provider = self._provider(client, fast_pagination, api_key="")
        response = await provider.search(SearchParams(artist="Coldplay"))
        assert response.success is False
        assert response.error == "Setlist.fm API key not configured"
        client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_normalizes_setlists(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        provider = self._provider(client, fast_pagination)
        response = await provider.search(SearchParams(artist="Coldplay", country="US"))

        assert response.success is True
        assert response.total_available == 2
        events = response.data
        assert len(events) == 2

        first = events[0]
        assert first.date == "2023-06-15"
        assert first.venue == "Madison Square Garden"
        assert first.city == "New York"
        assert first.country == "United States"
        assert first.source == "Setlist.fm"
        assert first.capacity == 20789
        assert first.setlist == ["Yellow", "Heroes (David Bowie cover)"]

        second = events[1]
        assert second.city == "City unknown"
        assert second.setlist is None
        assert second.source_url == "https://www.setlist.fm/setlist/Coldplay/abc123.html"

    @pytest.mark.asyncio
    async def test_uses_best_matching_artist_and_country_code(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        provider = self._provider(client, fast_pagination)
        await provider.search(SearchParams(artist="Coldplay", country="gb"))

        setlist_call = _calls_to(client, "/search/setlists")[0]
        assert setlist_call.kwargs["params"]["artistMbid"] == "mb-1"
        assert setlist_call.kwargs["params"]["countryCode"] == "GB"
        assert setlist_call.kwargs["headers"]["x-api-key"] == "key"

    @pytest.mark.asyncio
    async def test_artist_not_found_is_empty_success(
        self, fast_pagination: PaginationOptions
    ) -> None:
        client = MagicMock()
        client.get = _router({"/search/artists": make_response({}, status_code=404)})
        provider = self._provider(client, fast_pagination)

        response = await provider.search(SearchParams(artist="Nobody"))

        assert response.success is True
        assert response.data == []

    @pytest.mark.asyncio
    async def test_server_error_after_retries_is_failure(
        self, fast_pagination: PaginationOptions
    ) -> None:
        client = MagicMock()
        client.get = _router({
            "/search/artists": make_response({"artist": [{"mbid": "mb-1", "name": "Coldplay"}]}),
            "/search/setlists": make_response({}, status_code=500),
        })
        provider = self._provider(client, fast_pagination)

        response = await provider.search(SearchParams(artist="Coldplay"))

        assert response.success is False
        assert "HTTP 500" in response.error
        assert len(_calls_to(client, "/search/setlists")) == 3

    @pytest.mark.asyncio
    async def test_page_budget_limits_requests(self) -> None:
        from gigtrail.providers.event.setlistfm_provider import SetlistFmProvider

        def _setlists(params: dict) -> MagicMock:
            return make_response({
                "total": 500,
                "itemsPerPage": 20,
                "setlist": [_setlist(id=f"p{params['p']}")],
            })

        client = MagicMock()
        client.get = _router({
            "/search/artists": make_response({"artist": [{"mbid": "mb-1", "name": "Coldplay"}]}),
            "/search/setlists": _setlists,
        })
        provider = SetlistFmProvider(
            client,
            api_key="key",
            page_budget=PageBudget(country=2, worldwide=4),
            pagination=PaginationOptions(batch_size=3, batch_delay=0, retries=0, retry_delay=0),
        )

        response = await provider.search(SearchParams(artist="Coldplay"))

        assert len(response.data) == 4
        pages = sorted(c.kwargs["params"]["p"] for c in _calls_to(client, "/search/setlists"))
        assert pages == [1, 2, 3, 4]


# ======================================================================
# Songkick
# ======================================================================


def _songkick_event(city: str, country: str, venue: str, date: str) -> dict[str, Any]:
    return {
        "start": {"date": date},
        "uri": f"https://www.songkick.com/concerts/{venue.replace(' ', '-').lower()}",
        "venue": {
            "displayName": venue,
            "metroArea": {"displayName": city, "country": {"displayName": country}},
        },
        "location": {"city": f"{city}, {country}"},
    }


class TestSongkickProvider:
    @pytest.fixture()
    def client(self) -> MagicMock:
        client = MagicMock()
        client.get = _router({
            "/search/artists.json": make_response(
                {"resultsPage": {"results": {"artist": [{"id": 197928, "displayName": "Coldplay"}]}}}
            ),
            "/gigography.json": make_response({
                "resultsPage": {
                    "totalEntries": 2,
                    "perPage": 50,
                    "results": {"event": [
                        _songkick_event("London", "UK", "Wembley Stadium", "2016-06-03"),
                        _songkick_event("Paris", "France", "Stade de France", "2016-07-15"),
                    ]},
                }
            }),
            "/calendar.json": make_response({
                "resultsPage": {"results": {"event": [
                    _songkick_event("London", "UK", "Wembley Stadium", "2025-08-20"),
                ]}}
            }),
        })
        return client

    def _provider(self, client: MagicMock, pagination: PaginationOptions, api_key: str = "key"):
        from gigtrail.providers.event.songkick_provider import SongkickProvider
        return SongkickProvider(client, api_key=api_key, pagination=pagination)

    @pytest.mark.asyncio
    async def test_missing_key_returns_failure(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        response = await self._provider(client, fast_pagination, api_key="").search(
            SearchParams(artist="Coldplay")
        )
        assert response.success is False
        assert response.error == "Songkick API key not configured"

    @pytest.mark.asyncio
    async def test_merges_calendar_and_gigography(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Coldplay")
        )

        assert response.success is True
        assert response.total_available == 2
        assert [e.date for e in response.data] == ["2025-08-20", "2016-06-03", "2016-07-15"]
        wembley = response.data[1]
        assert wembley.city == "London"
        assert wembley.country == "United Kingdom"
        assert wembley.capacity == 90000
        assert wembley.source == "Songkick"

    @pytest.mark.asyncio
    async def test_filters_by_country_client_side(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Coldplay", country="GB")
        )

        assert {e.country for e in response.data} == {"United Kingdom"}
        assert len(response.data) == 2

    @pytest.mark.asyncio
    async def test_iso_code_is_not_matched_as_substring(
        self, fast_pagination: PaginationOptions
    ) -> None:
        client = MagicMock()
        client.get = _router({
            "/search/artists.json": make_response(
                {"resultsPage": {"results": {"artist": [{"id": 1, "displayName": "Coldplay"}]}}}
            ),
            "/gigography.json": make_response({"resultsPage": {
                "totalEntries": 4,
                "results": {"event": [
                    _songkick_event("Sydney", "Australia", "Accor Stadium", "2023-11-07"),
                    _songkick_event("Moscow", "Russia", "Luzhniki Stadium", "2012-09-01"),
                    _songkick_event("Nicosia", "Cyprus", "GSP Stadium", "2011-06-01"),
                    _songkick_event("New York", "US", "Madison Square Garden", "2022-06-15"),
                ]},
            }}),
            "/calendar.json": make_response({"resultsPage": {"results": {}}}),
        })
        provider = self._provider(client, fast_pagination)

        us = await provider.search(SearchParams(artist="Coldplay", country="US"))
        at = await provider.search(SearchParams(artist="Coldplay", country="AT"))

        assert [e.country for e in us.data] == ["United States"]
        assert at.data == []

    @pytest.mark.asyncio
    async def test_free_text_country_falls_back_to_name_substring(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Coldplay", country="Fran")
        )

        assert [e.city for e in response.data] == ["Paris"]

    @pytest.mark.asyncio
    async def test_calendar_failure_keeps_past_events(
        self, fast_pagination: PaginationOptions
    ) -> None:
        client = MagicMock()
        client.get = _router({
            "/search/artists.json": make_response(
                {"resultsPage": {"results": {"artist": [{"id": 1, "displayName": "Coldplay"}]}}}
            ),
            "/gigography.json": make_response({"resultsPage": {
                "totalEntries": 1,
                "results": {"event": [
                    _songkick_event("Paris", "France", "Stade de France", "2016-07-15"),
                ]},
            }}),
            "/calendar.json": make_response({}, status_code=503),
        })

        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Coldplay")
        )

        assert response.success is True
        assert len(response.data) == 1
        assert response.data[0].capacity == 80000


# ======================================================================
# Ticketmaster
# ======================================================================


def _tm_event() -> dict[str, Any]:
    return {
        "url": "https://www.ticketmaster.com/event/1",
        "dates": {"start": {"localDate": "2024-05-10"}},
        "_embedded": {"venues": [{
            "name": "O2 Arena",
            "city": {"name": "London"},
            "country": {"name": "Great Britain", "countryCode": "GB"},
        }]},
    }


class TestTicketmasterProvider:
    @pytest.fixture()
    def client(self) -> MagicMock:
        client = MagicMock()
        client.get = _router({
            "/events.json": make_response({
                "page": {"totalElements": 1, "totalPages": 1},
                "_embedded": {"events": [_tm_event()]},
            }),
        })
        return client

    def _provider(self, client: MagicMock, pagination: PaginationOptions, api_key: str = "key"):
        from gigtrail.providers.event.ticketmaster_provider import TicketmasterProvider
        return TicketmasterProvider(client, api_key=api_key, pagination=pagination)

    @pytest.mark.asyncio
    async def test_missing_key_returns_failure(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        response = await self._provider(client, fast_pagination, api_key="").search(
            SearchParams(artist="Coldplay")
        )
        assert response.success is False
        assert response.error == "Ticketmaster API key not configured"

    @pytest.mark.asyncio
    async def test_search_builds_query_and_normalizes(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Coldplay", country="gb", date_from="2024-01-01")
        )

        assert response.success is True
        assert response.total_available == 1
        event = response.data[0]
        assert event.date == "2024-05-10"
        assert event.venue == "O2 Arena"
        assert event.country == "United Kingdom"
        assert event.capacity == 20000
        assert event.source_url == "https://www.ticketmaster.com/event/1"

        query = client.get.await_args_list[0].kwargs["params"]
        assert query["keyword"] == "Coldplay"
        assert query["classificationName"] == "music"
        assert query["page"] == 0
        assert query["countryCode"] == "GB"
        assert query["startDateTime"] == "2024-01-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_rate_limit_is_failure(self, fast_pagination: PaginationOptions) -> None:
        client = MagicMock()
        client.get = _router({"/events.json": make_response({}, status_code=429)})

        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Coldplay")
        )

        assert response.success is False
        assert "Rate limit" in response.error

    @pytest.mark.asyncio
    async def test_no_events_is_empty_success(self, fast_pagination: PaginationOptions) -> None:
        client = MagicMock()
        client.get = _router({"/events.json": make_response({"page": {"totalElements": 0}})})

        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Nobody")
        )

        assert response.success is True
        assert response.data == []


# ======================================================================
# MusicBrainz
# ======================================================================


def _mb_events() -> dict[str, Any]:
    return {
        "event-count": 2,
        "events": [
            {
                "id": "ev-br",
                "life-span": {"begin": "2023-03-10"},
                "relations": [
                    {"type": "held at", "target-type": "place",
                     "place": {"name": "Allianz Parque", "area": {"name": "São Paulo"}}},
                    {"type": "held in", "target-type": "area",
                     "area": {"name": "Brazil", "iso-3166-1-codes": ["BR"]}},
                ],
            },
            {
                "id": "ev-gb",
                "life-span": {"begin": "2016-06-03"},
                "relations": [
                    {"type": "held at", "target-type": "place",
                     "place": {"name": "Wembley Stadium",
                               "area": {"name": "United Kingdom",
                                        "iso-3166-1-codes": ["GB"]}}},
                ],
            },
        ],
    }


class TestMusicBrainzProvider:
    @pytest.fixture()
    def client(self) -> MagicMock:
        client = MagicMock()
        client.get = _router({
            "/artist": make_response({"artists": [{"id": "mb-1", "name": "Coldplay"}]}),
            "/event": make_response(_mb_events()),
        })
        return client

    def _provider(self, client: MagicMock, pagination: PaginationOptions):
        from gigtrail.providers.event.musicbrainz_provider import MusicBrainzProvider
        return MusicBrainzProvider(
            client,
            user_agent="gigtrail-test/0.1.0",
            pagination=pagination,
            throttle=RequestThrottle(0.0),
        )

    def test_always_available(self, client: MagicMock, fast_pagination: PaginationOptions) -> None:
        assert self._provider(client, fast_pagination).is_available() is True

    @pytest.mark.asyncio
    async def test_worldwide_returns_all_events(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Coldplay")
        )

        assert response.success is True
        assert response.total_available == 2
        assert [e.source_url for e in response.data] == [
            "https://musicbrainz.org/event/ev-br",
            "https://musicbrainz.org/event/ev-gb",
        ]
        headers = client.get.await_args_list[0].kwargs["headers"]
        assert headers["User-Agent"] == "gigtrail-test/0.1.0"

    @pytest.mark.asyncio
    async def test_country_filter_uses_area_relations(
        self, client: MagicMock, fast_pagination: PaginationOptions
    ) -> None:
        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Coldplay", country="BR")
        )

        assert len(response.data) == 1
        event = response.data[0]
        assert event.venue == "Allianz Parque"
        assert event.city == "São Paulo"
        assert event.country == "Brazil"
        assert event.date == "2023-03-10"
        assert event.capacity == 43600

    @pytest.mark.asyncio
    async def test_unknown_artist_is_empty_success(
        self, fast_pagination: PaginationOptions
    ) -> None:
        client = MagicMock()
        client.get = _router({"/artist": make_response({"artists": []})})

        response = await self._provider(client, fast_pagination).search(
            SearchParams(artist="Nobody")
        )

        assert response.success is True
        assert response.data == []
