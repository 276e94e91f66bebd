"""Wikipedia source provider implementing ISourceProvider.

Uses the MediaWiki ``list=search`` API; no key required.  Search snippets
come back with ``<span class="searchmatch">`` markup and HTML entities,
which are stripped before they reach a SourceLink.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx
import structlog

from gigtrail.interfaces.source_provider import ISourceProvider
from gigtrail.models.performance import SearchParams, ServiceResponse, SourceKind, SourceLink
from gigtrail.utils.errors import GigTrailError
from gigtrail.utils.http import get_json
from gigtrail.utils.text_normalizer import strip_html

logger = structlog.get_logger(logger_name=__name__)

_API_URL = "https://en.wikipedia.org/w/api.php"
_ARTICLE_URL = "https://en.wikipedia.org/wiki/"
_RESULT_LIMIT = 5


class WikipediaProvider(ISourceProvider):
    """Wikipedia full-text search adapter."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_url: str = _API_URL,
        limit: int = _RESULT_LIMIT,
    ) -> None:
        self._http = http_client
        self._api_url = api_url
        self._limit = limit

    def get_provider_name(self) -> str:
        return "wikipedia"

    def get_display_name(self) -> str:
        return "Wikipedia"

    def is_available(self) -> bool:
        return True

    async def search(self, params: SearchParams) -> ServiceResponse[list[SourceLink]]:
        query = " ".join(part for part in (params.artist, params.country, "tour concert") if part)
        try:
            data = await get_json(
                self._http,
                self._api_url,
                provider=self.get_provider_name(),
                params={
                    "action": "query",
                    "list": "search",
                    "srsearch": query,
                    "srlimit": self._limit,
                    "format": "json",
                },
            )
        except GigTrailError as exc:
            logger.warning("wikipedia_search_failed", query=query, error=str(exc))
            return ServiceResponse.fail(exc.message, source=self.get_provider_name())

        hits = ((data or {}).get("query") or {}).get("search") or []
        links = [
            SourceLink(
                title=hit["title"],
                url=_ARTICLE_URL + quote(hit["title"].replace(" ", "_")),
                type=SourceKind.OTHER,
                snippet=strip_html(hit.get("snippet") or "") or None,
            )
            for hit in hits
            if hit.get("title")
        ]
        logger.debug("wikipedia_search_complete", query=query, results=len(links))
        return ServiceResponse.ok(links, source=self.get_provider_name())
