"""News API source provider implementing ISourceProvider.

Searches ``/everything`` for concert coverage, sorted by relevancy and
limited to English articles.  ``date_from`` maps to the ``from`` filter.
"""

from __future__ import annotations

import httpx
import structlog

from gigtrail.interfaces.source_provider import ISourceProvider
from gigtrail.models.performance import SearchParams, ServiceResponse, SourceKind, SourceLink
from gigtrail.utils.errors import GigTrailError
from gigtrail.utils.http import get_json

logger = structlog.get_logger(logger_name=__name__)

_BASE_URL = "https://newsapi.org/v2"
_PAGE_SIZE = 10


class NewsApiProvider(ISourceProvider):
    """newsapi.org adapter.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    api_key:
        News API key; empty means not configured.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = _BASE_URL,
        page_size: int = _PAGE_SIZE,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size

    def get_provider_name(self) -> str:
        return "news_api"

    def get_display_name(self) -> str:
        return "News API"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, params: SearchParams) -> ServiceResponse[list[SourceLink]]:
        if not self.is_available():
            return ServiceResponse.fail(
                "News API key not configured", source=self.get_provider_name()
            )

        query = " ".join(
            part for part in (params.artist, params.country, "concert performance") if part
        )
        request_params: dict[str, str | int] = {
            "q": query,
            "sortBy": "relevancy",
            "pageSize": self._page_size,
            "language": "en",
            "apiKey": self._api_key,
        }
        if params.date_from:
            request_params["from"] = params.date_from

        try:
            data = await get_json(
                self._http,
                f"{self._base_url}/everything",
                provider=self.get_provider_name(),
                params=request_params,
            )
        except GigTrailError as exc:
            logger.warning("news_api_search_failed", query=query, error=str(exc))
            return ServiceResponse.fail(exc.message, source=self.get_provider_name())

        links: list[SourceLink] = []
        for article in (data or {}).get("articles") or []:
            if not article.get("title") or not article.get("url"):
                continue
            published = article.get("publishedAt") or ""
            links.append(
                SourceLink(
                    title=article["title"],
                    url=article["url"],
                    type=SourceKind.NEWS,
                    published_date=published.split("T")[0] or None,
                    snippet=article.get("description"),
                )
            )

        logger.debug("news_api_search_complete", query=query, results=len(links))
        return ServiceResponse.ok(links, source=self.get_provider_name())
