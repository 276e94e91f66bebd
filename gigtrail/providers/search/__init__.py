"""Source-link adapters (Wikipedia, News API)."""

from gigtrail.providers.search.news_api_provider import NewsApiProvider
from gigtrail.providers.search.wikipedia_provider import WikipediaProvider

__all__ = ["NewsApiProvider", "WikipediaProvider"]
