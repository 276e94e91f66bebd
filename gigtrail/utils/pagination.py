"""Batched, parallel page fetching with per-page retry.

Providers with more history than one response page hand a single-page
fetch function to :func:`fetch_pages_in_parallel`.  Pages are requested in
consecutive batches (all pages of a batch concurrently), with a short
delay between batches to stay under provider quotas.

Stopping rules:

* a page that raises on every attempt, or whose fetcher returns ``None``,
  ends the run; everything accumulated up to that page is returned,
* a batch in which every page came back empty is treated as end-of-data.

The function never raises for page failures; a flaky provider degrades
to fewer results.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import structlog

from gigtrail.utils.concurrency import RetryPolicy, retry_async
from gigtrail.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY = 0.15  # seconds
DEFAULT_RETRIES = 2
DEFAULT_RETRY_DELAY = 0.2  # seconds

PageFetcher = Callable[[int], Awaitable["list[_T] | None"]]


@dataclass(frozen=True)
class PageBudget:
    """How many pages an adapter may request.

    A country filter narrows the result set on the provider side, so fewer
    pages cover it; a worldwide lookup gets a larger budget.
    """

    country: int = 3
    worldwide: int = 10

    def pages_for(self, country: str | None) -> int:
        return self.country if country else self.worldwide


@dataclass(frozen=True)
class PaginationOptions:
    """Batching and retry knobs passed through to :func:`fetch_pages_in_parallel`."""

    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay: float = DEFAULT_BATCH_DELAY
    retries: int = DEFAULT_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY

    def as_kwargs(self) -> dict[str, float | int]:
        return {
            "batch_size": self.batch_size,
            "batch_delay": self.batch_delay,
            "retries": self.retries,
            "retry_delay": self.retry_delay,
        }


async def _fetch_page(
    page_fetcher: PageFetcher,
    page: int,
    policy: RetryPolicy,
    provider: str,
) -> list | None:
    """Fetch one page under *policy*; ``None`` when the page is lost.

    Only raised errors are retried.  A fetcher returning ``None`` has
    declared the page unrecoverable, so it is not asked again.
    """
    try:
        items = await retry_async(
            lambda: page_fetcher(page), policy, label=f"{provider}:page{page}"
        )
    except Exception as exc:
        _logger.warning(
            "pagination_page_failed",
            provider=provider,
            page=page,
            error=str(exc),
        )
        return None

    if items is None:
        _logger.warning("pagination_page_unrecoverable", provider=provider, page=page)
    return items


async def fetch_pages_in_parallel(
    page_fetcher: PageFetcher,
    *,
    total_pages: int,
    provider: str = "",
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_delay: float = DEFAULT_BATCH_DELAY,
    retries: int = DEFAULT_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> list[_T]:
    """Fetch pages ``1..total_pages`` and concatenate them in page order.

    Parameters
    ----------
    page_fetcher:
        ``async (page) -> list | None``.  Pages are 1-indexed.  Raised errors
        are retried; returning ``None`` loses the page at once.
    total_pages:
        Upper bound on the number of pages requested.
    provider:
        Label used in log lines.
    batch_size:
        Pages requested concurrently per batch.
    batch_delay:
        Seconds to wait between batches (never after the last one).
    retries:
        Extra attempts per page.
    retry_delay:
        Seconds between attempts on the same page.

    Returns
    -------
    list
        Items from every successfully fetched page, in page order.
    """
    if total_pages < 1:
        return []

    batch_size = max(1, batch_size)
    policy = RetryPolicy(retries=max(0, retries), delay=retry_delay)
    pages = list(range(1, total_pages + 1))
    batches = [pages[i:i + batch_size] for i in range(0, len(pages), batch_size)]

    results: list[_T] = []
    for index, batch in enumerate(batches):
        page_results = await asyncio.gather(
            *(_fetch_page(page_fetcher, page, policy, provider) for page in batch)
        )

        batch_items = 0
        for page, items in zip(batch, page_results):
            if items is None:
                _logger.info(
                    "pagination_stopped_on_failure",
                    provider=provider,
                    page=page,
                    items=len(results),
                )
                return results
            results.extend(items)
            batch_items += len(items)

        _logger.debug(
            "pagination_batch_complete",
            provider=provider,
            pages=batch,
            batch_items=batch_items,
            total_items=len(results),
        )

        if batch_items == 0:
            _logger.debug("pagination_end_of_data", provider=provider, last_page=batch[-1])
            break

        if index < len(batches) - 1:
            await asyncio.sleep(batch_delay)

    return results
