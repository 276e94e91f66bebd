"""Shared concurrency primitives for provider adapters.

Two pieces live here:

1. **retry_async** -- runs an async operation under a :class:`RetryPolicy`
   (fixed attempt budget, fixed delay between attempts) and re-raises the
   last error once the budget is spent.  The paginated fetcher and the
   adapters' artist-resolution calls share it instead of hand-rolling
   counter-and-sleep loops.

2. **RequestThrottle** -- enforces a minimum spacing between outbound
   requests to one provider.  Each adapter owns its own instance, so two
   adapters (or two tests) never share a last-request timestamp.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import structlog

from gigtrail.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How many extra attempts to make and how long to wait between them.

    Attributes
    ----------
    retries:
        Extra attempts after the first one; ``retries=2`` means at most
        three calls.
    delay:
        Seconds to sleep between consecutive attempts.
    """

    retries: int = 2
    delay: float = 0.2

    @property
    def max_attempts(self) -> int:
        return self.retries + 1


async def retry_async(
    operation: Callable[[], Awaitable[_T]],
    policy: RetryPolicy,
    *,
    label: str = "",
) -> _T:
    """Call *operation* until it succeeds or *policy* is exhausted.

    Parameters
    ----------
    operation:
        Zero-argument coroutine factory.  A fresh coroutine is created for
        every attempt.
    policy:
        Attempt budget and inter-attempt delay.
    label:
        Free-form tag included in the retry log lines.

    Returns
    -------
    _T
        Whatever *operation* returns on its first successful attempt.

    Raises
    ------
    Exception
        The exception raised by the final attempt.
    """
    last_exc: Exception | None = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            last_exc = exc
            if attempt < policy.max_attempts:
                _logger.debug(
                    "retry_attempt_failed",
                    label=label,
                    attempt=attempt,
                    max_attempts=policy.max_attempts,
                    error=str(exc),
                )
                await asyncio.sleep(policy.delay)

    _logger.warning(
        "retry_exhausted",
        label=label,
        attempts=policy.max_attempts,
        error=str(last_exc),
    )
    assert last_exc is not None
    raise last_exc


class RequestThrottle:
    """Minimum spacing between consecutive requests to one provider.

    Parameters
    ----------
    min_interval:
        Seconds that must separate two requests (MusicBrainz asks for 1.0).
    """

    def __init__(self, min_interval: float) -> None:
        self._min_interval = min_interval
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def wait(self) -> None:
        """Sleep until the next request is allowed, then claim the slot."""
        async with self._lock:
            elapsed = time.monotonic() - self._last_request_time
            if self._last_request_time > 0 and elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()
