"""Thin JSON-over-HTTP helpers shared by the provider adapters.

Every adapter talks to its provider through an injected
``httpx.AsyncClient``.  These helpers turn transport failures and non-2xx
answers into the :mod:`gigtrail.utils.errors` hierarchy so each adapter
only needs one ``except GigTrailError`` at its public boundary.
"""

from __future__ import annotations

from typing import Any

import httpx

from gigtrail.utils.errors import ProviderError, ProviderUnavailableError, RateLimitError

_DEFAULT_TIMEOUT = 15.0  # seconds


async def get_json(
    http_client: httpx.AsyncClient,
    url: str,
    *,
    provider: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = _DEFAULT_TIMEOUT,
) -> Any:
    """GET *url* and decode the JSON body.

    Raises
    ------
    RateLimitError
        On HTTP 429.
    ProviderError
        On any other non-2xx status or an undecodable body.
    ProviderUnavailableError
        When the request never got an answer (timeout, connection error).
    """
    try:
        response = await http_client.get(url, params=params, headers=headers, timeout=timeout)
    except httpx.TimeoutException as exc:
        raise ProviderUnavailableError(
            message=f"Request timed out: {url}", provider_name=provider
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderUnavailableError(
            message=f"Request failed: {exc}", provider_name=provider
        ) from exc

    if response.status_code == 429:
        raise RateLimitError(message="Rate limit exceeded (HTTP 429)", provider_name=provider)
    if not 200 <= response.status_code < 300:
        raise ProviderError(
            message=f"HTTP {response.status_code} from {url}",
            provider_name=provider,
            status_code=response.status_code,
        )

    try:
        return response.json()
    except ValueError as exc:
        raise ProviderError(
            message=f"Malformed JSON from {url}", provider_name=provider
        ) from exc


async def resolve_redirect(
    http_client: httpx.AsyncClient,
    url: str,
    *,
    provider: str,
    timeout: float = _DEFAULT_TIMEOUT,
) -> str | None:
    """HEAD *url* following redirects; return the final URL or ``None`` on non-2xx."""
    try:
        response = await http_client.head(url, follow_redirects=True, timeout=timeout)
    except httpx.HTTPError as exc:
        raise ProviderUnavailableError(
            message=f"HEAD failed: {exc}", provider_name=provider
        ) from exc

    if not 200 <= response.status_code < 300:
        return None
    return str(response.url)
