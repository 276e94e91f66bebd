"""Custom exception hierarchy for gigtrail.

All application exceptions inherit from :class:`GigTrailError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "setlistfm", "ticketmaster", "spotify") caused the
failure.

    GigTrailError  (base -- catch-all for any gigtrail error)
    +-- ConfigurationError       (missing API key / invalid settings)
    +-- ProviderError            (non-2xx response or malformed payload)
    +-- ProviderUnavailableError (external service down / unreachable)
    +-- RateLimitError           (provider rate-limit exceeded)

Provider adapters raise these internally and convert them into failure
envelopes at their public boundary, so the aggregator never sees them.
"""


class GigTrailError(Exception):
    """Base exception for all gigtrail errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets
    for log output, e.g. ``[ticketmaster] HTTP 503``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(GigTrailError):
    """Raised when configuration is invalid or a required credential is missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderError(GigTrailError):
    """Raised when a provider answers with an error status or an unusable body."""

    def __init__(
        self,
        message: str = "Provider request failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self.status_code = status_code


class ProviderUnavailableError(GigTrailError):
    """Raised when an external service is unreachable (timeouts, DNS, refused)."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(ProviderError):
    """Raised when a provider answers HTTP 429.

    Subclasses :class:`ProviderError` so the page-level retry loop treats it
    like any other transient failure.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=429)
