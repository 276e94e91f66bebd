"""Performance-lookup domain models.

Defines the canonical shapes every provider adapter normalizes into
(:class:`Event`, :class:`SourceLink`), the request (:class:`SearchParams`),
the per-provider result envelope (:class:`ServiceResponse`) and the final
answer handed to transports (:class:`PerformanceResult`).

All models are frozen pydantic v2 models.  A provider that omits a
date, venue, city or country gets the matching "unknown" sentinel, never
an empty string; the aggregator's deduplication compares these fields
verbatim.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DATE_UNKNOWN = "Date unknown"
VENUE_UNKNOWN = "Venue unknown"
CITY_UNKNOWN = "City unknown"
COUNTRY_UNKNOWN = "Country unknown"

WORLDWIDE = "worldwide"

T = TypeVar("T")


class Confidence(str, Enum):  # noqa: UP042
    """How much an event record can be trusted."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SourceKind(str, Enum):  # noqa: UP042
    """Category of a supporting source link."""

    OFFICIAL = "official"
    NEWS = "news"
    MUSICDB = "musicdb"
    SOCIAL = "social"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

_SENTINELS: dict[str, str] = {
    "date": DATE_UNKNOWN,
    "venue": VENUE_UNKNOWN,
    "city": CITY_UNKNOWN,
    "country": COUNTRY_UNKNOWN,
}


class Event(BaseModel):
    """One canonical performance record."""

    model_config = ConfigDict(frozen=True)

    date: str = DATE_UNKNOWN
    venue: str = VENUE_UNKNOWN
    city: str = CITY_UNKNOWN
    country: str = COUNTRY_UNKNOWN
    source: str = Field(..., description="Display name of the provider, e.g. 'Setlist.fm'")
    source_url: str = ""
    confidence: Confidence = Confidence.HIGH
    setlist: list[str] | None = None
    capacity: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _fill_sentinels(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        filled = dict(data)
        for field_name, sentinel in _SENTINELS.items():
            value = filled.get(field_name)
            if value is None or (isinstance(value, str) and not value.strip()):
                filled[field_name] = sentinel
            elif isinstance(value, str):
                filled[field_name] = value.strip()
        return filled

    @property
    def has_known_date(self) -> bool:
        return self.date != DATE_UNKNOWN


class SourceLink(BaseModel):
    """A supporting article or reference page."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    type: SourceKind = SourceKind.OTHER
    published_date: str | None = None
    snippet: str | None = None


# ---------------------------------------------------------------------------
# Request / envelopes
# ---------------------------------------------------------------------------


class SearchParams(BaseModel):
    """One lookup request."""

    model_config = ConfigDict(frozen=True)

    artist: str = Field(..., min_length=1)
    country: str | None = None
    city: str | None = None
    date_from: str | None = None
    date_to: str | None = None

    @field_validator("artist")
    @classmethod
    def _artist_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("artist must not be blank")
        return stripped

    @field_validator("country", "city", "date_from", "date_to")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class ServiceResponse(BaseModel, Generic[T]):
    """Result envelope returned by every provider adapter.

    Exactly one side is meaningful: ``success=True`` carries ``data``
    (possibly an empty list, meaning "confirmed absence"), ``success=False``
    carries a non-empty ``error``.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    data: T | None = None
    error: str | None = None
    source: str
    total_available: int | None = None

    @model_validator(mode="after")
    def _one_side_only(self) -> ServiceResponse[T]:
        if self.success and self.error is not None:
            raise ValueError("successful response must not carry an error")
        if not self.success and (self.data is not None or not self.error):
            raise ValueError("failed response needs an error and no data")
        return self

    @classmethod
    def ok(
        cls,
        data: T,
        source: str,
        total_available: int | None = None,
    ) -> ServiceResponse[T]:
        return cls(success=True, data=data, source=source, total_available=total_available)

    @classmethod
    def fail(cls, error: str, source: str) -> ServiceResponse[T]:
        return cls(success=False, error=error or "Unknown error", source=source)


class PerformanceResult(BaseModel):
    """The aggregated answer for one (artist, location) query."""

    model_config = ConfigDict(frozen=True)

    artist: str
    location: str = WORLDWIDE
    performed: bool
    events: list[Event] = Field(default_factory=list)
    sources: list[SourceLink] = Field(default_factory=list)
    message: str | None = None
    artist_image: str | None = None
    total_available: int | None = None
    cached: bool = False
