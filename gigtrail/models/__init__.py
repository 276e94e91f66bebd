"""gigtrail domain models -- re-exports the public model classes.

Import from ``gigtrail.models`` rather than the submodule so callers do not
depend on the file layout.
"""

from __future__ import annotations

from gigtrail.models.performance import (
    CITY_UNKNOWN,
    COUNTRY_UNKNOWN,
    DATE_UNKNOWN,
    VENUE_UNKNOWN,
    WORLDWIDE,
    Confidence,
    Event,
    PerformanceResult,
    SearchParams,
    ServiceResponse,
    SourceKind,
    SourceLink,
)

__all__ = [
    "CITY_UNKNOWN",
    "COUNTRY_UNKNOWN",
    "DATE_UNKNOWN",
    "VENUE_UNKNOWN",
    "WORLDWIDE",
    "Confidence",
    "Event",
    "PerformanceResult",
    "SearchParams",
    "ServiceResponse",
    "SourceKind",
    "SourceLink",
]
