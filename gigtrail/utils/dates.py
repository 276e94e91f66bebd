"""Date parsing for provider payloads and event ordering.

Providers report dates as ``dd-MM-yyyy`` (Setlist.fm), ``yyyy-MM-dd``
(Songkick, Ticketmaster), partial ``yyyy`` / ``yyyy-MM`` (MusicBrainz) or
full ISO timestamps (News API).  Adapters call :func:`to_iso_date` so every
Event carries ``YYYY[-MM[-DD]]``; the aggregator sorts on
:func:`parse_sortable_date`.
"""

from __future__ import annotations

import re
from datetime import date

_DMY_RE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_ISO_RE = re.compile(r"^(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?(?:[T ].*)?$")


def to_iso_date(raw: str | None) -> str | None:
    """Normalize a provider date string to ``YYYY[-MM[-DD]]``.

    Unrecognized strings are returned stripped but otherwise unchanged;
    ``None`` and blank input give ``None``.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None

    match = _DMY_RE.match(text)
    if match:
        day, month, year = match.groups()
        return f"{year}-{int(month):02d}-{int(day):02d}"

    match = _ISO_RE.match(text)
    if match:
        year, month, day = match.groups()
        if month is None:
            return year
        if day is None:
            return f"{year}-{int(month):02d}"
        return f"{year}-{int(month):02d}-{int(day):02d}"

    return text


def parse_sortable_date(value: str) -> date | None:
    """Parse ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` into a comparable date.

    Partial dates sort as the first day of their period.  Anything else,
    including the "Date unknown" sentinel, gives ``None``.
    """
    match = _ISO_RE.match(value.strip()) if value else None
    if not match:
        return None
    year, month, day = match.groups()
    try:
        return date(int(year), int(month or 1), int(day or 1))
    except ValueError:
        return None
