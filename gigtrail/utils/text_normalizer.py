"""Text helpers for artist names and provider snippets.

Artist directories (Setlist.fm, Songkick, MusicBrainz) return a ranked
list of candidates for a free-text name.  :func:`best_artist_match` picks
the candidate whose name is closest to the query using rapidfuzz, so a
tribute act ranked first by the provider does not win over the real
artist a few places down.
"""

import html
import re
from typing import Any, Callable, Sequence, TypeVar

from rapidfuzz import fuzz

_T = TypeVar("_T")

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def normalize_artist_name(name: str) -> str:
    """Lowercase and collapse whitespace for comparison.

    Args:
        name: Raw artist name string.

    Returns:
        Normalized name, e.g. ``"  The   Cure "`` -> ``"the cure"``.
    """
    return _WS_RE.sub(" ", name.strip()).lower()


def best_artist_match(
    query: str,
    candidates: Sequence[_T],
    name_of: Callable[[_T], Any],
) -> _T | None:
    """Return the candidate whose name best matches *query*.

    Uses rapidfuzz ``token_sort_ratio`` so word order does not matter
    ("Cox Carl" matches "Carl Cox").  Ties keep the provider's own
    ranking: the earliest candidate wins.

    Args:
        query: The artist name the user asked for.
        candidates: Provider results, in provider order.
        name_of: Extracts the display name from one candidate.

    Returns:
        The best candidate, or None when *candidates* is empty.
    """
    target = normalize_artist_name(query)
    best: _T | None = None
    best_score = -1.0
    for candidate in candidates:
        name = name_of(candidate)
        if not isinstance(name, str):
            continue
        score = fuzz.token_sort_ratio(target, normalize_artist_name(name))
        if score > best_score:
            best, best_score = candidate, score
    return best


def strip_html(text: str) -> str:
    """Remove tags and decode entities from a search-result snippet."""
    without_tags = _TAG_RE.sub("", text)
    return _WS_RE.sub(" ", html.unescape(without_tags)).strip()
