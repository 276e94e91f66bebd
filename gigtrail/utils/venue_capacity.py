"""Venue capacity lookup with a keyword-based size estimate as fallback.

A small hand-maintained table covers the big concert venues worldwide.
Lookups try, in order:

1. exact normalized name, same city and country (when given),
2. containment of one normalized name in the other, same city (when given),
3. the venue-type keyword estimate ("stadium" -> 50000, "club" -> 500, ...).

Names are normalized by lowercasing and dropping a trailing venue-type
word, so "Ziggo Dome" and "ziggo" compare equal.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from gigtrail.models.performance import VENUE_UNKNOWN
from gigtrail.utils.country_mapping import normalize_country_name


class VenueInfo(NamedTuple):
    name: str
    capacity: int
    city: str
    country: str


VENUE_DATABASE: tuple[VenueInfo, ...] = (
    # United States
    VenueInfo("Madison Square Garden", 20789, "New York", "United States"),
    VenueInfo("The Forum", 17500, "Los Angeles", "United States"),
    VenueInfo("United Center", 23500, "Chicago", "United States"),
    VenueInfo("Staples Center", 20000, "Los Angeles", "United States"),
    VenueInfo("Crypto.com Arena", 20000, "Los Angeles", "United States"),
    VenueInfo("TD Garden", 19580, "Boston", "United States"),
    VenueInfo("Barclays Center", 19000, "New York", "United States"),
    VenueInfo("American Airlines Center", 20000, "Dallas", "United States"),
    VenueInfo("T-Mobile Arena", 20000, "Las Vegas", "United States"),
    VenueInfo("Red Rocks Amphitheatre", 9525, "Denver", "United States"),
    VenueInfo("Hollywood Bowl", 17500, "Los Angeles", "United States"),
    VenueInfo("Greek Theatre", 5900, "Los Angeles", "United States"),
    VenueInfo("Radio City Music Hall", 6015, "New York", "United States"),
    VenueInfo("The Wiltern", 1850, "Los Angeles", "United States"),
    # United Kingdom
    VenueInfo("O2 Arena", 20000, "London", "United Kingdom"),
    VenueInfo("Wembley Stadium", 90000, "London", "United Kingdom"),
    VenueInfo("Royal Albert Hall", 5272, "London", "United Kingdom"),
    VenueInfo("Roundhouse", 3300, "London", "United Kingdom"),
    VenueInfo("Brixton Academy", 4921, "London", "United Kingdom"),
    VenueInfo("Manchester Arena", 21000, "Manchester", "United Kingdom"),
    VenueInfo("Hydro", 14300, "Glasgow", "United Kingdom"),
    VenueInfo("Apollo", 3500, "Manchester", "United Kingdom"),
    # France
    VenueInfo("Accor Arena", 20300, "Paris", "France"),
    VenueInfo("Stade de France", 80000, "Paris", "France"),
    VenueInfo("Olympia", 2000, "Paris", "France"),
    VenueInfo("Zenith Paris", 6293, "Paris", "France"),
    # Germany
    VenueInfo("Mercedes-Benz Arena", 17000, "Berlin", "Germany"),
    VenueInfo("Olympiahalle", 15500, "Munich", "Germany"),
    VenueInfo("Lanxess Arena", 18500, "Cologne", "Germany"),
    # Spain
    VenueInfo("WiZink Center", 17000, "Madrid", "Spain"),
    VenueInfo("Palau Sant Jordi", 17000, "Barcelona", "Spain"),
    # Italy
    VenueInfo("Mediolanum Forum", 12700, "Milan", "Italy"),
    VenueInfo("Palalottomatica", 11000, "Rome", "Italy"),
    # Brazil
    VenueInfo("Allianz Parque", 43600, "São Paulo", "Brazil"),
    VenueInfo("Maracanã", 78838, "Rio de Janeiro", "Brazil"),
    VenueInfo("Estádio do Morumbi", 66795, "São Paulo", "Brazil"),
    # Japan
    VenueInfo("Tokyo Dome", 55000, "Tokyo", "Japan"),
    VenueInfo("Nippon Budokan", 14471, "Tokyo", "Japan"),
    VenueInfo("Osaka-jō Hall", 16000, "Osaka", "Japan"),
    # Australia
    VenueInfo("Rod Laver Arena", 15000, "Melbourne", "Australia"),
    VenueInfo("Sydney Opera House", 5738, "Sydney", "Australia"),
    VenueInfo("Marvel Stadium", 56347, "Melbourne", "Australia"),
    # Canada
    VenueInfo("Scotiabank Arena", 19800, "Toronto", "Canada"),
    VenueInfo("Bell Centre", 22114, "Montreal", "Canada"),
    VenueInfo("Rogers Arena", 19700, "Vancouver", "Canada"),
    # Mexico
    VenueInfo("Foro Sol", 65000, "Mexico City", "Mexico"),
    VenueInfo("Arena Ciudad de México", 22300, "Mexico City", "Mexico"),
    # Argentina
    VenueInfo("Estadio River Plate", 70074, "Buenos Aires", "Argentina"),
    VenueInfo("Luna Park", 8000, "Buenos Aires", "Argentina"),
    # Netherlands
    VenueInfo("Ziggo Dome", 17000, "Amsterdam", "Netherlands"),
    VenueInfo("Paradiso", 1500, "Amsterdam", "Netherlands"),
    # Portugal
    VenueInfo("Altice Arena", 20000, "Lisbon", "Portugal"),
    # Sweden
    VenueInfo("Ericsson Globe", 16000, "Stockholm", "Sweden"),
    # Denmark
    VenueInfo("Royal Arena", 16000, "Copenhagen", "Denmark"),
)

_TRAILING_TYPE_RE = re.compile(
    r"\s+(arena|stadium|theatre|theater|hall|center|centre|dome|park)$", re.IGNORECASE
)

# Shorter normalized names are too generic for containment matching
# ("city", "the", "o2").
_MIN_PARTIAL_LENGTH = 5

# First matching keyword wins; order runs from largest to smallest venue type.
_TYPE_ESTIMATES: tuple[tuple[tuple[str, ...], int], ...] = (
    (("stadium", "estadio"), 50000),
    (("arena",), 15000),
    (("amphitheatre", "amphitheater"), 10000),
    (("hall", "auditorium"), 5000),
    (("theater", "theatre"), 2000),
    (("club", "bar"), 500),
)

_UNKNOWN_VENUE_NAMES = frozenset({VENUE_UNKNOWN.lower(), "unknown venue", "unknown"})


def normalize_venue_name(name: str) -> str:
    """Lowercase, trim and drop a trailing venue-type word."""
    return _TRAILING_TYPE_RE.sub("", name.strip().lower()).strip()


def _is_unknown(venue_name: str | None) -> bool:
    return not venue_name or venue_name.strip().lower() in _UNKNOWN_VENUE_NAMES


def _same_place(expected: str, actual: str | None) -> bool:
    if not actual:
        return True
    return expected.lower() == actual.strip().lower()


def _same_country(expected: str, actual: str | None) -> bool:
    if not actual:
        return True
    return expected.lower() == normalize_country_name(actual).lower()


def get_venue_capacity(
    venue_name: str | None,
    city: str | None = None,
    country: str | None = None,
) -> int | None:
    """Return the tabulated capacity for a known venue, or ``None``."""
    if _is_unknown(venue_name):
        return None

    search = normalize_venue_name(venue_name)
    if not search:
        return None

    for venue in VENUE_DATABASE:
        if (
            normalize_venue_name(venue.name) == search
            and _same_place(venue.city, city)
            and _same_country(venue.country, country)
        ):
            return venue.capacity

    for venue in VENUE_DATABASE:
        known = normalize_venue_name(venue.name)
        shorter = min(known, search, key=len)
        if len(shorter) < _MIN_PARTIAL_LENGTH:
            continue
        if (known in search or search in known) and _same_place(venue.city, city):
            return venue.capacity

    return None


def estimate_capacity_by_type(venue_name: str | None) -> int | None:
    """Guess a capacity from venue-type keywords in the name."""
    if _is_unknown(venue_name):
        return None

    name = venue_name.lower()
    for keywords, capacity in _TYPE_ESTIMATES:
        if any(keyword in name for keyword in keywords):
            return capacity
    return None


def get_venue_capacity_with_fallback(
    venue_name: str | None,
    city: str | None = None,
    country: str | None = None,
) -> int | None:
    """Tabulated capacity when known, otherwise the keyword estimate."""
    return get_venue_capacity(venue_name, city, country) or estimate_capacity_by_type(venue_name)
