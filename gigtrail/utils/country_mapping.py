"""Country name / ISO code canonicalization.

Providers disagree on how they spell a country: Setlist.fm says "United
States", Songkick says "US", Ticketmaster sends both a name and an ISO
code, and MusicBrainz only hands back area names.  Everything that goes
into an :class:`~gigtrail.models.performance.Event` passes through
:func:`extract_country` so that one performance reported by two providers
carries the same country string.

The aggregator uses :func:`to_iso_country_code` in the other direction,
turning what a user typed ("France", "british", "uk") into the ISO
alpha-2 code that the event APIs filter on.
"""

from __future__ import annotations

COUNTRY_NAME_VARIATIONS: dict[str, str] = {
    # United States
    "united states of america": "United States",
    "united states": "United States",
    "usa": "United States",
    "us": "United States",
    # United Kingdom
    "united kingdom": "United Kingdom",
    "uk": "United Kingdom",
    "great britain": "United Kingdom",
    "britain": "United Kingdom",
    "england": "United Kingdom",
    "scotland": "United Kingdom",
    "wales": "United Kingdom",
    # Others
    "south korea": "South Korea",
    "korea": "South Korea",
    "republic of korea": "South Korea",
    "uae": "United Arab Emirates",
    "united arab emirates": "United Arab Emirates",
    "czech republic": "Czech Republic",
    "czechia": "Czech Republic",
}

COUNTRY_CODE_TO_NAME: dict[str, str] = {
    # North America
    "US": "United States",
    "CA": "Canada",
    "MX": "Mexico",
    # Europe
    "GB": "United Kingdom",
    "UK": "United Kingdom",
    "DE": "Germany",
    "FR": "France",
    "IT": "Italy",
    "ES": "Spain",
    "PT": "Portugal",
    "NL": "Netherlands",
    "BE": "Belgium",
    "CH": "Switzerland",
    "AT": "Austria",
    "SE": "Sweden",
    "NO": "Norway",
    "DK": "Denmark",
    "FI": "Finland",
    "IE": "Ireland",
    "PL": "Poland",
    "CZ": "Czech Republic",
    "GR": "Greece",
    "HU": "Hungary",
    "RO": "Romania",
    "SK": "Slovakia",
    "HR": "Croatia",
    "SI": "Slovenia",
    "RU": "Russia",
    # South America
    "BR": "Brazil",
    "AR": "Argentina",
    "CL": "Chile",
    "CO": "Colombia",
    "PE": "Peru",
    "VE": "Venezuela",
    "UY": "Uruguay",
    # Asia
    "JP": "Japan",
    "CN": "China",
    "KR": "South Korea",
    "IN": "India",
    "TH": "Thailand",
    "SG": "Singapore",
    "MY": "Malaysia",
    "ID": "Indonesia",
    "PH": "Philippines",
    "VN": "Vietnam",
    "TW": "Taiwan",
    "HK": "Hong Kong",
    # Oceania
    "AU": "Australia",
    "NZ": "New Zealand",
    # Middle East
    "AE": "United Arab Emirates",
    "SA": "Saudi Arabia",
    "IL": "Israel",
    "TR": "Turkey",
    # Africa
    "ZA": "South Africa",
    "EG": "Egypt",
    "NG": "Nigeria",
    "KE": "Kenya",
}

# Lowercased names, variations and demonyms -> ISO alpha-2.
_NAME_TO_CODE: dict[str, str] = {
    name.lower(): code for code, name in COUNTRY_CODE_TO_NAME.items() if code != "UK"
}
_NAME_TO_CODE.update(
    {variant: _NAME_TO_CODE[canonical.lower()] for variant, canonical in COUNTRY_NAME_VARIATIONS.items()}
)
_NAME_TO_CODE.update(
    {
        "america": "US",
        "american": "US",
        "british": "GB",
        "english": "GB",
        "scottish": "GB",
        "welsh": "GB",
        "canadian": "CA",
        "mexican": "MX",
        "german": "DE",
        "deutschland": "DE",
        "french": "FR",
        "italian": "IT",
        "spanish": "ES",
        "espana": "ES",
        "españa": "ES",
        "portuguese": "PT",
        "dutch": "NL",
        "holland": "NL",
        "the netherlands": "NL",
        "belgian": "BE",
        "swiss": "CH",
        "austrian": "AT",
        "swedish": "SE",
        "norwegian": "NO",
        "danish": "DK",
        "finnish": "FI",
        "irish": "IE",
        "polish": "PL",
        "czech": "CZ",
        "greek": "GR",
        "hungarian": "HU",
        "russian": "RU",
        "brasil": "BR",
        "brazilian": "BR",
        "argentinian": "AR",
        "argentine": "AR",
        "chilean": "CL",
        "colombian": "CO",
        "peruvian": "PE",
        "japanese": "JP",
        "chinese": "CN",
        "korean": "KR",
        "indian": "IN",
        "thai": "TH",
        "australian": "AU",
        "kiwi": "NZ",
        "israeli": "IL",
        "turkish": "TR",
        "turkiye": "TR",
        "türkiye": "TR",
        "south african": "ZA",
        "egyptian": "EG",
    }
)


def get_country_name(country_code: str | None) -> str | None:
    """Map an ISO alpha-2 code (case-insensitive) to its canonical name."""
    if not country_code:
        return None
    return COUNTRY_CODE_TO_NAME.get(country_code.strip().upper())


def normalize_country_name(country_name: str) -> str:
    """Collapse known spelling variations onto one canonical name.

    Unknown names are returned unchanged.
    """
    return COUNTRY_NAME_VARIATIONS.get(country_name.strip().lower(), country_name.strip())


def extract_country(country_name: str | None, country_code: str | None) -> str | None:
    """Pick the best country string from what a provider reported.

    The name wins when present and not literally "unknown"; otherwise the
    ISO code is looked up.  ``None`` when neither yields anything.
    """
    if country_name and country_name.strip() and country_name.strip().lower() != "unknown":
        return normalize_country_name(country_name)

    if country_code:
        mapped = get_country_name(country_code)
        if mapped:
            return mapped

    return None


def to_iso_country_code(country: str | None) -> str | None:
    """Turn a user-supplied country into an ISO alpha-2 code where possible.

    * known names, variations and demonyms map through a static table,
    * any two-letter input is uppercased (``"uk"`` becomes ``"GB"``),
    * anything else passes through unchanged.
    """
    if country is None:
        return None
    stripped = country.strip()
    if not stripped:
        return None

    lowered = stripped.lower()
    if len(stripped) == 2 and stripped.isalpha():
        upper = stripped.upper()
        return "GB" if upper == "UK" else upper

    return _NAME_TO_CODE.get(lowered, stripped)
