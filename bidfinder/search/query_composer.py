"""
Builds the two forms of a search query.

The catalog path gets a precise source restriction; the web fallback gets a
recall-oriented text query with locality and solicitation qualifiers.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from bidfinder.core.domain_models import GeographicPreference, Location

# Source identifiers implied by each preference; None means "any source"
PREFERENCE_SOURCES: Dict[GeographicPreference, Optional[Tuple[str, ...]]] = {
    GeographicPreference.FEDERAL: ("sam_gov", "grants_gov"),
    GeographicPreference.STATE: ("california",),
    GeographicPreference.COUNTY: ("la_county",),
    GeographicPreference.LOCAL: ("la_county", "city"),
    GeographicPreference.UNSPECIFIED: None,
}

SOLICITATION_HINT = "RFP OR grant OR solicitation"

_SOLICITATION_TERMS = re.compile(
    r"\b(rfp|rfq|rfi|rfa|ifb|nofo|grants?|solicitations?|bids?|contracts?|"
    r"proposals?|tenders?|funding)\b",
    re.IGNORECASE,
)


@dataclass
class ComposedQuery:
    text: str                              # query as typed, trimmed
    sources: Optional[Tuple[str, ...]]     # catalog source restriction
    expanded_text: str                     # web fallback query
    searched_areas: List[str] = field(default_factory=list)  # UI labels


def mentions_solicitation(query: str) -> bool:
    return bool(_SOLICITATION_TERMS.search(query or ""))


def compose_query(
    query: str,
    preference: GeographicPreference = GeographicPreference.UNSPECIFIED,
    location: Optional[Location] = None
) -> ComposedQuery:
    """
    Compose catalog filter and fallback query text.

    Args:
        query: Free-text query
        preference: Requester's geographic preference
        location: Requester's city/county/state, if known

    Returns:
        ComposedQuery

    Examples:
        >>> compose_query("drone inspection", GeographicPreference.FEDERAL).expanded_text
        'drone inspection federal government RFP OR grant OR solicitation'
    """
    text = " ".join((query or "").split())
    preference = GeographicPreference.parse(preference)
    qualifiers = _locality_qualifiers(preference, location)

    parts = [text] + qualifiers
    if not mentions_solicitation(text):
        parts.append(SOLICITATION_HINT)

    return ComposedQuery(
        text=text,
        sources=PREFERENCE_SOURCES[preference],
        expanded_text=" ".join(p for p in parts if p),
        searched_areas=searched_areas(preference, location),
    )


def searched_areas(
    preference: GeographicPreference,
    location: Optional[Location] = None
) -> List[str]:
    """
    Human-readable list of the jurisdictions a search covered.

    Federal sources are always included; state, county and city labels
    follow the preference when the location names them.

    Examples:
        >>> searched_areas(GeographicPreference.COUNTY, Location(county="Los Angeles", state="CA"))
        ['Federal (SAM.gov, Grants.gov)', 'CA State', 'Los Angeles County']
    """
    preference = GeographicPreference.parse(preference)
    loc = location or Location()
    areas = ["Federal (SAM.gov, Grants.gov)"]

    if preference in (GeographicPreference.STATE, GeographicPreference.COUNTY, GeographicPreference.LOCAL):
        if loc.state:
            areas.append(f"{loc.state} State")
    if preference in (GeographicPreference.COUNTY, GeographicPreference.LOCAL):
        if loc.county:
            areas.append(_county_name(loc.county))
    if preference == GeographicPreference.LOCAL and loc.city:
        areas.append(f"City of {loc.city}")

    return areas


def _locality_qualifiers(preference: GeographicPreference, location: Optional[Location]) -> list:
    loc = location or Location()
    qualifiers = []

    if preference == GeographicPreference.FEDERAL:
        qualifiers.append("federal government")
    elif preference == GeographicPreference.STATE:
        if loc.state:
            qualifiers.append(loc.state)
        qualifiers.append("state government")
    elif preference == GeographicPreference.COUNTY:
        if loc.county:
            qualifiers.append(_county_name(loc.county))
        if loc.state:
            qualifiers.append(loc.state)
    elif preference == GeographicPreference.LOCAL:
        if loc.city:
            qualifiers.append(f"City of {loc.city}")
        if loc.county:
            qualifiers.append(_county_name(loc.county))
        if loc.state:
            qualifiers.append(loc.state)

    return qualifiers


def _county_name(county: str) -> str:
    county = county.strip()
    return county if county.lower().endswith("county") else f"{county} County"
