"""
Canonical domain models for the opportunity catalog and search pipeline.

These models represent the normalized data structures that every importer,
the catalog store and the search path share.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


# A parsed tabular line: column name -> cell text, in header order.
RawRow = Dict[str, str]


@dataclass
class Opportunity:
    """
    Canonical contract/grant listing.

    Every source format (county bids, SAM.gov, Grants.gov, state portals)
    normalizes into this record. Identity is (source, source_id); a record
    without a source_id cannot be matched on re-import.
    """
    # Required fields
    source: str  # e.g., "la_county", "sam_gov"
    title: str

    # Identity
    source_id: Optional[str] = None  # Source's native ID (bid/solicitation number)
    source_url: Optional[str] = None

    # Descriptive
    description: Optional[str] = None
    agency: Optional[str] = None
    bid_type: Optional[str] = None

    # Dates
    open_date: Optional[datetime] = None
    close_date: Optional[datetime] = None
    is_continuous: bool = False  # True means "no deadline", never "deadline unknown"

    # Classification
    commodity_code: Optional[str] = None
    commodity_description: Optional[str] = None
    naics_codes: List[str] = field(default_factory=list)
    set_asides: List[str] = field(default_factory=list)

    # Free text as published, e.g. "$250,000"; None when the source is silent
    estimated_value: Optional[str] = None

    # Contact
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None

    # Jurisdiction
    state: Optional[str] = None
    county: Optional[str] = None

    is_active: bool = True

    # Store-managed
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.is_continuous:
            self.close_date = None


class GeographicPreference(str, Enum):
    FEDERAL = "federal"
    STATE = "state"
    COUNTY = "county"
    LOCAL = "local"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, value: Optional[str]) -> "GeographicPreference":
        """Lenient lookup; anything unrecognised means no preference."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNSPECIFIED


class MatchLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class NaicsCode:
    code: str
    label: Optional[str] = None


@dataclass
class Location:
    city: Optional[str] = None
    county: Optional[str] = None
    state: Optional[str] = None


@dataclass
class RequesterProfile:
    """Read-only matching context supplied by the caller for one request."""
    naics_codes: List[NaicsCode] = field(default_factory=list)
    certifications: List[str] = field(default_factory=list)
    geographic_preference: GeographicPreference = GeographicPreference.UNSPECIFIED
    location: Optional[Location] = None


@dataclass
class SearchResult:
    """
    Transient, scored projection of a candidate opportunity.

    Built per request from either a catalog row (from_database=True) or a
    web-derived candidate, which carries an ephemeral id scoped to the
    response. Never persisted.
    """
    id: str
    title: str
    from_database: bool

    agency: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    is_continuous: bool = False
    estimated_value: Optional[str] = None
    source: Optional[str] = None
    source_url: Optional[str] = None
    rfp_number: Optional[str] = None
    level: Optional[str] = None
    commodity_code: Optional[str] = None
    commodity_description: Optional[str] = None
    naics_codes: List[str] = field(default_factory=list)
    state: Optional[str] = None
    county: Optional[str] = None
    found_at: Optional[datetime] = None

    match_score: int = 0
    match_level: MatchLevel = MatchLevel.LOW

    @classmethod
    def from_opportunity(cls, opp: Opportunity) -> "SearchResult":
        return cls(
            id=str(opp.id) if opp.id is not None else f"{opp.source}:{opp.source_id}",
            title=opp.title,
            from_database=True,
            agency=opp.agency,
            description=opp.description,
            due_date=opp.close_date,
            is_continuous=opp.is_continuous,
            estimated_value=opp.estimated_value,
            source=opp.source,
            source_url=opp.source_url,
            rfp_number=opp.source_id,
            commodity_code=opp.commodity_code,
            commodity_description=opp.commodity_description,
            naics_codes=list(opp.naics_codes),
            state=opp.state,
            county=opp.county,
        )


@dataclass
class SearchResponse:
    opportunities: List[SearchResult]
    search_method: str  # "database" | "web" | "both"
    searched_areas: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.opportunities)


@dataclass
class ImportResult:
    source: str
    imported: int
    deactivated: int = 0
    skipped: int = 0
