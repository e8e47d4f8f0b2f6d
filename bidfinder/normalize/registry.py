"""
Source-format dispatch for export rows.

Every known portal export has one mapper; anything else goes through the
generic mapper. Adding a source means adding a SourceFormat member and its
entry in _MAPPERS.
"""

from enum import Enum
from typing import Callable, Dict, Optional

from bidfinder.core.domain_models import Opportunity, RawRow
from bidfinder.normalize.california import map_california
from bidfinder.normalize.generic import map_generic
from bidfinder.normalize.grants_gov import map_grants_gov
from bidfinder.normalize.la_county import map_la_county
from bidfinder.normalize.sam_gov import map_sam_gov

Mapper = Callable[[RawRow, str], Optional[Opportunity]]


class SourceFormat(str, Enum):
    LA_COUNTY = "la_county"      # county bids
    SAM_GOV = "sam_gov"          # federal contracts
    GRANTS_GOV = "grants_gov"    # federal grants
    CALIFORNIA = "california"    # state procurement
    GENERIC = "generic"

    @classmethod
    def for_source(cls, source: str) -> "SourceFormat":
        """Format for a source identifier; unknown sources are GENERIC."""
        key = (source or "").strip().lower()
        for member in cls:
            if member is not cls.GENERIC and member.value == key:
                return member
        return cls.GENERIC


_MAPPERS: Dict[SourceFormat, Mapper] = {
    SourceFormat.LA_COUNTY: map_la_county,
    SourceFormat.SAM_GOV: map_sam_gov,
    SourceFormat.GRANTS_GOV: map_grants_gov,
    SourceFormat.CALIFORNIA: map_california,
    SourceFormat.GENERIC: map_generic,
}

_unmapped = set(SourceFormat) - set(_MAPPERS)
if _unmapped:
    raise RuntimeError(f"No mapper registered for: {sorted(f.value for f in _unmapped)}")


def mapper_for(source: str) -> Mapper:
    return _MAPPERS[SourceFormat.for_source(source)]


def map_row(row: RawRow, source: str) -> Optional[Opportunity]:
    """
    Map one export row to the canonical record.

    The record's ``source`` is always the caller's identifier, never a
    value read from the row.

    Args:
        row: Parsed export row
        source: Source identifier the payload was submitted under

    Returns:
        Opportunity, or None if the row has no title
    """
    return mapper_for(source)(row, source)
