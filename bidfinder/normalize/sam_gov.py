"""
Mapper for SAM.gov contract-opportunity exports (federal contracts).
"""

from typing import Optional

from bidfinder.core.domain_models import Opportunity, RawRow
from bidfinder.normalize.common import (
    as_list,
    close_date_and_continuous,
    first_code,
    first_date,
    first_value,
)

SOURCE = "sam_gov"

TITLE_COLUMNS = ("Title", "Opportunity Title")


def map_sam_gov(row: RawRow, source: str = SOURCE) -> Optional[Opportunity]:
    """
    Convert one SAM.gov export row to an Opportunity.

    The solicitation number is the preferred identity; older exports only
    carry the notice ID.
    """
    title = first_value(row, TITLE_COLUMNS)
    if not title:
        return None

    close_date, is_continuous = close_date_and_continuous(
        row, ("Response Deadline", "Response Date")
    )
    set_aside = first_value(row, ("Set-Aside", "Set Aside"))

    return Opportunity(
        source=source,
        source_id=first_code(row, ("Solicitation Number", "Notice ID")),
        source_url=first_value(row, ("URL", "Link")),
        title=title,
        description=first_value(row, ("Description",)),
        agency=first_value(row, ("Department/Agency", "Agency")) or "Federal",
        bid_type=first_value(row, ("Type", "Notice Type")) or "Federal Contract",
        open_date=first_date(row, ("Posted Date", "Original Published Date")),
        close_date=close_date,
        is_continuous=is_continuous,
        naics_codes=as_list(first_value(row, ("NAICS Code", "NAICS"))),
        set_asides=[set_aside] if set_aside else [],
        estimated_value=first_value(row, ("Award Amount", "Estimated Value")),
        contact_name=first_value(row, ("Primary Contact", "Contact Name")),
        contact_email=first_value(row, ("Contact Email", "Primary Email")),
        contact_phone=first_value(row, ("Contact Phone", "Primary Phone")),
        state=first_value(row, ("State",)),
        is_active=True,
    )
