"""
Mapper for Grants.gov search exports (federal grants).
"""

from typing import Optional

from bidfinder.core.domain_models import Opportunity, RawRow
from bidfinder.normalize.common import (
    close_date_and_continuous,
    first_code,
    first_date,
    first_value,
)

SOURCE = "grants_gov"

DETAIL_URL = "https://www.grants.gov/search-results-detail/{number}"


def map_grants_gov(row: RawRow, source: str = SOURCE) -> Optional[Opportunity]:
    """
    Convert one Grants.gov row to an Opportunity.

    Federal grants are nationwide, so no state is set. When the export has
    no URL column the public detail page is derived from the opportunity
    number.
    """
    title = first_value(row, ("Opportunity Title", "Title"))
    if not title:
        return None

    number = first_code(row, ("Opportunity Number", "Funding Opportunity Number"))
    url = first_value(row, ("URL", "Link"))
    if not url and number:
        url = DETAIL_URL.format(number=number)

    close_date, is_continuous = close_date_and_continuous(row, ("Close Date", "Deadline"))

    return Opportunity(
        source=source,
        source_id=number,
        source_url=url,
        title=title,
        description=first_value(row, ("Description", "Synopsis")),
        agency=first_value(row, ("Agency Name", "Agency")) or "Federal",
        bid_type="Grant",
        open_date=first_date(row, ("Posted Date", "Open Date")),
        close_date=close_date,
        is_continuous=is_continuous,
        estimated_value=first_value(
            row, ("Award Ceiling", "Estimated Total Program Funding")
        ),
        contact_name=first_value(row, ("Contact Name",)),
        contact_email=first_value(row, ("Contact Email",)),
        state=None,
        is_active=True,
    )
