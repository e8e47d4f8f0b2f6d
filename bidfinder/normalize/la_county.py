"""
Mapper for the LA County bid-system export (county bids).
"""

from typing import Optional

from bidfinder.core.domain_models import Opportunity, RawRow
from bidfinder.normalize.common import (
    close_date_and_continuous,
    first_code,
    first_date,
    first_value,
)

SOURCE = "la_county"


def map_la_county(row: RawRow, source: str = SOURCE) -> Optional[Opportunity]:
    """
    Convert one LA County bid row to an Opportunity.

    "Closing Date" may read "Continuous" for open-ended solicitations.
    Commodity codes arrive spreadsheet-escaped (="...").

    Returns:
        Opportunity, or None when the row has no "Bid Title"
    """
    title = first_value(row, ("Bid Title",))
    if not title:
        return None

    close_date, is_continuous = close_date_and_continuous(row, ("Closing Date",))

    return Opportunity(
        source=source,
        source_id=first_code(row, ("Bid Number",)),
        source_url=first_value(row, ("Bid URL",)),
        title=title,
        description=first_value(row, ("Bid Description",)),
        agency=first_value(row, ("Department",)) or "LA County",
        bid_type=first_value(row, ("Bid Type",)),
        open_date=first_date(row, ("Open Date",)),
        close_date=close_date,
        is_continuous=is_continuous,
        commodity_code=first_code(row, ("Commodity Code",)),
        commodity_description=first_value(row, ("Commodity Description",)),
        contact_name=first_value(row, ("Contact Name",)),
        contact_phone=first_value(row, ("Contact Phone",)),
        contact_email=first_value(row, ("Contact Email",)),
        state="CA",
        county="Los Angeles",
        is_active=True,
    )
