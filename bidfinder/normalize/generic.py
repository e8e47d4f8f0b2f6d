"""
Fallback mapper for sources without a dedicated format.

Tries the column names most portals use; agency defaults to the source
identifier itself.
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

TITLE_COLUMNS = ("Title", "Bid Title", "Opportunity Title", "Solicitation Title", "Name")


def map_generic(row: RawRow, source: str) -> Optional[Opportunity]:
    title = first_value(row, TITLE_COLUMNS)
    if not title:
        return None

    close_date, is_continuous = close_date_and_continuous(
        row, ("Close Date", "Closing Date", "Deadline", "Due Date", "End Date")
    )

    return Opportunity(
        source=source,
        source_id=first_code(row, ("ID", "Number", "Bid Number", "Solicitation Number")),
        source_url=first_value(row, ("URL", "Link", "Bid URL")),
        title=title,
        description=first_value(row, ("Description", "Summary")),
        agency=first_value(row, ("Agency", "Department", "Organization")) or source,
        bid_type=first_value(row, ("Type", "Category")),
        open_date=first_date(row, ("Posted Date", "Open Date", "Start Date")),
        close_date=close_date,
        is_continuous=is_continuous,
        commodity_code=first_code(row, ("Commodity Code",)),
        commodity_description=first_value(row, ("Commodity Description",)),
        naics_codes=as_list(first_value(row, ("NAICS Code", "NAICS"))),
        estimated_value=first_value(row, ("Estimated Value", "Value")),
        contact_name=first_value(row, ("Contact", "Contact Name")),
        contact_email=first_value(row, ("Email", "Contact Email")),
        contact_phone=first_value(row, ("Phone", "Contact Phone")),
        state=first_value(row, ("State",)),
        county=first_value(row, ("County",)),
        is_active=True,
    )
