"""
Mapper for California state procurement (Cal eProcure) exports.
"""

from typing import Optional

from bidfinder.core.domain_models import Opportunity, RawRow
from bidfinder.normalize.common import (
    close_date_and_continuous,
    first_code,
    first_date,
    first_value,
)

SOURCE = "california"


def map_california(row: RawRow, source: str = SOURCE) -> Optional[Opportunity]:
    title = first_value(row, ("Title", "Bid Title", "Solicitation Title"))
    if not title:
        return None

    close_date, is_continuous = close_date_and_continuous(
        row, ("Close Date", "Deadline", "Due Date")
    )

    return Opportunity(
        source=source,
        source_id=first_code(row, ("Solicitation Number", "Bid Number", "ID")),
        source_url=first_value(row, ("URL", "Link")),
        title=title,
        description=first_value(row, ("Description",)),
        agency=first_value(row, ("Agency", "Department")) or "California State",
        bid_type=first_value(row, ("Type", "Bid Type")) or "State Contract",
        open_date=first_date(row, ("Posted Date", "Open Date")),
        close_date=close_date,
        is_continuous=is_continuous,
        commodity_code=first_code(row, ("UNSPSC", "Commodity Code")),
        commodity_description=first_value(row, ("Commodity Description",)),
        contact_name=first_value(row, ("Contact", "Contact Name")),
        contact_email=first_value(row, ("Email", "Contact Email")),
        contact_phone=first_value(row, ("Phone", "Contact Phone")),
        state="CA",
        is_active=True,
    )
