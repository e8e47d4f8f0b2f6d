"""
Helpers shared by the per-source row mappers.

Column names drift between releases of the same portal's export, so every
field is read through an ordered list of aliases.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from bidfinder.core.domain_models import RawRow
from bidfinder.core.time_utils import is_continuous_marker, normalize_date
from bidfinder.core.utils import strip_spreadsheet_escape, to_str


def first_value(row: RawRow, aliases: Iterable[str]) -> Optional[str]:
    """
    Value of the first alias that is present and non-empty.

    Args:
        row: Parsed export row
        aliases: Candidate column names, most preferred first

    Returns:
        Trimmed cell text or None
    """
    for alias in aliases:
        value = to_str(row.get(alias))
        if value:
            return value
    return None


def first_date(row: RawRow, aliases: Iterable[str]) -> Optional[datetime]:
    return normalize_date(first_value(row, aliases))


def close_date_and_continuous(
    row: RawRow,
    aliases: Iterable[str]
) -> Tuple[Optional[datetime], bool]:
    """
    Read a deadline column that may say "Continuous".

    Returns:
        (close_date, is_continuous); a continuous listing has no close date
    """
    raw = first_value(row, aliases)
    if raw and is_continuous_marker(raw):
        return None, True
    return normalize_date(raw), False


def first_code(row: RawRow, aliases: Iterable[str]) -> Optional[str]:
    """Code cell with spreadsheet escaping (="...") removed."""
    return strip_spreadsheet_escape(first_value(row, aliases))


def as_list(value: Optional[str]) -> List[str]:
    """
    Split a multi-valued cell ("541511; 541512") into unique entries.
    """
    if not value:
        return []
    items: List[str] = []
    for part in value.replace(";", ",").replace("|", ",").split(","):
        part = strip_spreadsheet_escape(part)
        if part and part not in items:
            items.append(part)
    return items
