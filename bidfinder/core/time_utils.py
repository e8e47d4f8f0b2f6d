"""
Date normalization for government export data.

Exports mix US (M/D/YYYY) and ISO conventions, with or without a time and
with free-text markers such as "Continuous". Everything is normalized to a
timezone-aware UTC datetime, or None when the value carries no usable date.
A bad value degrades to "unknown deadline"; it never raises and never guesses.
"""

import logging
import re
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional
import zoneinfo

from dateutil.parser import isoparser
from dateutil import parser as dateparser

from bidfinder.core.settings import get_settings

logger = logging.getLogger(__name__)

# Values meaning "no deadline" rather than "deadline unknown"
CONTINUOUS_MARKERS = frozenset({"continuous", "ongoing", "open until filled"})

# Values that carry no date at all
_SENTINELS = frozenset({"", "n/a", "na", "tbd", "none", "null"}) | CONTINUOUS_MARKERS

_MDY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(.*)$")
_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)?", re.IGNORECASE)
_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")

# Implied time of day for date-only US values
DEFAULT_HOUR = 12

_iso = isoparser()


def source_timezone() -> tzinfo:
    """
    Timezone used to read naive wall-clock values from exports.

    Configured with BIDFINDER_SOURCE_TZ; unknown names fall back to UTC.
    """
    name = get_settings().source_timezone or "UTC"
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown source timezone {name!r}, using UTC")
        return timezone.utc


def now_utc() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def is_continuous_marker(value: Any) -> bool:
    """True when a close-date cell says the opportunity has no deadline."""
    if not isinstance(value, str):
        return False
    return _strip_quotes(value).lower() in CONTINUOUS_MARKERS


def normalize_date(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Normalize a free-text date expression to an aware UTC datetime.

    Priority:
        1. sentinels ("Continuous", "N/A", empty, ...) -> None
        2. M/D/YYYY[ H:MM[ AM|PM]], 12:00 when the time is omitted
        3. YYYY-MM-DD[...] ISO values
        4. best-effort generic parsing, only when a 4-digit year is present

    Naive values are read in ``tz`` (default: the configured source
    timezone). Already-normalized input comes back unchanged.

    Args:
        value: Raw cell value (str, datetime or None)
        tz: Timezone for naive wall-clock values

    Returns:
        Aware UTC datetime, or None if no date can be read

    Examples:
        >>> normalize_date("12/31/2025 5:00 PM")
        datetime.datetime(2025, 12, 31, 17, 0, tzinfo=datetime.timezone.utc)
        >>> normalize_date("Continuous") is None
        True
    """
    if value is None:
        return None

    zone = tz or source_timezone()

    if isinstance(value, datetime):
        return _to_utc(value, zone)

    text = _strip_quotes(str(value))
    if text.lower() in _SENTINELS:
        return None

    match = _MDY_RE.match(text)
    if match:
        return _parse_mdy(match, zone)

    if _ISO_RE.match(text):
        try:
            return _to_utc(_iso.isoparse(text), zone)
        except (ValueError, OverflowError):
            logger.debug(f"ISO-looking date not parseable, trying generic: {text!r}")

    if not _YEAR_RE.search(text):
        return None

    try:
        return _to_utc(dateparser.parse(text), zone)
    except (ValueError, OverflowError, TypeError):
        logger.debug(f"Unparseable date: {text!r}")
        return None


def is_expired(close_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Whether a deadline has passed.

    A missing deadline (continuous or unknown) is never expired.
    """
    if close_date is None:
        return False
    return close_date < (now or now_utc())


def _parse_mdy(match: re.Match, zone: tzinfo) -> Optional[datetime]:
    month, day, year, rest = match.groups()
    hours, minutes = DEFAULT_HOUR, 0

    time_match = _TIME_RE.search(rest or "")
    if time_match:
        hours = int(time_match.group(1))
        minutes = int(time_match.group(2))
        meridiem = (time_match.group(3) or "").upper()
        if meridiem == "PM" and hours < 12:
            hours += 12
        elif meridiem == "AM" and hours == 12:
            hours = 0

    try:
        local = datetime(int(year), int(month), int(day), hours, minutes, tzinfo=zone)
    except ValueError:
        # e.g. 13/45/2025 or 25:00
        logger.debug(f"Out-of-range M/D/YYYY date: {match.group(0)!r}")
        return None
    return _to_utc(local, zone)


def _to_utc(value: datetime, zone: tzinfo) -> Optional[datetime]:
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    try:
        return value.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        # 12/31/9999 placeholders shifted past datetime.max
        logger.debug(f"Date out of range after UTC conversion: {value!r}")
        return None


def _strip_quotes(text: str) -> str:
    return text.replace('"', "").replace("'", "").strip()
