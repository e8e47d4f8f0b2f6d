"""
Shared utility functions for hashing and cell-text cleanup.
"""

import hashlib
import re
from typing import Any, Optional


_SPREADSHEET_ESCAPE_RE = re.compile(r'^=?"(.*)"$')


def sha1_text(text: str) -> str:
    """
    Generate SHA1 hash of text content.

    Used for content-derived identity of records without a native ID.

    Args:
        text: Text to hash

    Returns:
        Full 40-character SHA1 hex digest

    Examples:
        >>> sha1_text("Hello world")
        '7b502c3a1f48c8609ae212cdfb639dee39673f5e'
    """
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def content_key(*parts: Optional[str]) -> str:
    """
    Stable identifier built from record content.

    Parts are lowercased and whitespace-collapsed so trivial formatting
    differences between exports do not produce a new key.

    Examples:
        >>> content_key("Road Repair", "Public Works") == content_key("road  repair", "PUBLIC WORKS")
        True
    """
    joined = "|".join(clean_text(p or "").lower() for p in parts)
    return f"sha1:{sha1_text(joined)}"


def clean_text(text: str) -> str:
    """
    Collapse runs of whitespace to a single space and trim.

    Args:
        text: Raw text

    Returns:
        Cleaned text
    """
    return re.sub(r"\s+", " ", text).strip()


def strip_spreadsheet_escape(value: Optional[str]) -> Optional[str]:
    """
    Remove Excel text-forcing artifacts from a code cell.

    Exports write codes as ="00123" so leading zeros survive a spreadsheet.

    Examples:
        >>> strip_spreadsheet_escape('="624190"')
        '624190'
        >>> strip_spreadsheet_escape('624190')
        '624190'
    """
    if value is None:
        return None
    text = value.strip()
    match = _SPREADSHEET_ESCAPE_RE.match(text)
    if match:
        text = match.group(1)
    text = text.replace('="', "").replace('"', "").strip()
    return text or None


def to_str(value: Any) -> Optional[str]:
    """Trimmed string or None for empty/missing values."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    return str(value).strip() or None
