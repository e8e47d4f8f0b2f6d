"""
Turn web-search output into candidate opportunities.

Two separate paths:
- structured "web result" items (title, url, snippet), kept only when the
  title looks like a solicitation;
- prose blocks, scanned best-effort for an embedded JSON array of
  opportunities. A block without one (or with broken JSON) yields nothing.
"""

import json
import logging
import re
import uuid
from typing import Any, Dict, Iterable, List, Optional

from bidfinder.core.domain_models import SearchResult
from bidfinder.core.time_utils import is_expired, normalize_date, now_utc
from bidfinder.core.utils import to_str

logger = logging.getLogger(__name__)

SOLICITATION_KEYWORDS = ("rfp", "grant", "contract", "solicitation", "bid", "funding")

NOT_SPECIFIED = "Not specified"

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_decoder = json.JSONDecoder()


def ephemeral_id() -> str:
    """Identifier for a web candidate, unique within a response."""
    return f"web-{uuid.uuid4().hex[:12]}"


def looks_like_solicitation(title: Optional[str]) -> bool:
    lowered = (title or "").lower()
    return any(kw in lowered for kw in SOLICITATION_KEYWORDS)


def extract_json_candidates(text: str) -> Optional[List[Dict[str, Any]]]:
    """
    Find a JSON array of opportunities inside free text.

    Markdown code fences are ignored. Elements that are not objects or have
    an empty title are skipped.

    Args:
        text: Prose returned by the search model

    Returns:
        List of raw candidate dicts, or None when no well-formed array exists
    """
    if not text:
        return None

    cleaned = _FENCE_RE.sub("", text).strip()
    parsed = _first_object_array(cleaned)
    if parsed is None:
        logger.debug("No well-formed JSON array in block, ignoring it")
        return None

    return [
        item for item in parsed
        if isinstance(item, dict) and to_str(item.get("title"))
    ]


def _first_object_array(text: str) -> Optional[List[Any]]:
    """
    First JSON array in the text that holds at least one object.

    Bracketed prose such as markdown links "[sam.gov](...)" or footnote
    markers "[1]" is stepped over.
    """
    idx = text.find("[")
    while idx != -1:
        try:
            value, end = _decoder.raw_decode(text, idx)
        except ValueError:
            idx = text.find("[", idx + 1)
            continue
        if isinstance(value, list) and any(isinstance(item, dict) for item in value):
            return value
        idx = text.find("[", end)
    return None


def candidates_from_structured(items: Iterable[Dict[str, Any]]) -> List[SearchResult]:
    """Accept structured web results whose title names a solicitation."""
    results = []
    for item in items:
        title = to_str(item.get("title"))
        if not title or not looks_like_solicitation(title):
            continue
        results.append(SearchResult(
            id=ephemeral_id(),
            title=title,
            from_database=False,
            agency=None,
            description=to_str(item.get("snippet")),
            estimated_value=NOT_SPECIFIED,
            source="Web Search",
            source_url=to_str(item.get("url")),
            level="unknown",
            found_at=now_utc(),
        ))
    return results


def candidates_from_text(blocks: Iterable[str]) -> List[SearchResult]:
    """Best-effort extraction from prose; blocks without JSON contribute nothing."""
    results = []
    for block in blocks:
        extracted = extract_json_candidates(block)
        if not extracted:
            continue
        results.extend(candidate_from_dict(item) for item in extracted)
    return results


def candidate_from_dict(item: Dict[str, Any]) -> SearchResult:
    """
    Build a web candidate from one model-reported JSON object.

    Missing due dates stay None and missing values read "Not specified".
    """
    value = to_str(item.get("estimatedValue"))
    return SearchResult(
        id=ephemeral_id(),
        title=to_str(item.get("title")) or "",
        from_database=False,
        agency=to_str(item.get("agency")) or "Unknown Agency",
        description=to_str(item.get("description")) or "",
        due_date=normalize_date(to_str(item.get("dueDate"))),
        estimated_value=value or NOT_SPECIFIED,
        source=to_str(item.get("source")) or "Web Search",
        source_url=to_str(item.get("sourceUrl")) or "",
        rfp_number=to_str(item.get("rfpNumber")),
        level=to_str(item.get("level")) or "unknown",
        found_at=now_utc(),
    )


def dedupe_candidates(candidates: Iterable[SearchResult], drop_expired: bool = True) -> List[SearchResult]:
    """
    Drop repeated and expired web candidates.

    Two candidates are the same listing when the first 50 characters of the
    title and the agency match, case-insensitively.
    """
    seen = set()
    unique = []
    now = now_utc()
    for candidate in candidates:
        key = dedupe_key(candidate)
        if key in seen:
            continue
        seen.add(key)
        if drop_expired and is_expired(candidate.due_date, now):
            logger.debug(f"Skipping expired web candidate: {candidate.title!r}")
            continue
        unique.append(candidate)
    return unique


def dedupe_key(candidate: SearchResult) -> tuple:
    return ((candidate.title or "").lower()[:50], (candidate.agency or "").lower())
