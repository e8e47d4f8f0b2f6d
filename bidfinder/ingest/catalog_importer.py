"""
Catalog importer: portal export -> canonical catalog.

A source's latest export is treated as its authoritative list of open
opportunities. Rows are parsed, mapped, upserted by (source, source_id), and
every previously-imported record of that source missing from the new export
is deactivated. Both steps run in one transaction, so a failed upsert never
leads to a deactivation.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from bidfinder.core.domain_models import ImportResult, Opportunity
from bidfinder.core.errors import ImportFailedError, InputContractError
from bidfinder.core.settings import get_settings
from bidfinder.core.utils import content_key
from bidfinder.ingest.tabular import parse_rows
from bidfinder.normalize.registry import map_row
from bidfinder.storage.opportunity_store import OpportunityStore

logger = logging.getLogger(__name__)


_locks_guard = threading.Lock()
_source_locks: Dict[str, threading.Lock] = {}


def _lock_for(source: str) -> threading.Lock:
    """One lock per source: same-source imports serialize, others don't."""
    with _locks_guard:
        lock = _source_locks.get(source)
        if lock is None:
            lock = _source_locks[source] = threading.Lock()
        return lock


class CatalogImporter:
    """
    Imports delimited portal exports into an OpportunityStore.

    Usage:
        importer = CatalogImporter(store)
        result = importer.import_payload("la_county", csv_text)
    """

    def __init__(self, store: OpportunityStore, hash_missing_ids: Optional[bool] = None):
        """
        Args:
            store: Catalog to write into
            hash_missing_ids: Give rows without a native id a content-hash
                id so they deduplicate and can be deactivated. Defaults to
                BIDFINDER_HASH_MISSING_IDS.
        """
        self.store = store
        if hash_missing_ids is None:
            hash_missing_ids = get_settings().hash_missing_ids
        self.hash_missing_ids = hash_missing_ids

    def map_payload(self, source: str, payload: str) -> Tuple[List[Opportunity], int, int]:
        """
        Parse and map a payload without touching the store.

        Returns:
            (opportunities, rows_parsed, rows_skipped)
        """
        opportunities: List[Opportunity] = []
        parsed = 0
        for row in parse_rows(payload):
            parsed += 1
            opp = map_row(row, source)
            if opp is None:
                continue
            opportunities.append(opp)
        return opportunities, parsed, parsed - len(opportunities)

    def import_payload(self, source: str, payload: str) -> ImportResult:
        """
        Import one export for a source.

        Args:
            source: Source identifier (e.g. "la_county", "sam_gov")
            payload: Raw delimited export text

        Returns:
            ImportResult with counts

        Raises:
            InputContractError: source or payload missing, or nothing importable
            ImportFailedError: the store rejected the import; nothing applied
        """
        source = (source or "").strip()
        if not source:
            raise InputContractError("Missing source")
        if not payload or not payload.strip():
            raise InputContractError("Missing payload")

        opportunities, parsed, skipped = self.map_payload(source, payload)
        if parsed == 0:
            raise InputContractError("No data rows found in payload")
        if not opportunities:
            raise InputContractError(f"No importable rows ({skipped} rows had no title)")

        opportunities = self._assign_identities(source, opportunities)
        keep_ids = {opp.source_id for opp in opportunities if opp.source_id}

        logger.info(f"Importing {len(opportunities)} opportunities from {source}")

        with _lock_for(source):
            try:
                with self.store.transaction() as conn:
                    imported = self.store.upsert(opportunities, conn=conn)
                    deactivated = self.store.deactivate_missing(source, keep_ids, conn=conn)
            except Exception as e:
                logger.error(f"Import of {source} failed: {e}")
                raise ImportFailedError(source, "catalog write failed") from e

        logger.info(
            f"Imported {imported} {source} opportunities "
            f"({deactivated} deactivated, {skipped} rows skipped)"
        )
        return ImportResult(
            source=source,
            imported=imported,
            deactivated=deactivated,
            skipped=skipped,
        )

    def _assign_identities(self, source: str, opportunities: List[Opportunity]) -> List[Opportunity]:
        """
        Resolve rows without a native id and collapse in-payload duplicates.

        Without hashing, id-less rows are appended as-is on every import and
        never deactivated; that accumulation is logged.
        """
        missing = 0
        by_key: Dict[str, Opportunity] = {}
        unkeyed: List[Opportunity] = []

        for opp in opportunities:
            if not opp.source_id:
                missing += 1
                if not self.hash_missing_ids:
                    unkeyed.append(opp)
                    continue
                opp.source_id = content_key(
                    opp.title,
                    opp.agency,
                    opp.close_date.isoformat() if opp.close_date else "",
                )
            # last row wins
            by_key[opp.source_id] = opp

        if missing and not self.hash_missing_ids:
            logger.warning(
                f"{missing} {source} rows have no source id; they are appended "
                f"on every import and never deactivated"
            )
        elif missing:
            logger.info(f"Assigned content-hash ids to {missing} {source} rows")

        return list(by_key.values()) + unkeyed
