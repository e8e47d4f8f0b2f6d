"""
Storage layer for Opportunity records.

Handles:
- Upserting imported records keyed by (source, source_id)
- Soft-deactivating records that dropped out of a source's latest export
- Catalog lookups for search (source filter, text match, deadline order)
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from bidfinder.core.domain_models import Opportunity
from bidfinder.core.errors import UpstreamUnavailableError
from .db import Database


logger = logging.getLogger(__name__)

# Columns a caller may filter or patch through update()
_UPDATABLE_COLUMNS = frozenset({
    "source", "source_id", "is_active", "title", "agency", "bid_type",
    "state", "county", "estimated_value", "source_url",
})

# Substring search covers these columns
_TEXT_COLUMNS = ("title", "description", "agency", "commodity_code", "commodity_description")


class OpportunityStore:
    """
    Persistent catalog of Opportunity records.

    Usage:
        store = OpportunityStore("opportunities.db")
        with store.transaction() as conn:
            store.upsert(records, conn=conn)
            store.deactivate_missing("la_county", keep_ids, conn=conn)
        rows = store.query(sources=["la_county"], text="mental health")
    """

    def __init__(self, db_path: str = "opportunities.db"):
        """
        Initialize opportunity store.

        Args:
            db_path: Path to SQLite database
        """
        self.db = Database(db_path)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """One atomic unit of work; rolled back if the block raises."""
        with self.db.get_connection() as conn:
            yield conn

    @contextmanager
    def _connection(self, conn: Optional[sqlite3.Connection]) -> Iterator[sqlite3.Connection]:
        if conn is not None:
            yield conn
        else:
            with self.db.get_connection() as own:
                yield own

    def upsert(
        self,
        records: Sequence[Opportunity],
        conn: Optional[sqlite3.Connection] = None
    ) -> int:
        """
        Insert or update records.

        Conflicts on (source, source_id) overwrite every field: the new
        import is authoritative. Records without a source_id never conflict
        and are always inserted.

        Args:
            records: Mapped opportunities
            conn: Connection of an enclosing transaction, if any

        Returns:
            Number of records written
        """
        if not records:
            return 0

        with self._connection(conn) as c:
            c.executemany(
                """
                INSERT INTO opportunities (
                    source, source_id, source_url, title, description, agency,
                    bid_type, open_date, close_date, is_continuous,
                    commodity_code, commodity_description, naics_codes_json,
                    set_asides_json, estimated_value, contact_name, contact_phone,
                    contact_email, state, county, is_active,
                    created_at, updated_at
                )
                VALUES (
                    :source, :source_id, :source_url, :title, :description, :agency,
                    :bid_type, :open_date, :close_date, :is_continuous,
                    :commodity_code, :commodity_description, :naics_codes_json,
                    :set_asides_json, :estimated_value, :contact_name, :contact_phone,
                    :contact_email, :state, :county, :is_active,
                    CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
                )
                ON CONFLICT(source, source_id) DO UPDATE SET
                    source_url=excluded.source_url,
                    title=excluded.title,
                    description=excluded.description,
                    agency=excluded.agency,
                    bid_type=excluded.bid_type,
                    open_date=excluded.open_date,
                    close_date=excluded.close_date,
                    is_continuous=excluded.is_continuous,
                    commodity_code=excluded.commodity_code,
                    commodity_description=excluded.commodity_description,
                    naics_codes_json=excluded.naics_codes_json,
                    set_asides_json=excluded.set_asides_json,
                    estimated_value=excluded.estimated_value,
                    contact_name=excluded.contact_name,
                    contact_phone=excluded.contact_phone,
                    contact_email=excluded.contact_email,
                    state=excluded.state,
                    county=excluded.county,
                    is_active=excluded.is_active,
                    updated_at=CURRENT_TIMESTAMP;
                """,
                [self._to_params(record) for record in records],
            )

        logger.debug(f"Upserted {len(records)} opportunities")
        return len(records)

    def update(
        self,
        filters: Dict[str, Any],
        patch: Dict[str, Any],
        exclude_source_ids: Optional[Iterable[str]] = None,
        conn: Optional[sqlite3.Connection] = None
    ) -> int:
        """
        Patch every record matching ``filters``.

        Args:
            filters: Column -> required value (equality)
            patch: Column -> new value
            exclude_source_ids: Skip records whose source_id is in this set;
                records with a NULL source_id are skipped too
            conn: Connection of an enclosing transaction, if any

        Returns:
            Number of rows changed
        """
        unknown = (set(filters) | set(patch)) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported columns: {sorted(unknown)}")
        if not patch:
            return 0

        assignments = ", ".join(f"{col} = :set_{col}" for col in patch)
        params: Dict[str, Any] = {f"set_{col}": _to_db(val) for col, val in patch.items()}

        clauses = []
        for col, val in filters.items():
            clauses.append(f"{col} = :where_{col}")
            params[f"where_{col}"] = _to_db(val)

        if exclude_source_ids is not None:
            clauses.append(
                "source_id IS NOT NULL AND source_id NOT IN (SELECT value FROM json_each(:keep))"
            )
            params["keep"] = json.dumps(sorted(set(exclude_source_ids)))

        where = " AND ".join(clauses) if clauses else "1 = 1"

        with self._connection(conn) as c:
            cursor = c.execute(
                f"UPDATE opportunities SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE {where}",
                params,
            )
            return cursor.rowcount

    def deactivate_missing(
        self,
        source: str,
        keep_ids: Iterable[str],
        conn: Optional[sqlite3.Connection] = None
    ) -> int:
        """
        Mark a source's active records inactive unless their id is kept.

        Records are never deleted; inactive rows stay for audit.

        Returns:
            Number of records deactivated
        """
        count = self.update(
            {"source": source, "is_active": True},
            {"is_active": False},
            exclude_source_ids=keep_ids,
            conn=conn,
        )
        if count:
            logger.info(f"Deactivated {count} {source} opportunities no longer listed")
        return count

    def query(
        self,
        sources: Optional[Sequence[str]] = None,
        text: Optional[str] = None,
        limit: int = 20,
        active_only: bool = True
    ) -> List[Opportunity]:
        """
        Catalog lookup for search.

        Ordered by close date ascending; listings without a date come last,
        continuous ones before those with an unknown deadline.

        Args:
            sources: Restrict to these source identifiers (None = any)
            text: Case-insensitive substring over title, description,
                agency and commodity fields
            limit: Maximum number of rows
            active_only: Skip deactivated records

        Returns:
            List of Opportunity objects

        Raises:
            UpstreamUnavailableError: the database could not be read
        """
        sql = "SELECT * FROM opportunities WHERE 1 = 1"
        params: List[Any] = []

        if active_only:
            sql += " AND is_active = 1"

        if sources is not None:
            sources = list(sources)
            if not sources:
                return []
            sql += f" AND source IN ({', '.join('?' for _ in sources)})"
            params.extend(sources)

        needle = (text or "").strip().lower()
        if needle:
            pattern = "%" + _escape_like(needle) + "%"
            sql += " AND (" + " OR ".join(
                f"lower(coalesce({col}, '')) LIKE ? ESCAPE '\\'" for col in _TEXT_COLUMNS
            ) + ")"
            params.extend([pattern] * len(_TEXT_COLUMNS))

        sql += """
            ORDER BY
                CASE WHEN close_date IS NOT NULL THEN 0
                     WHEN is_continuous = 1 THEN 1
                     ELSE 2 END,
                close_date ASC,
                id ASC
            LIMIT ?
        """
        params.append(max(0, int(limit)))

        try:
            with self.db.get_connection() as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise UpstreamUnavailableError("Opportunity catalog unavailable") from e

        return [self._row_to_opportunity(row) for row in rows]

    def get(self, source: str, source_id: str) -> Optional[Opportunity]:
        """
        Retrieve one record by identity.

        Returns:
            Opportunity or None if not found
        """
        with self.db.get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM opportunities WHERE source = ? AND source_id = ? LIMIT 1",
                (source, source_id),
            ).fetchone()
        return self._row_to_opportunity(row) if row else None

    def list_by_source(self, source: str, active_only: bool = False) -> List[Opportunity]:
        sql = "SELECT * FROM opportunities WHERE source = ?"
        if active_only:
            sql += " AND is_active = 1"
        with self.db.get_connection() as conn:
            rows = conn.execute(sql + " ORDER BY id", (source,)).fetchall()
        return [self._row_to_opportunity(row) for row in rows]

    def count_active(self, source: str) -> int:
        with self.db.get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM opportunities WHERE source = ? AND is_active = 1",
                (source,),
            ).fetchone()
        return int(row[0])

    def _to_params(self, opp: Opportunity) -> Dict[str, Any]:
        return {
            "source": opp.source,
            "source_id": opp.source_id,
            "source_url": opp.source_url,
            "title": opp.title,
            "description": opp.description,
            "agency": opp.agency,
            "bid_type": opp.bid_type,
            "open_date": _to_db(opp.open_date),
            "close_date": None if opp.is_continuous else _to_db(opp.close_date),
            "is_continuous": 1 if opp.is_continuous else 0,
            "commodity_code": opp.commodity_code,
            "commodity_description": opp.commodity_description,
            "naics_codes_json": json.dumps(list(opp.naics_codes or [])),
            "set_asides_json": json.dumps(list(opp.set_asides or [])),
            "estimated_value": opp.estimated_value,
            "contact_name": opp.contact_name,
            "contact_phone": opp.contact_phone,
            "contact_email": opp.contact_email,
            "state": opp.state,
            "county": opp.county,
            "is_active": 1 if opp.is_active else 0,
        }

    def _row_to_opportunity(self, row) -> Opportunity:
        """
        Convert database row to Opportunity object.

        Args:
            row: SQLite row

        Returns:
            Opportunity object
        """
        return Opportunity(
            id=row["id"],
            source=row["source"],
            source_id=row["source_id"],
            source_url=row["source_url"],
            title=row["title"],
            description=row["description"],
            agency=row["agency"],
            bid_type=row["bid_type"],
            open_date=_parse_datetime(row["open_date"]),
            close_date=_parse_datetime(row["close_date"]),
            is_continuous=bool(row["is_continuous"]),
            commodity_code=row["commodity_code"],
            commodity_description=row["commodity_description"],
            naics_codes=json.loads(row["naics_codes_json"] or "[]"),
            set_asides=json.loads(row["set_asides_json"] or "[]"),
            estimated_value=row["estimated_value"],
            contact_name=row["contact_name"],
            contact_phone=row["contact_phone"],
            contact_email=row["contact_email"],
            state=row["state"],
            county=row["county"],
            is_active=bool(row["is_active"]),
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )


def _to_db(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if isinstance(value, bool):
        return 1 if value else 0
    return value


def _parse_datetime(s: Optional[str]) -> Optional[datetime]:
    if not s:
        return None
    value = datetime.fromisoformat(s)
    # CURRENT_TIMESTAMP values are naive UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
