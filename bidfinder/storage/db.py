"""
Lightweight SQLite database wrapper for the opportunity catalog.

Handles:
- Database initialization
- Schema creation
- Connection and transaction management

Designed to be easily swappable with Postgres later; the store only relies
on INSERT ... ON CONFLICT and plain UPDATEs.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
import logging


logger = logging.getLogger(__name__)


class Database:
    """
    SQLite database wrapper for the opportunities catalog.

    Usage:
        db = Database("opportunities.db")
        with db.get_connection() as conn:
            conn.execute("SELECT * FROM opportunities")
    """

    def __init__(self, path: str = "opportunities.db"):
        """
        Initialize database.

        Args:
            path: Path to SQLite database file
        """
        self.path = path

        # Ensure parent directory exists
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        # Initialize schema
        self._init_db()

        logger.info(f"Database initialized: {self.path}")

    def _init_db(self):
        """Create database schema if it doesn't exist."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS opportunities (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    source TEXT NOT NULL,
                    source_id TEXT,
                    source_url TEXT,
                    title TEXT NOT NULL,
                    description TEXT,
                    agency TEXT,
                    bid_type TEXT,
                    open_date TEXT,
                    close_date TEXT,
                    is_continuous INTEGER NOT NULL DEFAULT 0,
                    commodity_code TEXT,
                    commodity_description TEXT,
                    naics_codes_json TEXT,
                    set_asides_json TEXT,
                    estimated_value TEXT,
                    contact_name TEXT,
                    contact_phone TEXT,
                    contact_email TEXT,
                    state TEXT,
                    county TEXT,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (source, source_id)
                );
                """
            )

            # Create index on source for filtering and deactivation
            cursor.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_opportunities_source_active
                ON opportunities(source, is_active);
                """
            )

            # Create index on close_date for deadline ordering
            cursor.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_opportunities_close_date
                ON opportunities(close_date);
                """
            )

            logger.debug("Database schema created/verified")

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """
        Get a database connection context manager.

        Everything executed on the connection is one transaction: committed
        on success, rolled back if the block raises.

        Yields:
            sqlite3.Connection
        """
        conn = sqlite3.connect(self.path, timeout=30.0)
        conn.row_factory = sqlite3.Row  # Enable column access by name

        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            conn.close()
