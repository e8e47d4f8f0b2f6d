#!/usr/bin/env python3
"""
Import a portal CSV export into the opportunity catalog.

Usage:
    python run_import.py --source la_county --file data/la_county_bids.csv
    python run_import.py --source sam_gov --file sam.csv --db data/opportunities.db
"""

import argparse
import logging
import sys
from pathlib import Path

from bidfinder.core.errors import ImportFailedError, InputContractError
from bidfinder.core.settings import get_settings
from bidfinder.ingest.catalog_importer import CatalogImporter
from bidfinder.storage.opportunity_store import OpportunityStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Import a portal export into the catalog")
    parser.add_argument("--source", required=True, help="Source identifier, e.g. la_county, sam_gov")
    parser.add_argument("--file", required=True, help="Path to the CSV export")
    parser.add_argument("--db", default=None, help="SQLite catalog path (default: BIDFINDER_DB_PATH)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    path = Path(args.file)
    if not path.exists():
        logger.error(f"File not found: {path}")
        return 1

    payload = path.read_text(encoding="utf-8-sig", errors="replace")
    store = OpportunityStore(args.db or get_settings().db_path)
    importer = CatalogImporter(store)

    print("=" * 70)
    print(f"IMPORTING {args.source.upper()} FROM {path.name}")
    print("=" * 70)

    try:
        result = importer.import_payload(args.source, payload)
    except InputContractError as e:
        logger.error(f"Rejected: {e}")
        return 1
    except ImportFailedError as e:
        logger.error(str(e))
        return 2

    print(f"✅ Imported:    {result.imported}")
    print(f"💤 Deactivated: {result.deactivated}")
    print(f"⏭️  Skipped:     {result.skipped}")
    print(f"📊 Active {result.source} opportunities: {store.count_active(result.source)}")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
