#!/usr/bin/env python3
"""
Run one opportunity search from the command line.

Usage:
    python run_search.py "mental health" --naics 624190 --cert mbe
    python run_search.py "road repair" --geo county --county "Los Angeles" --state CA
"""

import argparse
import asyncio
import logging
import sys

from bidfinder.core.domain_models import (
    GeographicPreference,
    Location,
    NaicsCode,
    RequesterProfile,
)
from bidfinder.core.errors import InputContractError, UpstreamUnavailableError
from bidfinder.core.settings import get_settings
from bidfinder.search import OpenAIWebSearch, SearchOrchestrator
from bidfinder.storage.opportunity_store import OpportunityStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Search the catalog, falling back to the web")
    parser.add_argument("query", help="Free-text query")
    parser.add_argument(
        "--geo",
        default="unspecified",
        choices=[p.value for p in GeographicPreference],
        help="Geographic preference",
    )
    parser.add_argument("--naics", action="append", default=[], help="NAICS code (repeatable)")
    parser.add_argument("--cert", action="append", default=[], help="Certification (repeatable)")
    parser.add_argument("--city")
    parser.add_argument("--county")
    parser.add_argument("--state")
    parser.add_argument("--source", action="append", default=None, help="Restrict to a source")
    parser.add_argument("--no-web", action="store_true", help="Catalog only")
    parser.add_argument("--db", default=None, help="SQLite catalog path")
    return parser.parse_args(argv)


def build_profile(args) -> RequesterProfile:
    location = None
    if args.city or args.county or args.state:
        location = Location(city=args.city, county=args.county, state=args.state)
    return RequesterProfile(
        naics_codes=[NaicsCode(code=code) for code in args.naics],
        certifications=list(args.cert),
        geographic_preference=GeographicPreference.parse(args.geo),
        location=location,
    )


def main(argv=None) -> int:
    args = parse_args(argv)

    store = OpportunityStore(args.db or get_settings().db_path)
    web_search = None
    if not args.no_web:
        try:
            web_search = OpenAIWebSearch()
        except ValueError as e:
            logger.warning(f"Web fallback disabled: {e}")

    orchestrator = SearchOrchestrator(store, web_search)

    try:
        response = asyncio.run(
            orchestrator.search(args.query, build_profile(args), source_filter=args.source)
        )
    except InputContractError as e:
        logger.error(f"Rejected: {e}")
        return 1
    except UpstreamUnavailableError as e:
        logger.error(f"Search unavailable: {e}")
        return 2

    print("=" * 80)
    print(f"Query: '{args.query}'  ({response.count} results via {response.search_method})")
    print("=" * 80)
    print()

    for i, result in enumerate(response.opportunities, 1):
        if result.is_continuous:
            due = "Continuous"
        elif result.due_date:
            due = result.due_date.strftime("%Y-%m-%d %H:%M UTC")
        else:
            due = "Unknown"
        print(f"{i}. [{result.match_level.value.upper()} {result.match_score}] {result.title}")
        print(f"   Agency: {result.agency or 'Unknown'}")
        print(f"   Due: {due}")
        print(f"   Source: {result.source}  {result.source_url or ''}")
        print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
