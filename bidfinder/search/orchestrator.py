"""
Catalog-first search with a web fallback.

    DB_LOOKUP --hit--> DONE
        |
       miss
        v
    WEB_FALLBACK --hit--> DONE
        |
       miss
        v
    DONE_EMPTY

The web call is only made after a catalog miss. Results from either path
are scored against the requester's profile before they are returned.
"""

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from bidfinder.core.domain_models import RequesterProfile, SearchResponse, SearchResult
from bidfinder.core.errors import InputContractError, UpstreamUnavailableError
from bidfinder.core.settings import Settings, get_settings
from bidfinder.search.extraction import (
    candidates_from_structured,
    candidates_from_text,
    dedupe_candidates,
    dedupe_key,
)
from bidfinder.search.query_composer import ComposedQuery, compose_query
from bidfinder.search.relevance_scorer import RelevanceScorer, ScoringWeights
from bidfinder.search.web_search import SearchCapability, build_search_prompt
from bidfinder.storage.opportunity_store import OpportunityStore

logger = logging.getLogger(__name__)

METHOD_DATABASE = "database"
METHOD_WEB = "web"
METHOD_BOTH = "both"


class SearchOrchestrator:
    """
    Answers search requests from the catalog, falling back to web search.

    Usage:
        orchestrator = SearchOrchestrator(store, OpenAIWebSearch())
        response = await orchestrator.search("mental health", profile)
    """

    def __init__(
        self,
        store: OpportunityStore,
        web_search: Optional[SearchCapability] = None,
        scorer: Optional[RelevanceScorer] = None,
        settings: Optional[Settings] = None
    ):
        """
        Args:
            store: Opportunity catalog
            web_search: Fallback search capability; None disables the fallback
            scorer: Relevance scorer (default: weights from settings)
            settings: Limits and timeouts (default: from environment)
        """
        self.settings = settings or get_settings()
        self.store = store
        self.web_search = web_search
        self.scorer = scorer or RelevanceScorer(ScoringWeights.from_settings(self.settings))

    async def search(
        self,
        query: str,
        profile: RequesterProfile,
        source_filter: Optional[Sequence[str]] = None
    ) -> SearchResponse:
        """
        Run one search request.

        Args:
            query: Free-text query
            profile: Requester profile (NAICS, certifications, geography)
            source_filter: Optional explicit source restriction

        Returns:
            SearchResponse; empty (count 0) when nothing is found

        Raises:
            InputContractError: empty query
            UpstreamUnavailableError: catalog or web search unavailable
        """
        if not query or not query.strip():
            raise InputContractError("Missing search query")

        composed = compose_query(query, profile.geographic_preference, profile.location)
        sources = restrict_sources(composed.sources, source_filter)

        catalog_hits = await self.lookup_catalog(composed, sources)
        minimum = max(1, self.settings.min_database_results)

        if len(catalog_hits) >= minimum:
            method, candidates = METHOD_DATABASE, catalog_hits
        else:
            web_hits = await self.web_fallback(composed)
            if catalog_hits:
                method, candidates = METHOD_BOTH, merge_results(catalog_hits, web_hits)
            else:
                method, candidates = METHOD_WEB, web_hits

        ranked = self.scorer.rank(candidates, profile)
        logger.info(f"Search {composed.text!r}: {len(ranked)} results via {method}")
        return SearchResponse(
            opportunities=ranked,
            search_method=method,
            searched_areas=list(composed.searched_areas),
        )

    async def lookup_catalog(
        self,
        composed: ComposedQuery,
        sources: Optional[Tuple[str, ...]]
    ) -> List[SearchResult]:
        """Active catalog rows matching the query, soonest deadline first."""
        opportunities = await asyncio.to_thread(
            self.store.query,
            sources,
            composed.text,
            self.settings.max_results,
        )
        return [SearchResult.from_opportunity(opp) for opp in opportunities]

    async def web_fallback(self, composed: ComposedQuery) -> List[SearchResult]:
        """
        Ask the web search capability, bounded by the configured timeout.

        Cancelling the caller cancels the in-flight request.
        """
        if self.web_search is None:
            logger.warning("Catalog miss and web fallback is not configured")
            return []

        prompt = build_search_prompt(composed.expanded_text)
        try:
            response = await asyncio.wait_for(
                self.web_search.invoke(prompt, tools_enabled=True),
                timeout=self.settings.search_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Web search timed out after {self.settings.search_timeout}s")
            raise UpstreamUnavailableError("Web search timed out") from e

        from_text = candidates_from_text(response.text_blocks)
        known_urls = {c.source_url for c in from_text if c.source_url}
        from_items = [
            c for c in candidates_from_structured(response.structured_items)
            if c.source_url not in known_urls
        ]

        return dedupe_candidates(from_text + from_items)


def restrict_sources(
    preferred: Optional[Tuple[str, ...]],
    requested: Optional[Sequence[str]]
) -> Optional[Tuple[str, ...]]:
    """
    Combine the preference's sources with an explicit caller filter.

    None means unrestricted; an empty tuple means nothing can match.
    """
    if not requested:
        return preferred
    requested = tuple(s.strip().lower() for s in requested if s and s.strip())
    if not requested:
        return preferred
    if preferred is None:
        return requested
    return tuple(s for s in preferred if s in requested)


def merge_results(catalog: List[SearchResult], web: List[SearchResult]) -> List[SearchResult]:
    """Catalog rows first; web candidates naming a catalog listing are dropped."""
    seen_titles = {(c.title or "").lower()[:50] for c in catalog}
    seen_keys = {dedupe_key(c) for c in catalog}
    extra = [
        c for c in web
        if dedupe_key(c) not in seen_keys and (c.title or "").lower()[:50] not in seen_titles
    ]
    return list(catalog) + extra
