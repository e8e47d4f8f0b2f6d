"""
Catalog-first opportunity search, web fallback and relevance scoring.
"""

from .orchestrator import SearchOrchestrator
from .relevance_scorer import RelevanceScorer, ScoringWeights
from .web_search import OpenAIWebSearch, SearchCapability, SearchToolResponse

__all__ = [
    'SearchOrchestrator',
    'RelevanceScorer',
    'ScoringWeights',
    'OpenAIWebSearch',
    'SearchCapability',
    'SearchToolResponse',
]
