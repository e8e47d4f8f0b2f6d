"""
Score candidate opportunities against a requester profile.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from bidfinder.core.domain_models import MatchLevel, RequesterProfile, SearchResult
from bidfinder.core.settings import Settings, get_settings


@dataclass(frozen=True)
class ScoringWeights:
    """Point values and tier thresholds for match scoring."""
    base: int = 50
    naics: int = 20
    certification: int = 15
    from_database: int = 10
    high_threshold: int = 80
    medium_threshold: int = 60
    max_score: int = 100

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ScoringWeights":
        settings = settings or get_settings()
        return cls(
            base=settings.score_base,
            naics=settings.score_naics,
            certification=settings.score_certification,
            from_database=settings.score_database,
        )


@dataclass(frozen=True)
class MatchScore:
    score: int
    level: MatchLevel


class RelevanceScorer:
    """
    Deterministic profile match scoring.

    Each category (NAICS, certification, provenance) adds its points at most
    once, however many of its terms match.
    """

    # Certification token -> terms that signal a matching set-aside
    CERTIFICATION_KEYWORDS: Dict[str, Tuple[str, ...]] = {
        'mbe': ('minority', 'mbe', 'minority-owned'),
        'minority': ('minority', 'mbe', 'minority-owned'),
        'wbe': ('women', 'wbe', 'woman-owned', 'women-owned', 'wosb'),
        'wosb': ('women', 'wbe', 'woman-owned', 'women-owned', 'wosb'),
        'women': ('women', 'wbe', 'woman-owned', 'women-owned', 'wosb'),
        'sbe': ('small business', 'sbe'),
        'small_business': ('small business', 'sbe'),
        'small-business': ('small business', 'sbe'),
        'dbe': ('disadvantaged', 'dbe'),
        'disadvantaged': ('disadvantaged', 'dbe'),
        'dvbe': ('veteran', 'dvbe', 'vosb', 'sdvosb'),
        'veteran': ('veteran', 'dvbe', 'vosb', 'sdvosb'),
        'sdvosb': ('veteran', 'dvbe', 'vosb', 'sdvosb'),
        '8(a)': ('8(a)', '8a'),
        '8a': ('8(a)', '8a'),
        'hubzone': ('hubzone',),
    }

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def score(self, candidate: SearchResult, profile: RequesterProfile) -> MatchScore:
        """
        Score one candidate (0-100) and assign its tier.

        Args:
            candidate: Catalog row or web-derived candidate
            profile: Requester's NAICS codes and certifications

        Returns:
            MatchScore
        """
        w = self.weights
        text = self.combined_text(candidate)

        score = w.base
        if self._matches_naics(candidate, text, profile):
            score += w.naics
        if self._matches_certification(text, profile):
            score += w.certification
        if candidate.from_database:
            score += w.from_database

        score = max(0, min(w.max_score, score))
        return MatchScore(score=score, level=self.level_for(score))

    def level_for(self, score: int) -> MatchLevel:
        if score >= self.weights.high_threshold:
            return MatchLevel.HIGH
        if score >= self.weights.medium_threshold:
            return MatchLevel.MEDIUM
        return MatchLevel.LOW

    def rank(
        self,
        candidates: Sequence[SearchResult],
        profile: RequesterProfile
    ) -> List[SearchResult]:
        """
        Score every candidate and sort by score, highest first.

        Ties keep their incoming order.
        """
        for candidate in candidates:
            result = self.score(candidate, profile)
            candidate.match_score = result.score
            candidate.match_level = result.level
        return sorted(candidates, key=lambda c: -c.match_score)

    @staticmethod
    def combined_text(candidate: SearchResult) -> str:
        parts = (candidate.title, candidate.description, candidate.commodity_description)
        return " ".join(p for p in parts if p).lower()

    def _matches_naics(self, candidate: SearchResult, text: str, profile: RequesterProfile) -> bool:
        commodity = (candidate.commodity_code or "").lower()
        candidate_codes = {c.strip() for c in candidate.naics_codes}
        for naics in profile.naics_codes:
            code = str(naics.code or "").strip().lower()
            if not code:
                continue
            if code in text or code in commodity or code in candidate_codes:
                return True
        return False

    def _matches_certification(self, text: str, profile: RequesterProfile) -> bool:
        for cert in profile.certifications:
            token = (cert or "").strip().lower()
            if not token:
                continue
            keywords = self.CERTIFICATION_KEYWORDS.get(token, (token,))
            if any(kw in text for kw in keywords):
                return True
        return False
