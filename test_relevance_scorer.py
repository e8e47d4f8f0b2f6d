"""
Tests for relevance scoring and ranking.
"""

import copy

from bidfinder.core.domain_models import MatchLevel, NaicsCode, RequesterProfile, SearchResult
from bidfinder.search.relevance_scorer import RelevanceScorer, ScoringWeights


def candidate(**overrides):
    fields = {"id": "1", "title": "Mental Health Outreach", "from_database": False}
    fields.update(overrides)
    return SearchResult(**fields)


def profile(naics=(), certs=()):
    return RequesterProfile(
        naics_codes=[NaicsCode(code=c) for c in naics],
        certifications=list(certs),
    )


def test_base_score_only():
    result = RelevanceScorer().score(candidate(), profile())
    assert result.score == 50
    assert result.level is MatchLevel.LOW


def test_database_naics_match_is_high():
    c = candidate(from_database=True, commodity_code="624190")
    result = RelevanceScorer().score(c, profile(naics=["624190"]))
    assert result.score == 80
    assert result.level is MatchLevel.HIGH


def test_naics_matches_in_text_and_code_list():
    scorer = RelevanceScorer()
    assert scorer.score(candidate(description="NAICS 541330"), profile(naics=["541330"])).score == 70
    assert scorer.score(candidate(naics_codes=["541330"]), profile(naics=["541330"])).score == 70
    assert scorer.score(candidate(), profile(naics=["541330"])).score == 50


def test_category_counts_once():
    c = candidate(description="541330 and 541990 work")
    assert RelevanceScorer().score(c, profile(naics=["541330", "541990"])).score == 70


def test_certification_keyword_expansion():
    scorer = RelevanceScorer()
    c = candidate(description="Women-owned small business set-aside")
    assert scorer.score(c, profile(certs=["wbe"])).score == 65
    assert scorer.score(c, profile(certs=["SBE"])).score == 65
    assert scorer.score(c, profile(certs=["hubzone"])).score == 50


def test_unknown_certification_matches_literally():
    c = candidate(description="Open to LGBTBE firms")
    assert RelevanceScorer().score(c, profile(certs=["lgbtbe"])).score == 65


def test_all_categories():
    c = candidate(from_database=True, commodity_code="624190", description="Minority-owned firms encouraged")
    result = RelevanceScorer().score(c, profile(naics=["624190"], certs=["mbe"]))
    assert result.score == 95
    assert result.level is MatchLevel.HIGH


def test_tier_boundaries():
    scorer = RelevanceScorer()
    assert scorer.level_for(80) is MatchLevel.HIGH
    assert scorer.level_for(79) is MatchLevel.MEDIUM
    assert scorer.level_for(60) is MatchLevel.MEDIUM
    assert scorer.level_for(59) is MatchLevel.LOW


def test_score_is_clamped():
    heavy = RelevanceScorer(ScoringWeights(base=90, naics=30))
    assert heavy.score(candidate(commodity_code="1"), profile(naics=["1"])).score == 100
    negative = RelevanceScorer(ScoringWeights(base=-20))
    assert negative.score(candidate(), profile()).score == 0


def test_scoring_is_pure():
    c = candidate(from_database=True, commodity_code="624190")
    before = copy.deepcopy(c)
    scorer = RelevanceScorer()
    first = scorer.score(c, profile(naics=["624190"]))
    second = scorer.score(c, profile(naics=["624190"]))
    assert first == second
    assert c == before


def test_rank_orders_by_score_and_keeps_ties_stable():
    low_a = candidate(id="a")
    high = candidate(id="h", from_database=True, commodity_code="624190")
    low_b = candidate(id="b")
    ranked = RelevanceScorer().rank([low_a, high, low_b], profile(naics=["624190"]))
    assert [c.id for c in ranked] == ["h", "a", "b"]
    assert ranked[0].match_level is MatchLevel.HIGH
    assert ranked[1].match_score == 50
