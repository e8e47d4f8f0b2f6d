"""
Tests for query composition.
"""

from bidfinder.core.domain_models import GeographicPreference, Location
from bidfinder.search.query_composer import (
    SOLICITATION_HINT,
    compose_query,
    mentions_solicitation,
    searched_areas,
)


def test_federal_restricts_sources_and_qualifies_text():
    composed = compose_query("drone inspection", GeographicPreference.FEDERAL)
    assert composed.text == "drone inspection"
    assert composed.sources == ("sam_gov", "grants_gov")
    assert composed.expanded_text == "drone inspection federal government RFP OR grant OR solicitation"


def test_county_uses_location():
    composed = compose_query(
        "road repair",
        GeographicPreference.COUNTY,
        Location(county="Los Angeles", state="CA"),
    )
    assert composed.sources == ("la_county",)
    assert "Los Angeles County" in composed.expanded_text
    assert "CA" in composed.expanded_text


def test_local_includes_city():
    composed = compose_query(
        "tree trimming",
        GeographicPreference.LOCAL,
        Location(city="Pasadena", county="Los Angeles County", state="CA"),
    )
    assert "City of Pasadena" in composed.expanded_text
    assert "Los Angeles County County" not in composed.expanded_text


def test_state_without_location():
    composed = compose_query("fleet telematics", GeographicPreference.STATE)
    assert composed.sources == ("california",)
    assert "state government" in composed.expanded_text


def test_unspecified_has_no_source_restriction():
    composed = compose_query("janitorial", GeographicPreference.UNSPECIFIED)
    assert composed.sources is None
    assert composed.expanded_text == f"janitorial {SOLICITATION_HINT}"


def test_hint_not_added_when_query_names_a_solicitation():
    composed = compose_query("janitorial RFP")
    assert SOLICITATION_HINT not in composed.expanded_text
    assert mentions_solicitation("youth mentoring grants")
    assert not mentions_solicitation("bridge inspection")


def test_whitespace_is_collapsed():
    assert compose_query("  mental   health ").text == "mental health"


def test_string_preference_is_accepted():
    assert compose_query("x", "Federal").sources == ("sam_gov", "grants_gov")
    assert compose_query("x", "galactic").sources is None


def test_deterministic():
    args = ("road repair", GeographicPreference.COUNTY, Location(county="Orange"))
    assert compose_query(*args) == compose_query(*args)


def test_searched_areas_follow_preference():
    location = Location(city="Pasadena", county="Los Angeles", state="CA")
    assert searched_areas(GeographicPreference.FEDERAL, location) == ["Federal (SAM.gov, Grants.gov)"]
    assert searched_areas(GeographicPreference.STATE, location) == [
        "Federal (SAM.gov, Grants.gov)", "CA State",
    ]
    assert searched_areas(GeographicPreference.LOCAL, location) == [
        "Federal (SAM.gov, Grants.gov)", "CA State", "Los Angeles County", "City of Pasadena",
    ]
    assert searched_areas(GeographicPreference.COUNTY) == ["Federal (SAM.gov, Grants.gov)"]
    assert compose_query("x", GeographicPreference.COUNTY, location).searched_areas == [
        "Federal (SAM.gov, Grants.gov)", "CA State", "Los Angeles County",
    ]
