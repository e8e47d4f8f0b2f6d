"""
Tests for the per-source row mappers and format dispatch.
"""

from datetime import datetime, timezone

from bidfinder.normalize.common import as_list
from bidfinder.normalize.registry import _MAPPERS, SourceFormat, map_row, mapper_for
from bidfinder.normalize.generic import map_generic
from bidfinder.normalize.la_county import map_la_county


UTC = timezone.utc


LA_ROW = {
    "Bid Number": "RFP-DMH-2025-01",
    "Bid Title": "Mental Health Outreach",
    "Bid Description": "Community outreach services",
    "Department": "Department of Mental Health",
    "Bid Type": "Service",
    "Commodity Code": '="624190"',
    "Commodity Description": "Counseling Services",
    "Open Date": "11/1/2025",
    "Closing Date": "12/31/2030 5:00 PM",
    "Contact Name": "J. Rivera",
    "Contact Phone": "213-555-0100",
    "Contact Email": "jrivera@example.gov",
    "Bid URL": "https://camisvr.co.la.ca.us/LACoBids/BidLookUp/BidDetail/1",
}


def test_la_county_row():
    opp = map_la_county(LA_ROW)
    assert opp.source == "la_county"
    assert opp.source_id == "RFP-DMH-2025-01"
    assert opp.title == "Mental Health Outreach"
    assert opp.commodity_code == "624190"
    assert opp.close_date == datetime(2030, 12, 31, 17, 0, tzinfo=UTC)
    assert opp.is_continuous is False
    assert opp.state == "CA"
    assert opp.county == "Los Angeles"
    assert opp.is_active is True


def test_la_county_continuous_has_no_close_date():
    opp = map_la_county(dict(LA_ROW, **{"Closing Date": "Continuous"}))
    assert opp.is_continuous is True
    assert opp.close_date is None


def test_unparseable_deadline_is_unknown_not_continuous():
    opp = map_la_county(dict(LA_ROW, **{"Closing Date": "see addendum"}))
    assert opp.close_date is None
    assert opp.is_continuous is False


def test_missing_title_skips_row():
    assert map_la_county(dict(LA_ROW, **{"Bid Title": ""})) is None
    assert map_row({"Bid Number": "X"}, "la_county") is None


def test_source_comes_from_caller_not_row():
    row = dict(LA_ROW, source="sam_gov")
    opp = map_row(row, "la_county")
    assert opp.source == "la_county"


def test_sam_gov_row():
    row = {
        "Notice ID": "abc123",
        "Solicitation Number": "W912-26-R-0001",
        "Title": "Bridge Inspection Services",
        "Department/Agency": "DEPT OF DEFENSE",
        "Response Deadline": "2030-06-15T14:00:00-05:00",
        "NAICS Code": "541330; 541990",
        "Set-Aside": "Total Small Business Set-Aside (FAR 19.5)",
        "Posted Date": "2025-10-01",
    }
    opp = map_row(row, "sam_gov")
    assert opp.source_id == "W912-26-R-0001"
    assert opp.agency == "DEPT OF DEFENSE"
    assert opp.close_date == datetime(2030, 6, 15, 19, 0, tzinfo=UTC)
    assert opp.naics_codes == ["541330", "541990"]
    assert opp.set_asides == ["Total Small Business Set-Aside (FAR 19.5)"]
    assert opp.bid_type == "Federal Contract"


def test_sam_gov_falls_back_to_notice_id():
    opp = map_row({"Notice ID": "abc123", "Title": "Janitorial"}, "sam_gov")
    assert opp.source_id == "abc123"


def test_grants_gov_builds_detail_url():
    row = {
        "Opportunity Number": "HHS-2026-ACF-0001",
        "Opportunity Title": "Youth Mentoring Grant",
        "Agency Name": "Administration for Children and Families",
        "Close Date": "03/15/2030",
        "Award Ceiling": "$500,000",
    }
    opp = map_row(row, "grants_gov")
    assert opp.source_url == "https://www.grants.gov/search-results-detail/HHS-2026-ACF-0001"
    assert opp.bid_type == "Grant"
    assert opp.estimated_value == "$500,000"
    assert opp.state is None


def test_california_row():
    row = {"Solicitation Number": "CA-77", "Title": "Fleet Telematics", "Close Date": "Ongoing"}
    opp = map_row(row, "california")
    assert opp.state == "CA"
    assert opp.agency == "California State"
    assert opp.is_continuous is True


def test_unknown_source_uses_generic_mapper():
    assert SourceFormat.for_source("city_of_pasadena") is SourceFormat.GENERIC
    assert mapper_for("city_of_pasadena") is map_generic

    opp = map_row({"Title": "Tree Trimming", "ID": "PW-9"}, "city_of_pasadena")
    assert opp.source == "city_of_pasadena"
    assert opp.source_id == "PW-9"
    assert opp.agency == "city_of_pasadena"


def test_generic_requires_a_title_column():
    assert map_generic({"Something": "Tree Trimming"}, "misc") is None


def test_source_lookup_is_case_insensitive():
    assert SourceFormat.for_source(" SAM_GOV ") is SourceFormat.SAM_GOV


def test_as_list():
    assert as_list('="541511" | 541512, 541511') == ["541511", "541512"]
    assert as_list(None) == []


def test_every_source_format_has_a_mapper():
    for fmt in SourceFormat:
        assert callable(mapper_for(fmt.value))
    assert set(_MAPPERS) == set(SourceFormat)
