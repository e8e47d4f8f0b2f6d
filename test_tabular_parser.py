"""
Tests for the delimited-text export parser.
"""

from bidfinder.ingest.tabular import parse_rows


def test_header_keys_and_trimmed_values():
    text = "Bid Title, Bid Number ,Closing Date\n  Road Repair , RR-1,12/31/2025\n"
    rows = list(parse_rows(text))
    assert rows == [{"Bid Title": "Road Repair", "Bid Number": "RR-1", "Closing Date": "12/31/2025"}]


def test_quoted_field_keeps_delimiter_and_doubled_quotes():
    text = 'Title,Description\n"Paving, Phase 2","The ""north"" lot"\n'
    rows = list(parse_rows(text))
    assert rows[0]["Title"] == "Paving, Phase 2"
    assert rows[0]["Description"] == 'The "north" lot'


def test_blank_lines_are_skipped():
    text = "\n\nTitle,ID\n\nA,1\n   \nB,2\n"
    rows = list(parse_rows(text))
    assert [r["ID"] for r in rows] == ["1", "2"]


def test_field_count_mismatch_drops_only_that_row():
    text = "Title,ID,Date\nGood,1,1/1/2030\nShort,2\nToo,many,fields,here\nAlso good,3,\n"
    rows = list(parse_rows(text))
    assert [r["Title"] for r in rows] == ["Good", "Also good"]
    assert rows[1]["Date"] == ""


def test_header_only_and_empty_payload_yield_nothing():
    assert list(parse_rows("")) == []
    assert list(parse_rows("Title,ID\n")) == []


def test_byte_order_mark_is_removed_from_first_header():
    text = "\ufeffBid Title,Bid Number\nA,1\n"
    rows = list(parse_rows(text))
    assert "Bid Title" in rows[0]


def test_windows_line_endings():
    rows = list(parse_rows("Title,ID\r\nA,1\r\nB,2\r\n"))
    assert [r["ID"] for r in rows] == ["1", "2"]


def test_custom_delimiter():
    rows = list(parse_rows("Title\tID\nA, with comma\t7\n", delimiter="\t"))
    assert rows == [{"Title": "A, with comma", "ID": "7"}]


def test_generator_restarts_on_new_call():
    text = "Title\nA\nB\n"
    first = parse_rows(text)
    assert len(list(first)) == 2
    assert list(first) == []
    assert len(list(parse_rows(text))) == 2
