"""
tests/test_csv_parser.py

Pytest unit tests for CSV parsing.
"""

from __future__ import annotations

import pytest

from app.domain.errors import MalformedCsvError
from app.parsing.csv_parser import decode_csv_bytes, normalize_header, parse_csv


def test_parses_headers_and_trimmed_rows() -> None:
    parsed = parse_csv("name , status\n  Expand EU market ,active\nGrow ARR, paused \n")

    assert parsed.headers == ["name", "status"]
    assert parsed.header_keys == ["name", "status"]
    assert parsed.rows == [["Expand EU market", "active"], ["Grow ARR", "paused"]]
    assert parsed.row_count == 2


def test_quoted_fields_keep_commas_and_doubled_quotes() -> None:
    parsed = parse_csv('name,description\n"Grow, fast","He said ""go"""\n')

    assert parsed.rows == [["Grow, fast", 'He said "go"']]


def test_newline_inside_quotes_stays_in_one_field() -> None:
    parsed = parse_csv('name,description\n"Launch","line one\nline two"\nSecond,plain\n')

    assert parsed.row_count == 2
    assert parsed.rows[0] == ["Launch", "line one\nline two"]


def test_crlf_line_endings() -> None:
    parsed = parse_csv("name,progress\r\nA,10\r\nB,20\r\n")

    assert parsed.rows == [["A", "10"], ["B", "20"]]


def test_blank_lines_are_skipped() -> None:
    parsed = parse_csv("name\n\nA\n\n\nB\n")

    assert parsed.rows == [["A"], ["B"]]


def test_whitespace_only_lines_are_blank() -> None:
    parsed = parse_csv("name\nA\n   \n\t\nB\n")

    assert parsed.rows == [["A"], ["B"]]


def test_quoted_empty_value_is_a_row() -> None:
    parsed = parse_csv('name\na\n""\nb')

    assert parsed.rows == [["a"], [""], ["b"]]


def test_byte_order_mark_is_ignored() -> None:
    parsed = parse_csv("\ufeffname,status\nA,active\n")

    assert parsed.header_keys == ["name", "status"]


def test_header_keys_are_normalized_for_lookup() -> None:
    parsed = parse_csv("Name,Start  Date\nA,2024-01-01\n")

    assert parsed.headers == ["Name", "Start  Date"]
    assert parsed.header_keys == ["name", "start_date"]
    assert parsed.has_column("start_date")


def test_row_mapping_fills_missing_trailing_cells() -> None:
    parsed = parse_csv("name,status,progress\nA,active\n")

    assert parsed.row_mapping(parsed.rows[0]) == {"name": "A", "status": "active", "progress": ""}


@pytest.mark.parametrize("text", ["", "name\n", "name,status\n\n\n"])
def test_requires_header_and_one_data_row(text: str) -> None:
    with pytest.raises(MalformedCsvError, match="at least a header and one data row"):
        parse_csv(text)


def test_unterminated_quote_is_malformed() -> None:
    with pytest.raises(MalformedCsvError, match="Invalid CSV format"):
        parse_csv('name,description\nA,"never closed\n')


def test_duplicate_header_keys_are_rejected() -> None:
    with pytest.raises(MalformedCsvError, match="duplicate column"):
        parse_csv("Name,name\nA,B\n")


def test_headers_that_differ_only_by_markup_are_duplicates() -> None:
    with pytest.raises(MalformedCsvError, match="duplicate column\(s\): name"):
        parse_csv("name,<name>\nA,B\n")


def test_empty_header_cell_is_rejected() -> None:
    with pytest.raises(MalformedCsvError, match="empty column name"):
        parse_csv("name,,status\nA,x,active\n")


def test_normalize_header() -> None:
    assert normalize_header("  Target   Value ") == "target_value"


def test_remap_renames_header_keys_only() -> None:
    parsed = parse_csv("Goal Title,Status\nA,active\n").remap({"goal title": "Name"})

    assert parsed.headers == ["Goal Title", "Status"]
    assert parsed.header_keys == ["name", "status"]
    assert parsed.row_mapping(parsed.rows[0]) == {"name": "A", "status": "active"}


def test_remap_rejects_colliding_keys() -> None:
    parsed = parse_csv("name,title\nA,B\n")

    with pytest.raises(MalformedCsvError, match="duplicate column"):
        parsed.remap({"title": "name"})


def test_decode_csv_bytes_strips_bom_and_rejects_non_utf8() -> None:
    assert decode_csv_bytes("\ufeffname\nA\n".encode("utf-8")) == "name\nA\n"

    with pytest.raises(MalformedCsvError, match="UTF-8"):
        decode_csv_bytes(b"name\n\xff\xfe\n")
