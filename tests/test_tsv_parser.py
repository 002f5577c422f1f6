from __future__ import annotations

import pytest

from parsing.errors import HeaderMissingError
from parsing.tsv_parser import (
    collect_column_values,
    get_tsv_headers,
    parse_boolean,
    parse_number,
    parse_tsv,
    require_headers,
)


def test_rows_keyed_by_header_and_trimmed():
    table = parse_tsv("name\tcode\n  El Rune \t r01\n")
    assert table.headers == ("name", "code")
    assert list(table) == [{"name": "El Rune", "code": "r01"}]


def test_short_rows_padded_and_extra_fields_ignored():
    table = parse_tsv("a\tb\tc\n1\n1\t2\t3\t4\n")
    rows = list(table)
    assert rows[0] == {"a": "1", "b": "", "c": ""}
    assert rows[1] == {"a": "1", "b": "2", "c": "3"}


def test_crlf_bom_and_blank_lines():
    table = parse_tsv("\ufeffa\tb\r\n\r\n1\t2\r\n   \r\n3\t4\r\n")
    assert table.headers == ("a", "b")
    assert [r["a"] for r in table] == ["1", "3"]
    assert len(table) == 2


def test_iteration_restarts_from_first_row():
    table = parse_tsv("a\n1\n2\n")
    assert [r["a"] for r in table] == ["1", "2"]
    assert [r["a"] for r in table] == ["1", "2"]


def test_empty_and_header_only_input():
    assert list(parse_tsv("")) == []
    header_only = parse_tsv("a\tb\n")
    assert header_only.headers == ("a", "b")
    assert not header_only
    assert list(header_only) == []


def test_get_tsv_headers_skips_leading_blank_lines():
    assert get_tsv_headers("\n\nx\ty\n1\t2") == ("x", "y")
    assert get_tsv_headers("") == ()


@pytest.mark.parametrize(
    "value,expected",
    [("12", 12), ("-5", -5), ("+3", 3), ("7abc", 7), ("", 0), (None, 0), ("abc", 0), (" 4", 4)],
)
def test_parse_number(value, expected):
    assert parse_number(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [("1", True), ("true", True), ("TRUE", True), ("0", False), ("", False), (None, False), ("yes", False)],
)
def test_parse_boolean(value, expected):
    assert parse_boolean(value) is expected


def test_collect_column_values_skips_blanks():
    row = {"itype1": "swor", "itype2": " ", "itype3": "axe", "itype4": ""}
    assert collect_column_values(row, "itype", 6) == ("swor", "axe")


def test_require_headers_reports_missing_columns():
    table = parse_tsv("code\tname\n")
    require_headers(table, "code", source="gems")
    with pytest.raises(HeaderMissingError) as exc:
        require_headers(table, "code", "letter", source="gems")
    assert exc.value.context["missing"] == ["letter"]
    with pytest.raises(HeaderMissingError):
        require_headers(parse_tsv(""), source="gems")


def test_only_newline_separates_rows():
    table = parse_tsv("name\tcode\nFoo\x0cBar\tr01\nBaz Qux\tr02\r\n")
    assert list(table) == [
        {"name": "Foo\x0cBar", "code": "r01"},
        {"name": "Baz Qux", "code": "r02"},
    ]
    assert get_tsv_headers("na\x0bme\tcode\n") == ("na\x0bme", "code")
