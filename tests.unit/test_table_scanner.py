## @file test_table_scanner.py
# This contains unit tests for record scanning and field extraction
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Tests for the tag scanner and the field extractor."""

import pytest
from ntstatusgen.errors import InvalidCodeError, MissingFieldError
from ntstatusgen.table_scanner import (
    RawStatusFields,
    TagScanner,
    extract_fields,
    find_and_consume,
    find_and_take,
    iter_records,
    parse_status_code,
    strip_name_prefix,
)

ACCESS_VIOLATION = (
    "<tr>\n  <td><p>0xC0000005</p></td>\n  <td><p>STATUS_ACCESS_VIOLATION</p>"
    "<p>The instruction referenced invalid memory.</p></td>\n</tr>"
)


class TestHelpers:
    """Tests the marker helpers."""

    def test_find_and_consume(self) -> None:
        """Consumes up to and past the marker."""
        assert find_and_consume("ab<p>cd", "<p>") == "cd"
        assert find_and_consume("abcd", "<p>") is None

    def test_find_and_take(self) -> None:
        """Splits around the marker."""
        assert find_and_take("name</p>rest", "</p>") == ("name", "rest")
        assert find_and_take("name", "</p>") is None

    def test_strip_name_prefix(self) -> None:
        """Only a leading STATUS_ is removed."""
        assert strip_name_prefix("STATUS_SUCCESS") == "SUCCESS"
        assert strip_name_prefix("RPC_NT_INVALID_BINDING") == "RPC_NT_INVALID_BINDING"
        assert strip_name_prefix("DBG_STATUS_X") == "DBG_STATUS_X"


class TestTagScanner:
    """Tests TagScanner."""

    def test_records_in_order(self) -> None:
        """Each call returns the next record body and advances the cursor."""
        scanner = TagScanner("junk<tr>one</tr> <tr>two</tr>tail")
        assert scanner.next_record() == "one"
        assert scanner.cursor == len("junk<tr>one</tr>")
        assert scanner.next_record() == "two"
        assert scanner.next_record() is None
        assert scanner.next_record() is None

    def test_empty_buffer(self) -> None:
        """No open marker is a normal end of input."""
        assert list(TagScanner("")) == []
        assert list(TagScanner("<table></table>")) == []

    def test_unterminated_record(self) -> None:
        """A trailing record with no close marker is dropped."""
        assert list(iter_records("<tr>one</tr><tr>two")) == ["one"]

    def test_empty_record(self) -> None:
        """An empty record is still returned."""
        assert list(iter_records("<tr></tr><tr>x</tr>")) == ["", "x"]

    def test_not_restartable(self) -> None:
        """Iterating twice does not rescan the buffer."""
        scanner = TagScanner("<tr>a</tr><tr>b</tr>")
        assert list(scanner) == ["a", "b"]
        assert list(scanner) == []


class TestParseStatusCode:
    """Tests parse_status_code."""

    @pytest.mark.parametrize(
        "text,value",
        [
            ("<p>0xC0000005</p>", 0xC0000005),
            ("<p>C0000005</p>", 0xC0000005),
            ("<p>0Xc0000005</p>", 0xC0000005),
            ("<p>0x0</p>", 0),
            ("<p> 0x40000000</p>", 0x40000000),
            ("<p>0xFFFFFFFF</p>", 0xFFFFFFFF),
        ],
    )
    def test_valid(self, text: str, value: int) -> None:
        """Hex literals with or without the 0x prefix are accepted."""
        parsed, remaining = parse_status_code(text)
        assert parsed == value
        assert remaining == "</p>"

    def test_missing_marker(self) -> None:
        """No <p> means the code field is missing."""
        with pytest.raises(MissingFieldError) as exc_info:
            parse_status_code("0xC0000005")
        assert exc_info.value.field == "code"

    @pytest.mark.parametrize(
        "text", ["<p>0x</p>", "<p>zzz</p>", "<p></p>", "<p>0x100000000</p>", "<p>0x000000005</p>"]
    )
    def test_invalid(self, text: str) -> None:
        """Non hex content or more than eight digits is an invalid code."""
        with pytest.raises(InvalidCodeError):
            parse_status_code(text)

    def test_invalid_names_offending_text(self) -> None:
        """The diagnostic shows the field text up to its close marker."""
        with pytest.raises(InvalidCodeError) as exc_info:
            parse_status_code("<p>not a value</p><p>NAME</p>")
        assert exc_info.value.text == "not a value"
        assert "not a value" in str(exc_info.value)


class TestExtractFields:
    """Tests extract_fields."""

    def test_record(self) -> None:
        """The three fields are read in order and the name prefix is dropped."""
        body = next(iter_records(ACCESS_VIOLATION))
        assert extract_fields(body) == RawStatusFields(
            0xC0000005, "ACCESS_VIOLATION", "The instruction referenced invalid memory."
        )

    def test_message_is_verbatim(self) -> None:
        """Line breaks inside the message are kept at parse time."""
        fields = extract_fields("<p>0x0</p><p>STATUS_X</p><p>Line one\r\nLine two</p>")
        assert fields.message == "Line one\r\nLine two"

    def test_extra_fields_ignored(self) -> None:
        """Only the first three fields are read."""
        fields = extract_fields("<p>1</p><p>A</p><p>B</p><p>C</p>")
        assert fields == RawStatusFields(1, "A", "B")

    @pytest.mark.parametrize(
        "body,field",
        [
            ("", "code"),
            ("<p>0x0</p>", "name"),
            ("<p>0x0</p><p>STATUS_X", "name"),
            ("<p>0x0</p><p>STATUS_X</p>", "message"),
            ("<p>0x0</p><p>STATUS_X</p><p>unterminated", "message"),
        ],
    )
    def test_missing_field(self, body: str, field: str) -> None:
        """The missing field is named in the error."""
        with pytest.raises(MissingFieldError) as exc_info:
            extract_fields(body)
        assert exc_info.value.field == field
