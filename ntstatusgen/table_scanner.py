# @file table_scanner.py
# Pulls `<tr>` records and their `<p>` fields out of a status catalogue dump.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Record scanning for status catalogue dumps.

The dump is not parsed as HTML. Records are found by plain marker search:

    <tr> ... <p>0xC0000005</p> ... <p>STATUS_ACCESS_VIOLATION</p> ... <p>message</p> ... </tr>

Only the first three `<p>` fields of a record are read; anything after them
is ignored. The scanner never looks back past the end of the last record.
"""

import re
from typing import Iterator, NamedTuple, Optional

from ntstatusgen.errors import InvalidCodeError, MissingFieldError

RECORD_OPEN = "<tr>"
RECORD_CLOSE = "</tr>"
FIELD_OPEN = "<p>"
FIELD_CLOSE = "</p>"
GENERIC_NAME_PREFIX = "STATUS_"

HEX_PREFIX = "0x"
# 1 to 8 digits; a ninth digit makes the field invalid
HEX_DIGITS_REGEX = re.compile(r"[0-9A-Fa-f]{1,8}(?![0-9A-Fa-f])")


class RawStatusFields(NamedTuple):
    """The three fields of one record, before decoding."""

    raw_code: int
    name: str
    message: str


def find_and_consume(text: str, to_find: str) -> Optional[str]:
    """Returns the text following the first `to_find`, or None if it is absent."""
    offset = text.find(to_find)
    if offset == -1:
        return None
    return text[offset + len(to_find):]


def find_and_take(text: str, to_find: str) -> Optional[tuple]:
    """Splits `text` around the first `to_find`.

    Returns:
        (tuple[str, str]): text before the marker and text after it
        (None): the marker is absent
    """
    offset = text.find(to_find)
    if offset == -1:
        return None
    return text[:offset], text[offset + len(to_find):]


class TagScanner(object):
    """Walks a buffer one `<tr>...</tr>` record at a time.

    The only state is the cursor. Once a call returns None the scanner is
    exhausted and every following call returns None as well.

    Attributes:
        buffer (str): the text being scanned
        cursor (int): offset of the first character not yet consumed
    """

    def __init__(self, buffer: str, open_tag: str = RECORD_OPEN, close_tag: str = RECORD_CLOSE) -> None:
        """Inits the scanner at the start of the buffer."""
        self.buffer = buffer
        self.cursor = 0
        self._open_tag = open_tag
        self._close_tag = close_tag

    def next_record(self) -> Optional[str]:
        """Returns the text between the next record markers and moves past them.

        An open marker without a close marker ends the scan; the unterminated
        tail is discarded.
        """
        begin = self.buffer.find(self._open_tag, self.cursor)
        if begin == -1:
            self.cursor = len(self.buffer)
            return None
        body_start = begin + len(self._open_tag)

        end = self.buffer.find(self._close_tag, body_start)
        if end == -1:
            self.cursor = len(self.buffer)
            return None

        self.cursor = end + len(self._close_tag)
        return self.buffer[body_start:end]

    def __iter__(self) -> Iterator[str]:
        """Yields the remaining records in document order."""
        while True:
            section = self.next_record()
            if section is None:
                return
            yield section


def iter_records(buffer: str) -> Iterator[str]:
    """Yields the body of every complete `<tr>` record in the buffer."""
    return iter(TagScanner(buffer))


def _describe_bad_code(section: str) -> str:
    """The text of the code field up to its closing marker, for diagnostics."""
    taken = find_and_take(section, FIELD_CLOSE)
    if taken is None:
        return section.strip()
    return taken[0]


def parse_status_code(section: str) -> tuple:
    """Reads the hex code field at the start of the remaining record text.

    Returns:
        (tuple[int, str]): the packed value and the text after the digits

    Raises:
        MissingFieldError: no `<p>` is left in the record
        InvalidCodeError: the field is not a hex literal of 1 to 8 digits
    """
    section = find_and_consume(section, FIELD_OPEN)
    if section is None:
        raise MissingFieldError("code")

    digits = section.lstrip()
    if digits[:len(HEX_PREFIX)].lower() == HEX_PREFIX:
        digits = digits[len(HEX_PREFIX):]

    match = HEX_DIGITS_REGEX.match(digits)
    if match is None:
        raise InvalidCodeError(_describe_bad_code(section))
    return int(match.group(0), 16), digits[match.end():]


def _take_field(section: str, field: str) -> tuple:
    """Takes the text of the next `<p>...</p>` pair.

    Raises:
        MissingFieldError: the opening or closing marker is absent
    """
    section = find_and_consume(section, FIELD_OPEN)
    if section is None:
        raise MissingFieldError(field)
    taken = find_and_take(section, FIELD_CLOSE)
    if taken is None:
        raise MissingFieldError(field, "end")
    return taken


def strip_name_prefix(name: str) -> str:
    """Drops the generic STATUS_ prefix from a status name."""
    if name.startswith(GENERIC_NAME_PREFIX):
        return name[len(GENERIC_NAME_PREFIX):]
    return name


def extract_name_and_message(section: str) -> tuple:
    """Extracts the name and message fields that follow the code field.

    Returns:
        (tuple[str, str]): the name without its STATUS_ prefix and the verbatim message

    Raises:
        MissingFieldError: a field marker is missing
    """
    name, section = _take_field(section, "name")
    message, _ = _take_field(section, "message")
    return strip_name_prefix(name.strip()), message


def extract_fields(section: str) -> RawStatusFields:
    """Extracts the code, name and message of one record body.

    The message is returned verbatim; line breaks are handled when rendering.

    Raises:
        MissingFieldError: a field marker is missing
        InvalidCodeError: the code field is malformed
    """
    raw_code, section = parse_status_code(section)
    return RawStatusFields(raw_code, *extract_name_and_message(section))
