# @file errors.py
# Record level errors raised while extracting and decoding status entries.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Exceptions for malformed status records.

Every exception here is local to one record: the parser logs it, rejects the
record and moves on to the next one.
"""


class StatusRecordError(ValueError):
    """Base class for a record that cannot be turned into a status entry."""


class MissingFieldError(StatusRecordError):
    """A required `<p>...</p>` field could not be located."""

    def __init__(self, field: str, detail: str = "") -> None:
        """Inits the error for the named field."""
        self.field = field
        message = f"Couldn't locate status {field}"
        if detail:
            message += f" {detail}"
        super().__init__(message)


class InvalidCodeError(StatusRecordError):
    """The code field is not a hex literal that fits in 32 bits."""

    def __init__(self, text: str) -> None:
        """Inits the error with the offending text."""
        self.text = text
        super().__init__(f"Invalid status or group: {text}")


class InvalidSeverityError(StatusRecordError):
    """The top nibble of a packed value is not a known severity."""

    def __init__(self, nibble: int) -> None:
        """Inits the error with the rejected nibble."""
        self.nibble = nibble
        super().__init__(f"Invalid CodeGroup: 0x{nibble:02X}")


class InvalidSubgroupError(StatusRecordError):
    """The subgroup bits of a packed value match no known facility."""

    def __init__(self, subgroup: int) -> None:
        """Inits the error with the rejected subgroup value."""
        self.subgroup = subgroup
        super().__init__(f"Invalid subgroup: 0x{subgroup:03X}")
