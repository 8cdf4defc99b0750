# @file status_layout.py
# Bit layout of a packed NTSTATUS value and the encode/decode pair for it.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Packed NTSTATUS bit layout.

A status value is packed most-significant-first as:

    severity (4 bits) | subgroup (16 bits) | code (12 bits)

`decode_status` and `encode_status` are exact inverses for every valid
severity, known subgroup and 12-bit code.
"""

from enum import IntEnum
from typing import NamedTuple

from ntstatusgen.errors import InvalidSeverityError, InvalidSubgroupError
from ntstatusgen.facilities import Subgroup, lookup_subgroup

STATUS_VALUE_BITS = 32
STATUS_VALUE_MASK = (1 << STATUS_VALUE_BITS) - 1

CODE_SHIFT = 0
CODE_BITS = 12
SUBGROUP_SHIFT = CODE_SHIFT + CODE_BITS
SUBGROUP_BITS = 16
SEVERITY_SHIFT = SUBGROUP_SHIFT + SUBGROUP_BITS
SEVERITY_BITS = 4

CODE_MASK = ((1 << CODE_BITS) - 1) << CODE_SHIFT
SUBGROUP_MASK = ((1 << SUBGROUP_BITS) - 1) << SUBGROUP_SHIFT
SEVERITY_MASK = ((1 << SEVERITY_BITS) - 1) << SEVERITY_SHIFT


class Severity(IntEnum):
    """Severity nibble of a packed status value."""

    SUCCESS = 0x0
    INFO = 0x4
    WARNING = 0x8
    ERROR = 0xC

    @property
    def group_name(self) -> str:
        """Name used for the generated group ("Success", "Info", ...)."""
        return self.name.capitalize()


class DecodedStatus(NamedTuple):
    """The three fields of a packed status value."""

    severity: Severity
    subgroup: Subgroup
    code: int


def split_status(raw: int) -> tuple:
    """Splits a packed value into raw (severity, subgroup, code) integers without validation."""
    raw &= STATUS_VALUE_MASK
    severity = (raw & SEVERITY_MASK) >> SEVERITY_SHIFT
    subgroup = (raw & SUBGROUP_MASK) >> SUBGROUP_SHIFT
    code = (raw & CODE_MASK) >> CODE_SHIFT
    return severity, subgroup, code


def decode_status(raw: int) -> DecodedStatus:
    """Decodes a packed 32-bit status value.

    Args:
        raw (int): packed status value

    Returns:
        (DecodedStatus): severity, subgroup and code

    Raises:
        InvalidSeverityError: the top nibble is not 0x0, 0x4, 0x8 or 0xC
        InvalidSubgroupError: the subgroup bits match no known facility
    """
    severity, subgroup, code = split_status(raw)
    try:
        severity = Severity(severity)
    except ValueError:
        raise InvalidSeverityError(severity) from None

    known = lookup_subgroup(subgroup)
    if known is None:
        raise InvalidSubgroupError(subgroup)
    return DecodedStatus(severity, known, code)


def encode_status(severity: int, subgroup: int, code: int) -> int:
    """Packs a severity, subgroup and code back into one 32-bit value.

    Raises:
        ValueError: a field does not fit its width
    """
    if not 0 <= severity < (1 << SEVERITY_BITS):
        raise ValueError(f"Severity 0x{severity:X} does not fit in {SEVERITY_BITS} bits")
    if not 0 <= subgroup < (1 << SUBGROUP_BITS):
        raise ValueError(f"Subgroup 0x{subgroup:X} does not fit in {SUBGROUP_BITS} bits")
    if not 0 <= code < (1 << CODE_BITS):
        raise ValueError(f"Code 0x{code:X} does not fit in {CODE_BITS} bits")
    return (int(severity) << SEVERITY_SHIFT) | (int(subgroup) << SUBGROUP_SHIFT) | (int(code) << CODE_SHIFT)


def merge_subgroup_and_code(subgroup: int, code: int) -> int:
    """The dispatch key of a status: the packed value with the severity removed."""
    return encode_status(0, subgroup, code)
