# @file status_dump.py
# Prints the parsed severity buckets to the console.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Console dump of parsed status groups.

Lines are colored by what kind of status they describe:

- green: outside the generic STATUS_ facility and the message has format specifiers
- cyan: outside the generic STATUS_ facility
- yellow: the message has format specifiers
- white: everything else

Groups marked with `*` are small enough to be emitted linearly.
"""

import sys
from typing import Optional, TextIO

from edk2toollib.log.ansi_handler import AnsiColor, get_ansi_string

from ntstatusgen.facilities import get_subgroup_prefix, in_status_subgroup
from ntstatusgen.status_registry import StatusRecord, StatusRegistry

PREFIX_WIDTH = 8


def get_record_color(record: StatusRecord) -> int:
    """Picks the dump color of a record."""
    non_status = not in_status_subgroup(record.subgroup)
    format_string = "%" in record.message
    if non_status and format_string:
        return AnsiColor.GREEN
    if non_status:
        return AnsiColor.CYAN
    if format_string:
        return AnsiColor.YELLOW
    return AnsiColor.WHITE


def split_subgroup_prefix(record: StatusRecord) -> tuple:
    """Splits a record name into its facility prefix and the rest.

    Returns:
        (tuple[str, str]): the prefix and the name without it
    """
    prefix = get_subgroup_prefix(record.subgroup)
    name = record.name
    if name.startswith(prefix):
        name = name[len(prefix):]
    if name.startswith("_"):
        name = name[1:]
    return prefix, name


def format_record_line(record: StatusRecord) -> str:
    """The dump line of one record, without color."""
    prefix, name = split_subgroup_prefix(record)
    return f"  - [{prefix.center(PREFIX_WIDTH)}] {name}: 0x{record.code:03X}"


def dump_group(group_name: str, records: list, registry: StatusRegistry, exclude: frozenset,
               stream: TextIO, use_color: bool = True) -> None:
    """Prints one group, skipping records of excluded facilities."""
    marker = "" if registry.is_large_group(records) else "*"
    stream.write(f"Group<{group_name}>{marker}: {{\n")
    for record in records:
        if record.subgroup in exclude:
            continue
        line = format_record_line(record)
        if use_color:
            line = get_ansi_string(get_record_color(record)) + line + get_ansi_string()
        stream.write(line + "\n")
    stream.write("}\n\n")


def dump_groups(registry: StatusRegistry, exclude: Optional[frozenset] = None,
                stream: Optional[TextIO] = None, use_color: bool = True) -> None:
    """Prints every group of the registry in severity order."""
    stream = stream or sys.stdout
    for severity, records in registry.iter_buckets():
        dump_group(severity.group_name, records, registry, exclude or frozenset(), stream, use_color)
