# @file group_emitter.py
# Renders severity buckets into lookup tables and dispatch functions.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Lookup table emission.

Each non-empty severity bucket becomes one aggregate holding a static table of
`$NewPErr(name, message)` entries and a `Get` function that switches on the
merged (subgroup, code) key:

    #define CURR_SEVERITY Error
    struct _ErrorGroup {
      static constexpr IOpaqueError table[] {
        $NewPErr("AccessViolation", "The instruction referenced invalid memory.")
      };

      static OpaqueError Get(OpqErrorID ID) {
        switch (ID) {
         case 0x000005: return &table[0];
         default: return nullptr;
        }
      }
    };
    #undef CURR_SEVERITY

Buckets larger than the registry's large group threshold would be split into
batches; that strategy is not available yet and reports NOT_IMPLEMENTED.
"""

import logging
import re
from enum import Enum
from typing import Optional, TextIO

from ntstatusgen.status_layout import Severity, merge_subgroup_and_code
from ntstatusgen.status_registry import StatusRecord, StatusRegistry

NAME_SEPARATOR = "_"
TABLE_NAME = "table"
LOOKUP_FUNCTION_NAME = "Get"

LINE_BREAK_REGEX = re.compile(r"\r\n|\r|\n")


class EmitOutcome(Enum):
    """Result of rendering one bucket."""

    SUCCESS = "success"
    FAILED = "failed"
    NOT_IMPLEMENTED = "not implemented"


def make_pascal_case(name: str) -> str:
    """Turns ACCESS_VIOLATION into AccessViolation."""
    output = ""
    for segment in name.split(NAME_SEPARATOR):
        if not segment:
            continue
        output += segment[0].upper() + segment[1:].lower()
    return output


def format_message(record: StatusRecord) -> str:
    """Collapses hard line breaks and escapes the message for a string literal."""
    message = LINE_BREAK_REGEX.sub("", record.message)
    return message.replace("\\", "\\\\").replace('"', '\\"')


def format_merged_code(record: StatusRecord) -> str:
    """The dispatch key of a record as a hex literal."""
    return f"0x{merge_subgroup_and_code(record.subgroup, record.code):06X}"


class GroupEmitter(object):
    """Writes one aggregate per severity bucket to a text stream.

    Attributes:
        failures (list[str]): group names whose emission failed
        outcomes (dict[Severity, EmitOutcome]): outcome of every attempted bucket
    """

    def __init__(self, stream: TextIO, registry: StatusRegistry, log: Optional[logging.Logger] = None) -> None:
        """Inits the emitter.

        Args:
            stream (TextIO): destination of the generated text
            registry (StatusRegistry): decides which buckets are large
            log (logging.Logger): sink for emission diagnostics
        """
        self.stream = stream
        self.registry = registry
        self.log = log or logging.getLogger(__name__)
        self.failures = []
        self.outcomes = {}
        self._did_emit_successfully = True

    @property
    def emit_successful(self) -> bool:
        """True if every attempted bucket rendered."""
        return self._did_emit_successfully

    def emit(self, severity: Severity, records: list) -> bool:
        """Renders one bucket and records the outcome."""
        outcome = self.do_emit(severity, records)
        self.outcomes[severity] = outcome
        if outcome is not EmitOutcome.SUCCESS:
            self._did_emit_successfully = False
            self.failures.append(severity.group_name)
            return False
        return True

    def emit_all(self) -> bool:
        """Renders every non-empty bucket of the registry in severity order."""
        for severity, records in self.registry.iter_buckets():
            if records:
                self.emit(severity, records)
        return self.emit_successful

    def do_emit(self, severity: Severity, records: list) -> EmitOutcome:
        """Picks the emission strategy for a bucket by its size."""
        if not records:
            self.log.error(f"Group {severity.group_name} is empty.")
            return EmitOutcome.FAILED
        if self.registry.is_large_group(records):
            return self.batched_emit(severity, records)
        return self.linear_emit(severity, records)

    # strategies

    def linear_emit(self, severity: Severity, records: list) -> EmitOutcome:
        """Renders the whole bucket as one table and one switch."""
        group_name = severity.group_name
        self.log.debug(f"Group {group_name} is linear (Size: {len(records)}).")

        self.stream.write(f"#define CURR_SEVERITY {group_name}\n")
        self.stream.write(f"struct _{group_name}Group {{\n")
        self.emit_table_switch_pair(records, LOOKUP_FUNCTION_NAME, TABLE_NAME)
        self.stream.write("};\n#undef CURR_SEVERITY\n\n")
        return EmitOutcome.SUCCESS

    def batched_emit(self, severity: Severity, records: list) -> EmitOutcome:
        """Would split a large bucket into several dispatch units."""
        # TODO pick a batching policy for large buckets before rendering anything here.
        self.log.debug(f"Group {severity.group_name} is batched (Size: {len(records)}).")
        self.log.error(f"Batched emission is not supported yet; group {severity.group_name} was not emitted.")
        return EmitOutcome.NOT_IMPLEMENTED

    # renderers

    def emit_table_switch_pair(self, records: list, func_name: str, table_name: str) -> None:
        """Writes the table followed by the lookup function that indexes it."""
        self.emit_table(records, table_name)
        self.stream.write(f"  static OpaqueError {func_name}(OpqErrorID ID) {{\n")
        self.emit_switch(records, table_name)
        self.stream.write("  }\n")

    def emit_table(self, records: list, name: str) -> None:
        """Writes the static table, one constructed entry per record."""
        self.stream.write(f"  static constexpr IOpaqueError {name}[] {{\n")
        last = len(records) - 1
        for index, record in enumerate(records):
            self.emit_table_value(record, no_comma=(index == last))
        self.stream.write("  };\n\n")

    def emit_table_value(self, record: StatusRecord, no_comma: bool = False) -> None:
        """Writes one table entry."""
        separator = "" if no_comma else ","
        self.stream.write(
            f'    $NewPErr("{make_pascal_case(record.name)}", "{format_message(record)}"){separator}\n'
        )

    def emit_switch(self, records: list, table_name: str) -> None:
        """Writes the switch over merged codes with a nullptr default."""
        self.stream.write("    switch (ID) {\n")
        for index, record in enumerate(records):
            self.emit_switch_value(record, table_name, index)
        self.stream.write("     default: return nullptr;\n")
        self.stream.write("    }\n")

    def emit_switch_value(self, record: StatusRecord, table_name: str, index: int) -> None:
        """Writes the case returning the table entry at `index`."""
        self.stream.write(f"     case {format_merged_code(record)}: return &{table_name}[{index}];\n")
