# @file status_parser.py
# Runs one parsing pass over a status catalogue dump and writes the tables.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Parser facade used by the command line tool.

One `NtStatusParser` owns one buffer and one `StatusRegistry`:

    parser = NtStatusParser(text, "ntstatus.html")
    if parser.parse():
        parser.write_to_file("NtStatusTable.inc")
"""

import io
import logging
import os
from typing import Iterable, Optional, TextIO

from ntstatusgen import TOOL_VERSION
from ntstatusgen.errors import StatusRecordError
from ntstatusgen.facilities import SubgroupLike
from ntstatusgen.group_emitter import GroupEmitter
from ntstatusgen.status_dump import dump_groups
from ntstatusgen.status_registry import DEFAULT_LARGE_GROUP_SIZE, InsertOutcome, StatusRegistry
from ntstatusgen.table_scanner import TagScanner, extract_name_and_message, parse_status_code

logger = logging.getLogger(__name__)


class NtStatusParser(object):
    """Parses a catalogue dump into a registry and renders it.

    Attributes:
        buffer (str): the catalogue text; records are slices of it
        buffer_id (str): name of the buffer used in diagnostics and the output banner
        registry (StatusRegistry): the decoded records of the latest pass
    """

    def __init__(self, buffer: str, buffer_id: str = "<buffer>",
                 large_group_size: int = DEFAULT_LARGE_GROUP_SIZE) -> None:
        """Inits the parser over a buffer."""
        self.buffer = buffer
        self.buffer_id = buffer_id
        self.large_group_size = large_group_size
        self.registry = StatusRegistry(large_group_size, buffer_id)
        self.emit_failures = []

    @property
    def parse_successful(self) -> bool:
        """True if parse() ran and no record was rejected."""
        return self.registry.parse_succeeded

    @property
    def successes(self) -> tuple:
        """SUCCESS records."""
        return self.registry.successes

    @property
    def infos(self) -> tuple:
        """INFO records."""
        return self.registry.infos

    @property
    def warnings(self) -> tuple:
        """WARNING records."""
        return self.registry.warnings

    @property
    def errors(self) -> tuple:
        """ERROR records."""
        return self.registry.errors

    def parse(self) -> bool:
        """Scans every record of the buffer into a fresh registry.

        The duplicate check runs as soon as the code field is read, so a
        repeated value is skipped even if the rest of its record is malformed.
        Other malformed records are logged and rejected. Records accepted
        before a failure stay in the registry.

        Returns:
            (bool): True if no record was rejected
        """
        self.registry = StatusRegistry(self.large_group_size, self.buffer_id)
        counts = {outcome: 0 for outcome in InsertOutcome}
        for section in TagScanner(self.buffer):
            counts[self._parse_record(section)] += 1

        logger.info(
            f"Parsed {self.buffer_id}: {counts[InsertOutcome.ACCEPTED]} accepted, "
            f"{counts[InsertOutcome.DUPLICATE_SKIPPED]} duplicate(s), "
            f"{counts[InsertOutcome.REJECTED]} rejected."
        )
        return self.registry.complete()

    def _parse_record(self, section: str) -> InsertOutcome:
        try:
            raw_code, section = parse_status_code(section)
        except StatusRecordError as e:
            self.registry.reject(f"{e}.")
            return InsertOutcome.REJECTED

        if self.registry.check_duplicate(raw_code):
            return InsertOutcome.DUPLICATE_SKIPPED

        try:
            name, message = extract_name_and_message(section)
        except StatusRecordError as e:
            self.registry.reject(f"{e} (0x{raw_code:08X}).")
            return InsertOutcome.REJECTED
        return self.registry.add(raw_code, name, message)

    def write(self, stream: TextIO, log: Optional[logging.Logger] = None) -> bool:
        """Renders every non-empty bucket to a stream.

        Buckets that fail to render are skipped; the others are still written.

        Returns:
            (bool): True if every bucket rendered
        """
        stream.write("// Auto-generated NTSTATUS lookup tables.\n")
        stream.write(f"// Source: {os.path.basename(self.buffer_id)}\n")
        stream.write(f"// Tool Version: {TOOL_VERSION}\n\n")

        emitter = GroupEmitter(stream, self.registry, log)
        success = emitter.emit_all()
        self.emit_failures = list(emitter.failures)
        if not success:
            logger.error("Failed to emit group(s): " + ", ".join(emitter.failures) + ".")
        return success

    def write_to_file(self, filename: str) -> bool:
        """Renders the tables and writes them to `filename`.

        The parent directory is created if needed. Nothing is written when a
        bucket fails to render.

        Returns:
            (bool): True if the file was written
        """
        rendered = io.StringIO()
        if not self.write(rendered):
            return False

        try:
            directory = os.path.dirname(os.path.abspath(filename))
            os.makedirs(directory, exist_ok=True)
            with open(filename, "w", newline="\n") as out:
                out.write(rendered.getvalue())
        except OSError as e:
            logger.error(f"Could not write {filename}: {e}")
            return False
        return True

    def dump_groups(self, exclude: Optional[Iterable[SubgroupLike]] = None,
                    stream: Optional[TextIO] = None, use_color: bool = True) -> bool:
        """Prints every bucket, skipping the excluded facilities.

        Returns:
            (bool): False if the buffer was not parsed successfully
        """
        if not self.parse_successful:
            logger.error(
                f'Not dumping "{self.buffer_id}"; either parse() was never called, or an error occurred.'
            )
            return False
        dump_groups(self.registry, self.registry.expand_exclusions(exclude), stream, use_color)
        return True
