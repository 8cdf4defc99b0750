# @file status_registry.py
# Severity buckets of decoded status records for one parsing pass.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Status record registry.

The registry owns four append-only buckets, one per severity, and the set of
every packed value seen so far. It is filled during one parsing pass;
`complete()` closes it and any later write raises `RuntimeError`. Buckets are
handed out as tuples.
"""

import logging
from enum import Enum
from typing import Iterable, Iterator, NamedTuple, Optional

from ntstatusgen.errors import StatusRecordError
from ntstatusgen.facilities import SubgroupLike, Subgroup, expand_exclusions
from ntstatusgen.status_layout import Severity, decode_status

DEFAULT_LARGE_GROUP_SIZE = 64
# Threshold value that turns the large group check off
UNBOUNDED = -1

logger = logging.getLogger(__name__)


class StatusRecord(NamedTuple):
    """One decoded status entry.

    Attributes:
        code (int): low 12 bits of the packed value
        subgroup (Subgroup): facility of the status
        name (str): status name with the STATUS_ prefix removed
        message (str): message text as found in the source
    """

    code: int
    subgroup: Subgroup
    name: str
    message: str


class InsertOutcome(Enum):
    """Result of offering one packed value to the registry."""

    ACCEPTED = "accepted"
    DUPLICATE_SKIPPED = "duplicate"
    REJECTED = "rejected"


class StatusRegistry(object):
    """Buckets decoded statuses by severity and tracks parse success.

    Attributes:
        large_group_size (int): bucket size above which a bucket is "large",
            or UNBOUNDED to treat every bucket as small
        source_id (str): name of the parsed buffer, used in diagnostics
    """

    def __init__(self, large_group_size: int = DEFAULT_LARGE_GROUP_SIZE, source_id: str = "<buffer>") -> None:
        """Inits an empty registry for the pass over `source_id`."""
        if large_group_size != UNBOUNDED and large_group_size < 0:
            raise ValueError(f"Invalid large group size: {large_group_size}")
        self.large_group_size = large_group_size
        self.source_id = source_id
        self._buckets = {severity: [] for severity in Severity}
        self._seen_values = set()
        self._had_failure = False
        self._completed = False

    @property
    def successes(self) -> tuple:
        """Records with SUCCESS severity, in source order."""
        return self.bucket(Severity.SUCCESS)

    @property
    def infos(self) -> tuple:
        """Records with INFO severity, in source order."""
        return self.bucket(Severity.INFO)

    @property
    def warnings(self) -> tuple:
        """Records with WARNING severity, in source order."""
        return self.bucket(Severity.WARNING)

    @property
    def errors(self) -> tuple:
        """Records with ERROR severity, in source order."""
        return self.bucket(Severity.ERROR)

    @property
    def completed(self) -> bool:
        """True once complete() closed the pass."""
        return self._completed

    @property
    def parse_succeeded(self) -> bool:
        """True once the pass completed with no rejected record."""
        return self._completed and not self._had_failure

    def bucket(self, severity: Severity) -> tuple:
        """Returns a snapshot of the records of one severity."""
        return tuple(self._buckets[Severity(severity)])

    def iter_buckets(self) -> Iterator[tuple]:
        """Yields (severity, records) in SUCCESS, INFO, WARNING, ERROR order."""
        for severity in Severity:
            yield severity, self.bucket(severity)

    def has_seen(self, raw: int) -> bool:
        """True if the packed value was already offered to the registry."""
        return raw in self._seen_values

    def __len__(self) -> int:
        """Number of stored records across all buckets."""
        return sum(len(records) for records in self._buckets.values())

    def _check_open(self) -> None:
        if self._completed:
            raise RuntimeError(f"The parsing pass over {self.source_id} is complete; its registry is read-only.")

    def check_duplicate(self, raw: int, name: str = "") -> bool:
        """Marks a packed value as seen.

        Called as soon as the code field is read, so a repeated value is
        skipped even when the rest of its record is malformed.

        Returns:
            (bool): True if the value was seen before and must be skipped
        """
        self._check_open()
        if raw in self._seen_values:
            logger.debug(f"Skipping duplicate status 0x{raw:08X} ({name or 'unnamed'}).")
            return True
        self._seen_values.add(raw)
        return False

    def add(self, raw: int, name: str, message: str) -> InsertOutcome:
        """Decodes a packed value already marked as seen and appends it to its bucket.

        Returns:
            (InsertOutcome): ACCEPTED, or REJECTED if the value does not decode
        """
        self._check_open()
        try:
            decoded = decode_status(raw)
        except StatusRecordError as e:
            self.reject(f"{e} (0x{raw:08X}).")
            return InsertOutcome.REJECTED

        self._buckets[decoded.severity].append(StatusRecord(decoded.code, decoded.subgroup, name, message))
        return InsertOutcome.ACCEPTED

    def insert(self, raw: int, name: str, message: str) -> InsertOutcome:
        """Decodes a packed value and appends it to its severity bucket.

        A value seen before is skipped without counting as a failure. A value
        that fails to decode is rejected and marks the pass as failed.

        Args:
            raw (int): packed 32-bit status value
            name (str): status name, prefix already stripped
            message (str): status message

        Returns:
            (InsertOutcome): what happened to the value

        Raises:
            RuntimeError: the pass was already completed
        """
        if self.check_duplicate(raw, name):
            return InsertOutcome.DUPLICATE_SKIPPED
        return self.add(raw, name, message)

    def reject(self, reason: str) -> None:
        """Records a rejected record and marks the pass as failed."""
        self._check_open()
        logger.error(reason)
        self._had_failure = True

    def complete(self) -> bool:
        """Closes the pass and returns whether it succeeded."""
        self._completed = True
        return self.parse_succeeded

    def is_large_group(self, records: list) -> bool:
        """True if the bucket holds more records than the configured threshold."""
        if self.large_group_size == UNBOUNDED:
            return False
        return len(records) > self.large_group_size

    @staticmethod
    def expand_exclusions(subgroups: Optional[Iterable[SubgroupLike]]) -> frozenset:
        """Expands umbrellas (RPC, NDIS, IPSEC) into the raw facilities they cover."""
        if not subgroups:
            return frozenset()
        return expand_exclusions(subgroups)
