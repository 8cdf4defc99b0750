## @file test_status_registry.py
# This contains unit tests for the status registry
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Tests for StatusRegistry."""

import logging

import pytest
from ntstatusgen.facilities import MetaSubgroup, Subgroup
from ntstatusgen.status_layout import Severity
from ntstatusgen.status_registry import (
    DEFAULT_LARGE_GROUP_SIZE,
    UNBOUNDED,
    InsertOutcome,
    StatusRecord,
    StatusRegistry,
)


@pytest.fixture
def registry() -> StatusRegistry:
    """An empty registry with the default threshold."""
    return StatusRegistry()


class TestInsert:
    """Tests StatusRegistry.insert."""

    def test_buckets_by_severity(self, registry: StatusRegistry) -> None:
        """Records land in the bucket of their severity, in insertion order."""
        assert registry.insert(0x00000000, "SUCCESS", "ok") is InsertOutcome.ACCEPTED
        assert registry.insert(0x40000000, "OBJECT_NAME_EXISTS", "exists") is InsertOutcome.ACCEPTED
        assert registry.insert(0x80000001, "GUARD_PAGE_VIOLATION", "guard") is InsertOutcome.ACCEPTED
        assert registry.insert(0xC0000005, "ACCESS_VIOLATION", "av") is InsertOutcome.ACCEPTED
        assert registry.insert(0xC0000001, "UNSUCCESSFUL", "fail") is InsertOutcome.ACCEPTED

        assert registry.successes == (StatusRecord(0, Subgroup.STATUS, "SUCCESS", "ok"),)
        assert [r.name for r in registry.infos] == ["OBJECT_NAME_EXISTS"]
        assert [r.name for r in registry.warnings] == ["GUARD_PAGE_VIOLATION"]
        assert [r.name for r in registry.errors] == ["ACCESS_VIOLATION", "UNSUCCESSFUL"]
        assert registry.bucket(Severity.ERROR) == registry.errors
        assert len(registry) == 5
        assert registry.complete() is True

    def test_duplicate_is_not_a_failure(self, registry: StatusRegistry) -> None:
        """The same packed value twice stores one record and keeps success."""
        assert registry.insert(0xC0000005, "ACCESS_VIOLATION", "first") is InsertOutcome.ACCEPTED
        assert registry.insert(0xC0000005, "ACCESS_VIOLATION", "second") is InsertOutcome.DUPLICATE_SKIPPED
        assert len(registry.errors) == 1
        assert registry.errors[0].message == "first"
        assert registry.complete() is True

    def test_invalid_severity_fails_the_pass(self, registry: StatusRegistry, caplog) -> None:
        """A bad severity nibble is rejected and fails the pass."""
        with caplog.at_level(logging.ERROR):
            assert registry.insert(0x20000001, "BAD", "bad") is InsertOutcome.REJECTED
        assert "Invalid CodeGroup" in caplog.text
        assert len(registry) == 0
        assert registry.complete() is False

    def test_invalid_subgroup_fails_the_pass(self, registry: StatusRegistry) -> None:
        """An unknown facility is rejected and fails the pass."""
        assert registry.insert(0xC0001001, "BAD", "bad") is InsertOutcome.REJECTED
        assert registry.complete() is False

    def test_rejected_value_is_still_seen(self, registry: StatusRegistry) -> None:
        """A rejected value is remembered, so repeating it is only a duplicate."""
        registry.insert(0xC0001001, "BAD", "bad")
        assert registry.has_seen(0xC0001001)
        assert registry.insert(0xC0001001, "BAD", "bad") is InsertOutcome.DUPLICATE_SKIPPED

    def test_partial_success_is_queryable(self, registry: StatusRegistry) -> None:
        """Accepted records survive a failed pass."""
        registry.insert(0xC0000005, "ACCESS_VIOLATION", "av")
        registry.reject("Couldn't locate status name.")
        assert registry.complete() is False
        assert [r.code for r in registry.errors] == [5]

    def test_not_successful_before_complete(self, registry: StatusRegistry) -> None:
        """The pass only succeeds once it is completed."""
        registry.insert(0x00000000, "SUCCESS", "ok")
        assert registry.parse_succeeded is False
        registry.complete()
        assert registry.parse_succeeded is True

    def test_closed_after_complete(self, registry: StatusRegistry) -> None:
        """A completed pass refuses further records and rejections."""
        registry.insert(0x00000000, "SUCCESS", "ok")
        assert registry.complete() is True
        with pytest.raises(RuntimeError):
            registry.insert(0xC0000005, "ACCESS_VIOLATION", "av")
        with pytest.raises(RuntimeError):
            registry.reject("late failure")
        assert len(registry) == 1
        assert registry.parse_succeeded is True

    def test_buckets_are_snapshots(self, registry: StatusRegistry) -> None:
        """Buckets are handed out as tuples that cannot change the registry."""
        registry.insert(0xC0000005, "ACCESS_VIOLATION", "av")
        errors = registry.errors
        assert isinstance(errors, tuple)
        registry.insert(0xC0000001, "UNSUCCESSFUL", "fail")
        assert len(errors) == 1
        assert len(registry.errors) == 2

    def test_check_duplicate_marks_seen(self, registry: StatusRegistry) -> None:
        """The first check records the value; the second reports the duplicate."""
        assert registry.check_duplicate(0xC0000005) is False
        assert registry.check_duplicate(0xC0000005) is True
        assert len(registry) == 0

    def test_iter_buckets_order(self, registry: StatusRegistry) -> None:
        """Buckets come out in severity order."""
        assert [severity for severity, _ in registry.iter_buckets()] == [
            Severity.SUCCESS,
            Severity.INFO,
            Severity.WARNING,
            Severity.ERROR,
        ]


class TestLargeGroup:
    """Tests StatusRegistry.is_large_group."""

    def test_default_threshold(self, registry: StatusRegistry) -> None:
        """The threshold itself is small; one more is large."""
        assert registry.large_group_size == DEFAULT_LARGE_GROUP_SIZE == 64
        assert registry.is_large_group([None] * 64) is False
        assert registry.is_large_group([None] * 65) is True

    def test_custom_threshold(self) -> None:
        """Registries with different thresholds coexist."""
        small = StatusRegistry(2)
        large = StatusRegistry(10)
        bucket = [None] * 3
        assert small.is_large_group(bucket) is True
        assert large.is_large_group(bucket) is False

    def test_unbounded(self) -> None:
        """The unbounded sentinel makes every bucket small."""
        registry = StatusRegistry(UNBOUNDED)
        assert registry.is_large_group([None] * 100000) is False

    def test_invalid_threshold(self) -> None:
        """Negative thresholds other than the sentinel are refused."""
        with pytest.raises(ValueError):
            StatusRegistry(-5)


class TestExclusions:
    """Tests StatusRegistry.expand_exclusions."""

    def test_expand(self) -> None:
        """Umbrellas expand to their raw facilities."""
        assert StatusRegistry.expand_exclusions([MetaSubgroup.RPC]) == {Subgroup.RPCA, Subgroup.RPCB}
        assert StatusRegistry.expand_exclusions(["NDIS", "DBG"]) == {
            Subgroup.NDISA,
            Subgroup.NDISB,
            Subgroup.NDISC,
            Subgroup.DBG,
        }

    def test_nothing_excluded(self) -> None:
        """No exclusions is an empty set."""
        assert StatusRegistry.expand_exclusions(None) == frozenset()
