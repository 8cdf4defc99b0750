# @file facilities.py
# The closed table of NTSTATUS facilities (subgroups) and their umbrellas.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""NTSTATUS facility table.

Each raw facility value carries the prefix used when displaying a status name.
A few facilities are siblings under one umbrella (RPC, NDIS, IPSEC). Umbrellas
only exist for the dump filter; they are never produced by decoding.
"""

from enum import Enum, IntEnum
from typing import Iterable, NamedTuple, Optional, Union


class Subgroup(IntEnum):
    """Raw facility values as found in bits 12-27 of a packed status."""

    STATUS = 0x000
    WOW = 0x009
    INVALID = 0x00A
    DBG = 0x010
    RPCA = 0x020
    RPCB = 0x030
    PNP = 0x040
    CTX = 0x0A0
    MUI = 0x0B0
    CLUSTER = 0x130
    ACPI = 0x140
    SXS = 0x150
    RECOVERY = 0x190
    LOG = 0x1A0
    VIDEO = 0x1B0
    FLT = 0x1C0
    MONITOR = 0x1D0
    GRAPHICS = 0x1E0
    FVE = 0x210
    FWP = 0x220
    NDISA = 0x230
    NDISB = 0x231
    NDISC = 0x232
    IPSECA = 0x360
    IPSECB = 0x368
    VOLMGR = 0x380
    VIRTDISK = 0x3A0


class MetaSubgroup(Enum):
    """Umbrella labels covering several raw facilities."""

    RPC = "RPC"
    NDIS = "NDIS"
    IPSEC = "IPSEC"


class FacilityInfo(NamedTuple):
    """Display prefix and optional umbrella of one raw facility."""

    prefix: str
    umbrella: Optional[MetaSubgroup] = None


FACILITIES = {
    Subgroup.STATUS: FacilityInfo("STATUS"),
    Subgroup.WOW: FacilityInfo("WOW"),
    Subgroup.INVALID: FacilityInfo("INVALID"),
    Subgroup.DBG: FacilityInfo("DBG"),
    Subgroup.RPCA: FacilityInfo("RPC", MetaSubgroup.RPC),
    Subgroup.RPCB: FacilityInfo("RPC", MetaSubgroup.RPC),
    Subgroup.PNP: FacilityInfo("PNP"),
    Subgroup.CTX: FacilityInfo("CTX"),
    Subgroup.MUI: FacilityInfo("MUI"),
    Subgroup.CLUSTER: FacilityInfo("CLUSTER"),
    Subgroup.ACPI: FacilityInfo("ACPI"),
    Subgroup.SXS: FacilityInfo("SXS"),
    Subgroup.RECOVERY: FacilityInfo("RECOVERY"),
    Subgroup.LOG: FacilityInfo("LOG"),
    Subgroup.VIDEO: FacilityInfo("VIDEO"),
    Subgroup.FLT: FacilityInfo("FLT"),
    Subgroup.MONITOR: FacilityInfo("MONITOR"),
    Subgroup.GRAPHICS: FacilityInfo("GRAPHICS"),
    Subgroup.FVE: FacilityInfo("FVE"),
    Subgroup.FWP: FacilityInfo("FWP"),
    Subgroup.NDISA: FacilityInfo("NDIS", MetaSubgroup.NDIS),
    Subgroup.NDISB: FacilityInfo("NDIS", MetaSubgroup.NDIS),
    Subgroup.NDISC: FacilityInfo("NDIS", MetaSubgroup.NDIS),
    Subgroup.IPSECA: FacilityInfo("IPSEC", MetaSubgroup.IPSEC),
    Subgroup.IPSECB: FacilityInfo("IPSEC", MetaSubgroup.IPSEC),
    Subgroup.VOLMGR: FacilityInfo("VOLMGR"),
    Subgroup.VIRTDISK: FacilityInfo("VIRTDISK"),
}

# Facilities whose codes live outside the generic STATUS_ namespace
NON_STATUS_SUBGROUPS = frozenset((Subgroup.DBG, Subgroup.RPCA, Subgroup.RPCB))

SubgroupLike = Union[Subgroup, MetaSubgroup, str]


def lookup_subgroup(raw: int) -> Optional[Subgroup]:
    """Returns the facility for a raw subgroup value, or None if unknown."""
    try:
        return Subgroup(raw)
    except ValueError:
        return None


def get_subgroup_prefix(subgroup: int) -> str:
    """Returns the display prefix of a facility, or an empty string if unknown."""
    known = lookup_subgroup(subgroup)
    if known is None:
        return ""
    return FACILITIES[known].prefix


def in_status_subgroup(subgroup: Subgroup) -> bool:
    """True if the facility shares the generic STATUS_ naming."""
    return subgroup not in NON_STATUS_SUBGROUPS


def resolve_subgroup_name(name: str) -> Union[Subgroup, MetaSubgroup]:
    """Maps a user supplied name ("RPC", "dbg", ...) onto a facility or umbrella.

    Raises:
        ValueError: the name matches neither a facility nor an umbrella.
    """
    key = name.strip().upper()
    if key in MetaSubgroup.__members__:
        return MetaSubgroup[key]
    if key in Subgroup.__members__:
        return Subgroup[key]
    raise ValueError(f"Unknown subgroup: {name}")


def expand_exclusion(subgroup: SubgroupLike) -> frozenset:
    """Expands an umbrella into every raw facility it covers.

    A raw facility expands to itself. Strings are resolved by name first.
    """
    if isinstance(subgroup, str):
        subgroup = resolve_subgroup_name(subgroup)
    if isinstance(subgroup, MetaSubgroup):
        return frozenset(sg for sg, info in FACILITIES.items() if info.umbrella is subgroup)
    return frozenset((Subgroup(subgroup),))


def expand_exclusions(subgroups: Iterable[SubgroupLike]) -> frozenset:
    """Expands a collection of facilities and umbrellas into one exclusion set."""
    excluded = frozenset()
    for subgroup in subgroups:
        excluded |= expand_exclusion(subgroup)
    return excluded
