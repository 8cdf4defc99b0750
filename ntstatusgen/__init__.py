# @file __init__.py
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Generate NTSTATUS lookup tables from a status code catalogue dump.

The pipeline scans `<tr>` records out of a markup dump, decodes each packed
32-bit status value into its severity, subgroup and code, buckets the records
by severity and renders one table plus one dispatch function per bucket.
"""

TOOL_VERSION = "0.3.0"  # please change this as the tool is updated.
