# @file ntstatus_tool.py
# This module contains the CLI interface for generating NTSTATUS lookup tables
# from a status code catalogue dump.
#
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""A Command-line tool to generate NTSTATUS lookup tables.

NtStatus Tool reads a catalogue of NTSTATUS values (an html table with one
`<tr>` per status holding the value, the name and the message in `<p>` fields)
and produces an include file with one lookup table and dispatch function per
severity.
"""

import argparse
import logging
import os
import sys
import typing

import yaml

from ntstatusgen import TOOL_VERSION, ntstatus_logging
from ntstatusgen.config import GeneratorConfig, load_options_file, parse_large_group_size, update_options
from ntstatusgen.status_parser import NtStatusParser

TOOL_DESCRIPTION = """
NtStatus Tool is a command-line tool that turns a catalogue of NTSTATUS values
into lookup tables. Every record is decoded into its severity, facility and
code; each severity is emitted as a table and a switch over (facility, code).

Version: %s

An example call might look like:
%s /path/to/ntstatus.html /path/to/NtStatusTable.inc

An example that dumps the parsed groups, hiding the RPC and NDIS facilities:
%s --dump -x RPC -x NDIS /path/to/ntstatus.html /path/to/NtStatusTable.inc
""" % (TOOL_VERSION, os.path.basename(sys.argv[0]), os.path.basename(sys.argv[0]))


def get_cli_options(args: typing.Sequence[str] = None) -> argparse.Namespace:
    """Parse options from the command line.

    Will parse the primary options from the command line. If provided, will take the options as
    an array in the first parameter
    """
    parser = argparse.ArgumentParser(description=TOOL_DESCRIPTION, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("input_file", type=str, help="a filesystem path to the status code catalogue")
    parser.add_argument(
        "output_file",
        type=str,
        help="a filesystem path to the output file. if file does not exist, entire directory path will be created. if file does exist, contents will be overwritten",  # noqa
    )

    parser.add_argument("-o", dest="options_file", type=argparse.FileType("r"),
                        help="a filesystem path to a json/yaml file to load with default options. will be overriden by any options parameters")  # noqa
    parser.add_argument("-c", action="append", dest="options", type=str, default=[],
                        help="add an option. format is <option_name>=<option_value>")
    parser.add_argument("--large-group-size", dest="large_group_size", type=str, default=None,
                        help="bucket size above which batched emission is used, or 'unbounded' (default)")
    parser.add_argument("--dump", dest="dump", action="store_true", default=None,
                        help="print the parsed groups before writing the output")
    parser.add_argument("-x", "--exclude", action="append", dest="exclude", default=None,
                        help="facility or umbrella (RPC, NDIS, IPSEC) to hide from the dump")
    parser.add_argument("--no-color", dest="use_color", action="store_false", default=None,
                        help="disable colored console output")
    parser.add_argument("-v", "--verbose", dest="verbose", action="store_true", default=False,
                        help="show debug output")
    return parser.parse_args(args=args)


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Merges the options file, `-c` options and explicit flags into one config.

    Without any setting the command line tool emits every group linearly.

    Raises:
        ValueError: an option is unknown or invalid
    """
    options = update_options(load_options_file(args.options_file), args.options)
    options.setdefault("large_group_size", "unbounded")
    if args.large_group_size is not None:
        options["large_group_size"] = parse_large_group_size(args.large_group_size)
    if args.dump is not None:
        options["dump"] = args.dump
    if args.exclude is not None:
        options["exclude"] = args.exclude
    if args.use_color is not None:
        options["use_color"] = args.use_color
    return GeneratorConfig.from_options(options)


def read_input(input_file: str) -> str:
    """Reads the catalogue, replacing undecodable bytes."""
    with open(input_file, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def run(config: GeneratorConfig, input_file: str, output_file: str) -> int:
    """Parses, optionally dumps, and writes. Returns the process exit code."""
    input_path = os.path.abspath(input_file)
    if not os.path.isfile(input_path):
        logging.error(f'Could not locate the file "{input_path}".')
        return 1

    try:
        buffer = read_input(input_path)
    except OSError as e:
        logging.error(f"Could not open {input_path}: {e}")
        return 1

    ntstatus_logging.log_section(f"Parsing {input_path}")
    parser = NtStatusParser(buffer, input_path, config.large_group_size)
    if not parser.parse():
        logging.error("Parsing failed.")
        return 1

    if config.dump:
        parser.dump_groups(config.exclude, use_color=config.use_color)

    ntstatus_logging.log_section(f"Writing {output_file}")
    if not parser.write_to_file(output_file):
        logging.error("Writing failed.")
        return 1
    ntstatus_logging.log_progress(f"Wrote {output_file}")
    return 0


def main() -> None:
    """Parse args, executes ntstatus_tool."""
    args = get_cli_options()
    try:
        config = build_config(args)
    except (ValueError, yaml.YAMLError) as e:
        logging.getLogger().addHandler(logging.StreamHandler())
        logging.error(str(e))
        sys.exit(1)

    level = logging.DEBUG if args.verbose else logging.INFO
    handler = ntstatus_logging.setup_console_logging(level, isVerbose=args.verbose, use_color=config.use_color)
    try:
        exit_code = run(config, args.input_file, args.output_file)
    finally:
        ntstatus_logging.stop_logging(handler)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
