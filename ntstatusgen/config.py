# @file config.py
# Generator options loaded from a yaml options file and the command line.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Generator configuration.

Options come from an optional yaml (or json) file and can be overridden with
`key=value` strings from the command line:

    large_group_size: unbounded
    dump: true
    exclude:
      - RPC
      - DBG
"""

import copy
from dataclasses import dataclass, field
from typing import Optional, TextIO

import yaml

from ntstatusgen.facilities import resolve_subgroup_name
from ntstatusgen.status_registry import DEFAULT_LARGE_GROUP_SIZE, UNBOUNDED

UNBOUNDED_NAMES = ("unbounded", "none", "-1")
TRUE_STRINGS = ("true", "yes", "on", "1")
FALSE_STRINGS = ("false", "no", "off", "0")

KNOWN_OPTIONS = ("large_group_size", "exclude", "dump", "use_color")


@dataclass(frozen=True)
class GeneratorConfig:
    """Settings of one generation pass.

    Attributes:
        large_group_size (int): bucket size above which batched emission is used,
            or UNBOUNDED to always emit linearly
        exclude (tuple[str]): facility or umbrella names hidden from the dump
        dump (bool): print the parsed groups before writing
        use_color (bool): color console output
    """

    large_group_size: int = DEFAULT_LARGE_GROUP_SIZE
    exclude: tuple = field(default_factory=tuple)
    dump: bool = False
    use_color: bool = True

    @classmethod
    def from_options(cls, options: Optional[dict]) -> "GeneratorConfig":
        """Builds a config from an options dictionary, validating every value.

        Raises:
            ValueError: unknown key or invalid value
        """
        options = options or {}
        unknown = [key for key in options if key not in KNOWN_OPTIONS]
        if unknown:
            raise ValueError("Unknown option(s): " + ", ".join(sorted(unknown)))

        kwargs = {}
        if "large_group_size" in options:
            kwargs["large_group_size"] = parse_large_group_size(options["large_group_size"])
        if "exclude" in options:
            kwargs["exclude"] = parse_exclusions(options["exclude"])
        if "dump" in options:
            kwargs["dump"] = parse_bool(options["dump"], "dump")
        if "use_color" in options:
            kwargs["use_color"] = parse_bool(options["use_color"], "use_color")
        return cls(**kwargs)


def parse_large_group_size(value: object) -> int:
    """Converts a threshold option into an int or UNBOUNDED."""
    if value is None:
        return UNBOUNDED
    if isinstance(value, bool):
        raise ValueError(f"Invalid large group size: {value}")
    if isinstance(value, int):
        size = value
    elif str(value).strip().lower() in UNBOUNDED_NAMES:
        return UNBOUNDED
    else:
        try:
            size = int(str(value).strip(), 0)
        except ValueError:
            raise ValueError(f"Invalid large group size: {value}") from None
    if size == UNBOUNDED:
        return UNBOUNDED
    if size < 0:
        raise ValueError(f"Invalid large group size: {value}")
    return size


def parse_exclusions(value: object) -> tuple:
    """Normalizes an exclusion list, checking every name against the facility table."""
    if value is None:
        return ()
    if isinstance(value, str):
        names = [name for name in value.split(",") if name.strip()]
    else:
        names = [str(name) for name in value]
    for name in names:
        resolve_subgroup_name(name)
    return tuple(name.strip().upper() for name in names)


def parse_bool(value: object, key: str) -> bool:
    """Converts a yaml or command line value into a bool."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    raise ValueError(f"Invalid value for '{key}', must be boolean: {value}")


def load_options_file(in_file: Optional[TextIO]) -> Optional[dict]:
    """Loads a json-/yaml-encoded options file into a dictionary."""
    if not hasattr(in_file, "read"):
        return None
    options = yaml.safe_load(in_file)
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise ValueError("Options file must contain a mapping")
    return options


def update_options(file_options: Optional[dict], cli_options: list) -> dict:
    """Applies `<option_name>=<option_value>` strings on top of the file options."""
    updated_options = copy.copy(file_options) if file_options is not None else {}
    for option in cli_options:
        if "=" not in option:
            raise ValueError(f"Option must look like <option_name>=<option_value>: {option}")
        (key, value) = option.split("=", 1)
        updated_options[key.strip()] = value.strip()
    return updated_options
