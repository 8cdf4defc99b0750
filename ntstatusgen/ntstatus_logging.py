# @file ntstatus_logging.py
# Handle basic logging config for the ntstatusgen tool.
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
"""Handles basic logging config for the command line tool.

Adds SECTION and PROGRESS levels, a colored console handler and a filter that
keeps chatter from other packages out of the console unless verbose.
"""

import logging
from typing import Optional, Union

from edk2toollib.log import ansi_handler

# section marks the phases of a run (parse, dump, write)
# progress marks a completed step; below critical so it can be turned off
SECTION = logging.CRITICAL + 2  # just above critical
PROGRESS = logging.CRITICAL - 1  # just below critical

PACKAGE_LOGGER = "ntstatusgen"


def get_section_level() -> int:
    """Returns SECTION."""
    return SECTION


def get_progress_level() -> int:
    """Returns PROGRESS."""
    return PROGRESS


def setup_section_level() -> None:
    """Registers the custom level names."""
    if logging.getLevelName(SECTION) != "SECTION":
        logging.addLevelName(SECTION, "SECTION")
    if logging.getLevelName(PROGRESS) != "PROGRESS":
        logging.addLevelName(PROGRESS, "PROGRESS")


def log_section(message: str) -> None:
    """Creates a logging message at the section level."""
    logging.getLogger(PACKAGE_LOGGER).log(get_section_level(), message)


def log_progress(message: str) -> None:
    """Creates a logging message at the progress level."""
    logging.getLogger(PACKAGE_LOGGER).log(get_progress_level(), message)


def get_status_filter(verbose: bool = False) -> logging.Filter:
    """Returns a console filter."""
    status_filter = StatusLogFilter()
    if verbose:
        status_filter.setVerbose(verbose)
    return status_filter


def setup_console_logging(
    logging_level: int = logging.INFO,
    formatter: Optional[str] = None,
    logging_namespace: Optional[str] = "",
    isVerbose: bool = False,
    use_color: bool = True,
) -> logging.Handler:
    """Configures a console logger.

    Args:
        logging_level (int): lowest level printed
        formatter (str): format string, defaults to "%(levelname)s - %(message)s"
        logging_namespace (str): logger to attach the handler to, root by default
        isVerbose (bool): also show debug/info records from other packages
        use_color (bool): color the output with ANSI escapes

    Returns:
        (logging.Handler): the handler, to pass to stop_logging
    """
    if formatter is None and isVerbose:
        formatter_msg = "%(name)s: %(levelname)s - %(message)s"
    elif formatter is None:
        formatter_msg = "%(levelname)s - %(message)s"
    else:
        formatter_msg = formatter

    setup_section_level()
    logger = logging.getLogger(logging_namespace)
    if logger.level == logging.NOTSET or logger.level > logging_level:
        logger.setLevel(logging_level)

    if use_color:
        handler = ansi_handler.ColoredStreamHandler()
        handler.setFormatter(ansi_handler.ColoredFormatter(formatter_msg))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(formatter_msg))
    handler.setLevel(logging_level)
    handler.addFilter(get_status_filter(isVerbose))
    logger.addHandler(handler)
    return handler


def stop_logging(
    loghandle: Union[list[logging.Handler], logging.Handler], logging_namespace: Optional[str] = ""
) -> None:
    """Stops logging on a log handle."""
    logger = logging.getLogger(logging_namespace)
    if loghandle is None:
        return
    if isinstance(loghandle, list):
        # if it's an array, process each element as a handle
        for handle in loghandle:
            handle.close()
            logger.removeHandler(handle)
    else:
        loghandle.close()
        logger.removeHandler(loghandle)


class StatusLogFilter(logging.Filter):
    """Subclass of logging.Filter."""

    _allowedLoggers = ["root", PACKAGE_LOGGER]

    def __init__(self) -> None:
        """Inits a filter."""
        logging.Filter.__init__(self)
        self._verbose = False

    def setVerbose(self, isVerbose: bool = True) -> None:
        """Sets the filter verbosity."""
        self._verbose = isVerbose

    def _is_allowed(self, name: str) -> bool:
        for allowed in StatusLogFilter._allowedLoggers:
            if name == allowed or name.startswith(allowed + "."):
                return True
        return False

    def filter(self, record: logging.LogRecord) -> bool:
        """Drops low level records of foreign loggers unless verbose."""
        if record.levelno < logging.WARNING and not self._verbose and not self._is_allowed(record.name):
            return False
        return True
