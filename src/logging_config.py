"""Logging setup for the casesource command line.

Library modules only create module-level loggers; handlers are attached here,
once, by the CLI.
"""

from __future__ import annotations

import logging
import sys

ROOT_LOGGER_NAMES = (
    "analysis",
    "parse",
    "report",
    "rules",
    "scan",
    "semantic",
    "cli",
)

_CONSOLE_FORMAT = "[%(name)s] %(levelname)s: %(message)s"

_configured = False


def configure_logging(verbose: bool = False) -> None:
    """Attach a stderr handler to the package loggers.

    Console output is WARNING and above by default, DEBUG with ``verbose``.
    Calling this again only adjusts the level.
    """
    global _configured
    level = logging.DEBUG if verbose else logging.WARNING

    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        for name in ROOT_LOGGER_NAMES:
            logger = logging.getLogger(name)
            logger.addHandler(handler)
        _configured = True

    for name in ROOT_LOGGER_NAMES:
        logging.getLogger(name).setLevel(level)
