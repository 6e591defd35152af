"""Logging configuration for machindex."""

import logging
from enum import IntEnum

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "machindex"


class LogLevel(IntEnum):
    """Log level enumeration."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
) -> Console:
    """Configure logging of the machindex package from CLI options.

    Lock and index traffic is logged at DEBUG, so -v is enough to trace
    checkouts, releases and index reloads.

    Args:
        verbosity: Number of -v flags (0=normal, 1=debug, 2+=debug with
            timestamps and source locations)
        quiet: Only show warnings and errors (takes precedence)
        no_color: Disable colored output

    Returns:
        Rich console the log handler writes to (stderr)
    """
    if quiet:
        level = LogLevel.QUIET
    elif verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL

    console = Console(
        stderr=True,
        force_terminal=not no_color,
        no_color=no_color,
    )

    handler = RichHandler(
        console=console,
        show_time=verbosity >= 2,
        show_path=verbosity >= 2,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return console
