"""Logging setup for the inkwell command line."""

import os
import sys

from loguru import logger

from inkwell.config import LOG_FILE_ENV_VAR


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Send log messages to stderr, and to a file when INKWELL_LOG_FILE is set.

    quiet keeps only warnings and errors on stderr; verbose wins over quiet.
    The log file always records DEBUG so file moves can be traced afterwards.
    """
    logger.remove()
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")

    log_file = os.environ.get(LOG_FILE_ENV_VAR)
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
            rotation="1 MB",
            retention=3,
        )
