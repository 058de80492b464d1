"""Logging configuration for vaultlinks."""

import logging
import sys
from typing import Optional, TextIO, Union


DEFAULT_FORMAT = "[ %(levelname)-8s ] %(message)s"


def setup_logger(
    name: str = "vaultlinks",
    level: Union[str, int] = "INFO",
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Set up the package logger.

    Any handler installed by a previous call is replaced, so calling this
    again (e.g. from the CLI with ``--verbose``) only changes the level.

    Args:
        name: Logger name
        level: Logging level name or number
        format_string: Custom format string
        stream: Output stream, stdout by default

    Returns:
        Configured logger instance
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(console_handler)

    logger.propagate = False

    return logger


logger = setup_logger()
