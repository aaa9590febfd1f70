"""Logging setup for the decopy command."""

import logging
import sys
from typing import TextIO

from colorama import Fore

LOGGER_NAME = "decopy"


def format_log_line(message: str) -> str:
    """Prefix a message the way every decopy log line is prefixed."""
    return f"[{Fore.MAGENTA}decopy{Fore.RESET}] {message}"


class DecopyFormatter(logging.Formatter):
    """
    ``[decopy] message`` lines; warnings and errors carry their level name.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            message = f"{record.levelname.lower()}: {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return format_log_line(message)


def setup_logging(verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """
    Configure the ``decopy`` logger.

    Parameters
    ----------
    verbose : bool
        Enable debug output
    stream : TextIO | None, default=None
        Where log lines go (stderr by default, keeping stdout for the UI)

    Returns
    -------
    logging.Logger
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(DecopyFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
