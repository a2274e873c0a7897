"""Logging setup for normalization runs.

Progress and unmapped-value diagnostics go to stderr so that stdout stays free
for the JSON import result.
"""

from __future__ import annotations

import logging
import sys

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure the ``trello2linear`` logger for a normalization run.

    Args:
        level: DEBUG lists every unmapped list, field option and label;
               ERROR keeps only fatal input problems. Unknown names use INFO.
        log_file: Optional path that also receives timestamped records.

    Example:
        >>> setup_logging("DEBUG")
        >>> setup_logging("INFO", "normalize.log")
    """
    logger = logging.getLogger("trello2linear")
    logger.setLevel(LOG_LEVELS.get(level.upper(), logging.INFO))

    # Re-running setup must not stack handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
