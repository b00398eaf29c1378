"""Logging setup for cargo-makedocs.

Everything the tool logs (skipped dependencies, the version picked
for a crate locked more than once, the cargo command being run) goes
through the ``cargo_makedocs`` logger. Console output goes to stderr,
leaving stdout to cargo and to ``--dry-run``, and level names are
lowercased so messages read like cargo's own ``warning: ...`` lines.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = "cargo_makedocs"


class CargoStyleFormatter(logging.Formatter):
    """Formatter that prints level names the way cargo does (``warning``)."""

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        record.levelname = levelname.lower()
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging(
    level: str = "WARNING",
    log_format: str = "%(levelname)s: %(message)s",
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the cargo-makedocs logger.

    Safe to call more than once: the CLI reconfigures logging when
    ``makedocs`` is given its own ``--config`` or ``--log-level``, so
    existing handlers are replaced rather than added to.

    Args:
        level: Level name such as WARNING or debug; unknown names fall
            back to WARNING.
        log_format: Format string shared by the console and file output.
        log_file: Optional file that receives a copy of the log.

    Returns:
        The ``cargo_makedocs`` logger.

    Raises:
        OSError: If log_file cannot be opened for appending.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
    logger.setLevel(numeric_level)

    formatter = CargoStyleFormatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging at level %s", logging.getLevelName(numeric_level))
    return logger
