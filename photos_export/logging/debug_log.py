"""Opt-in debug logging for the ``photos_export`` logger hierarchy.

With a log file every line is appended to it (debug logging is on even
without ``--debug``); with ``--debug`` alone lines go to stderr through
Rich. Otherwise only warnings reach stderr. Handlers serialize their
writes, so lines are never interleaved.
"""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from ..persistence.error_ledger import iso_timestamp

LOGGER_NAME = "photos_export"


def _rich_time(moment: datetime) -> Text:
    return Text(iso_timestamp(moment))


class IsoTimestampFormatter(logging.Formatter):
    """``<iso-timestamp> <message>``, matching the error ledger."""

    def __init__(self):
        super().__init__("%(asctime)s %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        return iso_timestamp(datetime.fromtimestamp(record.created))


def configure_debug_logging(
    debug: bool = False,
    log_file: Optional[Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Attach handlers to the package logger.

    Args:
        debug: Log debug lines to stderr when no log file is given.
        log_file: Append debug lines to this file; parent folders are
            created as needed.
        console: Console used by the stderr handler.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(
            log_file, mode="a", encoding="utf-8", errors="backslashreplace",
        )
        handler.setFormatter(IsoTimestampFormatter())
        logger.setLevel(logging.DEBUG)
    elif debug:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
            log_time_format=_rich_time,
        )
        logger.setLevel(logging.DEBUG)
    else:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            show_time=False,
            markup=False,
        )
        logger.setLevel(logging.WARNING)

    logger.addHandler(handler)
    return logger
