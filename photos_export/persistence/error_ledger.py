"""Append-only error ledger.

Failures are always written here, whether or not debug logging is on.
Every line is prefixed with an ISO-8601 timestamp. All writes go through
one lock so lines from different callers never interleave.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """Local ISO-8601 timestamp with milliseconds and UTC offset."""
    moment = (moment or datetime.now()).astimezone()
    return moment.isoformat(timespec="milliseconds")


class ErrorLedger:
    """Single append-only UTF-8 text file of export failures."""

    def __init__(self, path: Path):
        """Initialize the ledger.

        Args:
            path: Ledger file. Created on first append.
        """
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def exists(self) -> bool:
        return self._path.is_file()

    def append_line(self, message: str) -> bool:
        """Append one timestamped line.

        Returns:
            True if the line was written.
        """
        return self._append([f"{iso_timestamp()} {message}"])

    def append_block(self, header: str, lines: Iterable[str]) -> bool:
        """Append a header line followed by indented detail lines.

        Returns:
            True if the block was written.
        """
        stamp = iso_timestamp()
        block = [f"{stamp} {header}"]
        block.extend(f"{stamp}   {line}" for line in lines)
        return self._append(block)

    def _append(self, lines: list[str]) -> bool:
        data = "".join(f"{line}\n" for line in lines)
        with self._lock:
            try:
                with self._path.open("a", encoding="utf-8", errors="backslashreplace") as handle:
                    handle.write(data)
                    handle.flush()
            except OSError as e:
                logger.warning("ledger.append failed path=%s error=%s", self._path, e)
                return False
        return True
