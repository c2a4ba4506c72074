"""Tests for the append-only error ledger."""
import os
import threading
from datetime import datetime
from pathlib import Path

import pytest

from photos_export.persistence.error_ledger import ErrorLedger, iso_timestamp


def _split(line: str) -> tuple[datetime, str]:
    stamp, _, rest = line.partition(" ")
    return datetime.fromisoformat(stamp), rest


class TestIsoTimestamp:
    """Tests for ledger timestamps."""

    def test_milliseconds_and_offset(self):
        stamp = iso_timestamp(datetime(2025, 1, 2, 3, 4, 5, 123456))
        assert stamp.startswith("2025-01-02T03:04:05.123")
        assert datetime.fromisoformat(stamp).tzinfo is not None

    def test_defaults_to_now(self):
        assert datetime.fromisoformat(iso_timestamp()).year >= 2025


class TestErrorLedger:
    """Tests for ErrorLedger."""

    @pytest.fixture
    def ledger(self, tmp_path: Path) -> ErrorLedger:
        return ErrorLedger(tmp_path / "export_errors.log")

    def test_created_on_first_append(self, ledger):
        assert not ledger.exists
        assert ledger.append_line("asset=a domain=PhotosExport code=3")
        assert ledger.exists

    def test_line_format(self, ledger):
        ledger.append_line("first")
        ledger.append_line("second")

        lines = ledger.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        _, message = _split(lines[0])
        assert message == "first"
        assert _split(lines[1])[1] == "second"

    def test_block(self, ledger):
        ledger.append_block("asset.failed asset=a failures=2/3", ["one", "two"])

        lines = ledger.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        assert _split(lines[0])[1] == "asset.failed asset=a failures=2/3"
        assert lines[1].split(" ", 1)[1] == "  one"
        assert lines[2].endswith("   two")

    def test_appends_to_existing(self, ledger):
        ledger.path.write_text("old line\n", encoding="utf-8")
        ledger.append_line("new")
        lines = ledger.path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "old line"
        assert lines[1].endswith(" new")

    def test_unicode(self, ledger):
        ledger.append_line("name=Été.JPG")
        assert "Été.JPG" in ledger.path.read_text(encoding="utf-8")

    def test_undecodable_filename(self, ledger):
        """Names with non-UTF-8 bytes are written backslash-escaped."""
        name = os.fsdecode(b"IMG\xff.JPG")
        assert ledger.append_line(f"name={name} dest=x")
        assert "name=IMG\\udcff.JPG dest=x" in ledger.path.read_text(encoding="utf-8")

    def test_write_failure_is_reported_not_raised(self, tmp_path: Path):
        ledger = ErrorLedger(tmp_path / "missing" / "export_errors.log")
        assert ledger.append_line("lost") is False
        assert not ledger.exists

    def test_concurrent_writers_do_not_interleave(self, ledger):
        def write(worker: int):
            for i in range(50):
                ledger.append_block(f"worker={worker} item={i}", [f"detail={worker}-{i}"])

        threads = [threading.Thread(target=write, args=(w,)) for w in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        lines = ledger.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 8 * 50 * 2
        for header, detail in zip(lines[::2], lines[1::2]):
            worker_item = header.split("worker=", 1)[1]
            worker, item = worker_item.split(" item=")
            assert detail.endswith(f"detail={worker}-{item}")
