"""Tests for export configuration."""
import pytest
from datetime import datetime
from pathlib import Path
from pydantic import ValidationError

from photos_export.core.config import ERROR_LOG_NAME, ExportConfig


class TestExportConfig:
    """Tests for ExportConfig."""

    def test_defaults(self, tmp_path: Path):
        config = ExportConfig(export_root=tmp_path)
        assert config.export_root == tmp_path.resolve()
        assert config.incremental is False
        assert config.debug is False
        assert config.log_file is None
        assert config.year is None
        assert config.end_year is None

    def test_error_log_path(self, tmp_path: Path):
        config = ExportConfig(export_root=tmp_path)
        assert config.error_log_path == tmp_path.resolve() / ERROR_LOG_NAME
        assert ERROR_LOG_NAME == "export_errors.log"

    def test_expands_user(self):
        config = ExportConfig(export_root=Path("~"))
        assert config.export_root == Path.home().resolve()

    def test_missing_root_allowed(self, tmp_path: Path):
        config = ExportConfig(export_root=tmp_path / "not-yet")
        assert config.export_root.name == "not-yet"

    def test_root_must_be_directory(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(ValidationError, match="must be a directory"):
            ExportConfig(export_root=blocker)

    def test_debug_enabled_by_log_file(self, tmp_path: Path):
        assert not ExportConfig(export_root=tmp_path).debug_enabled
        assert ExportConfig(export_root=tmp_path, debug=True).debug_enabled
        config = ExportConfig(export_root=tmp_path, log_file=tmp_path / "debug.log")
        assert config.debug_enabled
        assert config.log_file == (tmp_path / "debug.log").resolve()


class TestYearRange:
    """Tests for year range validation and date bounds."""

    def test_end_year_requires_year(self, tmp_path: Path):
        with pytest.raises(ValidationError, match="--end-year requires --year"):
            ExportConfig(export_root=tmp_path, end_year=2024)

    def test_start_after_end(self, tmp_path: Path):
        with pytest.raises(ValidationError, match=r"start year \(2025\) is after end year \(2020\)"):
            ExportConfig(export_root=tmp_path, year=2025, end_year=2020)

    def test_single_year(self, tmp_path: Path):
        config = ExportConfig(export_root=tmp_path, year=2024)
        start, end = config.date_range()
        assert start == datetime(2024, 1, 1).astimezone()
        assert end == datetime(2024, 12, 31, 23, 59, 59).astimezone()
        assert start.tzinfo is not None
        assert config.range_label() == "2024"

    def test_span(self, tmp_path: Path):
        config = ExportConfig(export_root=tmp_path, year=2020, end_year=2024)
        start, end = config.date_range()
        assert (start.year, end.year) == (2020, 2024)
        assert config.range_label() == "2020-2024"

    def test_same_start_and_end(self, tmp_path: Path):
        config = ExportConfig(export_root=tmp_path, year=2024, end_year=2024)
        assert config.range_label() == "2024"

    def test_current_year(self, tmp_path: Path):
        config = ExportConfig(export_root=tmp_path)
        start, end = config.date_range(now=datetime(2026, 5, 1, 12, 0, 0))
        assert start == datetime(2026, 1, 1).astimezone()
        assert end == datetime(2026, 12, 31, 23, 59, 59).astimezone()
        assert config.range_label() == "current year"
