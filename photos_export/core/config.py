"""Export configuration with validation."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

ERROR_LOG_NAME = "export_errors.log"


class ExportConfig(BaseModel):
    """Configuration for an export run.

    This is the only configuration object passed through the system; the
    export root is always explicit, nothing is derived from the environment.
    """
    export_root: Path = Field(
        ...,
        description="Base directory; files land in <export_root>/<YYYY>/<MM>/",
    )
    incremental: bool = Field(
        default=False,
        description="Skip resources whose destination file already exists",
    )
    debug: bool = Field(default=False, description="Enable debug logging")
    log_file: Optional[Path] = Field(
        default=None,
        description="Append debug log lines to this file (implies debug logging)",
    )
    probe_metadata: bool = Field(
        default=False,
        description="Probe pixel dimensions of written images for the debug log",
    )
    year: Optional[int] = Field(default=None, description="First year to export")
    end_year: Optional[int] = Field(
        default=None,
        description="Last year to export (inclusive, requires year)",
    )

    @field_validator("export_root")
    @classmethod
    def expand_export_root(cls, value: Path) -> Path:
        value = value.expanduser().resolve()
        if value.exists() and not value.is_dir():
            raise ValueError(f"--export-directory must be a directory: {value}")
        return value

    @field_validator("log_file")
    @classmethod
    def expand_log_file(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        return value.expanduser().resolve()

    @model_validator(mode="after")
    def check_year_range(self) -> "ExportConfig":
        if self.end_year is not None:
            if self.year is None:
                raise ValueError("--end-year requires --year to also be specified.")
            if self.year > self.end_year:
                raise ValueError(
                    f"Invalid year range: start year ({self.year}) "
                    f"is after end year ({self.end_year})."
                )
        return self

    @property
    def error_log_path(self) -> Path:
        return self.export_root / ERROR_LOG_NAME

    @property
    def debug_enabled(self) -> bool:
        return self.debug or self.log_file is not None

    def date_range(self, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
        """Inclusive local-time bounds of the assets to export."""
        if self.year is None:
            start_year = (now or datetime.now()).year
        else:
            start_year = self.year
        last_year = self.end_year if self.end_year is not None else start_year

        start = datetime(start_year, 1, 1, 0, 0, 0).astimezone()
        end = datetime(last_year, 12, 31, 23, 59, 59).astimezone()
        return start, end

    def range_label(self) -> str:
        if self.year is None:
            return "current year"
        if self.end_year is None or self.end_year == self.year:
            return str(self.year)
        return f"{self.year}-{self.end_year}"
