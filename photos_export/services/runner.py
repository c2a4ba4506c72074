"""Export run controller - drives the asset exporter over the library."""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.config import ExportConfig
from ..core.models import AssetOutcome, ExportStats, ExportStatus
from ..core.protocols import AssetSource, ProgressReporter, ResourceWriter
from ..persistence.error_ledger import ErrorLedger, iso_timestamp
from .exporter import AssetExporter, ResourceExporter
from .file_ops import FileManager

logger = logging.getLogger(__name__)


@dataclass
class ExportDependencies:
    """All dependencies needed by the runner.

    This is explicitly passed in - no globals or singletons.
    """
    source: AssetSource
    writer: ResourceWriter
    progress: ProgressReporter
    file_manager: FileManager
    ledger: ErrorLedger

    @classmethod
    def create(
        cls,
        config: ExportConfig,
        source: AssetSource,
        writer: ResourceWriter,
        progress: ProgressReporter,
    ) -> "ExportDependencies":
        """Wire the default file manager and ledger for ``config``."""
        return cls(
            source=source,
            writer=writer,
            progress=progress,
            file_manager=FileManager(config.export_root),
            ledger=ErrorLedger(config.error_log_path),
        )


class ExportRunner:
    """Exports every asset in the configured date range, one at a time.

    Asset and resource failures are counted and reported; only fatal
    errors (access denied, export tree blocked) escape ``run``.
    """

    def __init__(self, config: ExportConfig, deps: ExportDependencies):
        """Initialize runner with config and dependencies.

        Args:
            config: Export configuration.
            deps: All required dependencies.
        """
        self._config = config
        self._deps = deps
        self._stats = ExportStats()

        resource_exporter = ResourceExporter(
            writer=deps.writer,
            file_manager=deps.file_manager,
            ledger=deps.ledger,
            incremental=config.incremental,
            probe_metadata=config.probe_metadata,
        )
        self._asset_exporter = AssetExporter(
            source=deps.source,
            resource_exporter=resource_exporter,
            file_manager=deps.file_manager,
            ledger=deps.ledger,
        )

    @property
    def stats(self) -> ExportStats:
        return self._stats

    def run(self, now: Optional[datetime] = None) -> ExportStats:
        """Run the export.

        Args:
            now: Reference time for the default (current year) range.

        Returns:
            Statistics about what was exported.

        Raises:
            AuthorizationDeniedError: Library access refused.
            ExportPathNotADirectoryError: Export tree blocked by a file.
        """
        started = time.monotonic()
        deps = self._deps

        deps.file_manager.ensure_directory(self._config.export_root)
        logger.debug(
            "run.start cwd=%s exportBase=%s", os.getcwd(), self._config.export_root,
        )

        deps.source.request_access()

        start, end = self._config.date_range(now)
        logger.debug("fetch.range start=%s end=%s", iso_timestamp(start), iso_timestamp(end))

        assets = list(deps.source.fetch_assets(start, end))
        total = len(assets)
        self._stats.total_assets = total
        logger.debug("fetch.done total=%d", total)

        if total == 0:
            deps.progress.info(f"No assets found for {self._config.range_label()}.")
            return self._finish(started)

        logger.debug("iterate.begin total=%d", total)
        deps.progress.start_phase("Exporting", total)
        try:
            for idx, asset in enumerate(assets, start=1):
                logger.debug(
                    "asset.start index=%d total=%d id=%s mediaType=%d",
                    idx, total, asset.identifier, int(asset.media_type),
                )
                outcome = self._asset_exporter.export(asset, index=idx, total=total)
                self._stats.record(outcome)
                self._report(outcome, idx, total)

                kind = "video" if asset.is_video else "photo"
                mark = "✓" if outcome.is_success else "✗"
                deps.progress.advance_phase(1, f"{idx}/{total} {kind} {mark}")
        finally:
            deps.progress.end_phase()

        logger.debug("run.done exported=%d total=%d", self._stats.exported, total)
        return self._finish(started)

    def _finish(self, started: float) -> ExportStats:
        self._stats.elapsed_seconds = time.monotonic() - started
        ledger = self._deps.ledger
        # Only point at the ledger when this run added to it.
        failed = self._stats.has_failures or self._stats.resources_failed > 0
        self._stats.error_log = ledger.path if failed and ledger.exists else None
        return self._stats

    def _report(self, outcome: AssetOutcome, idx: int, total: int) -> None:
        if outcome.status == ExportStatus.EXPORTED or outcome.error is None:
            return

        asset = outcome.asset
        line = f"asset={asset.identifier} index={idx}/{total} {outcome.error.details()}"
        if outcome.status == ExportStatus.FATAL_SKIP:
            self._deps.progress.warning(f"asset={asset.identifier} {outcome.label}")
        else:
            line += f" px={asset.pixel_size} failedCount={outcome.failed_count}"
        self._deps.progress.error(f"asset.error {line}")
        logger.debug("asset.error %s", line)
