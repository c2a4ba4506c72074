"""Per-resource and per-asset export.

``ResourceExporter`` handles a single resource: it names it, applies the
incremental/overwrite policy and calls the resource writer.
``AssetExporter`` drives all resources of one asset and rolls resource
failures up into a partial-export outcome. Neither ever lets a resource
failure escape; only environment errors (export tree blocked by a file)
propagate.
"""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import MutableSet, Optional

from ..core.errors import (
    ExportError,
    MissingCaptureTimeError,
    PartialExportError,
    ResourceClearError,
    ResourceWriteError,
)
from ..core.models import (
    Asset,
    AssetOutcome,
    ExportStatus,
    FailureKind,
    FailureRecord,
    Resource,
    ResourceOutcome,
    ResourceResult,
)
from ..core.protocols import AssetSource, ResourceWriter
from ..engines.naming import capture_timestamp, filename_for_resource
from ..persistence.error_ledger import ErrorLedger
from .file_ops import FileManager

logger = logging.getLogger(__name__)


def asset_meta(asset: Asset, capture: str) -> str:
    return (
        f"asset={asset.identifier} capture={capture} "
        f"mediaType={int(asset.media_type)} subtypes={int(asset.subtypes)} "
        f"px={asset.pixel_size} dur={float(asset.duration)!r}"
    )


class ResourceExporter:
    """Exports one resource of one asset.

    State per resource: pending -> skipped-existing | (removed ->) writing
    -> written | failed.
    """

    def __init__(
        self,
        writer: ResourceWriter,
        file_manager: FileManager,
        ledger: ErrorLedger,
        incremental: bool = False,
        probe_metadata: bool = False,
    ):
        """Initialize the exporter.

        Args:
            writer: Materializes resource bytes on disk.
            file_manager: Destination file helpers.
            ledger: Receives one line per failed resource.
            incremental: Keep existing destination files instead of
                overwriting them.
            probe_metadata: Probe pixel size of written images for the
                debug log.
        """
        self._writer = writer
        self._files = file_manager
        self._ledger = ledger
        self._incremental = incremental
        self._probe_metadata = probe_metadata

    @property
    def incremental(self) -> bool:
        return self._incremental

    def export(
        self,
        asset: Asset,
        resource: Resource,
        capture_time: datetime,
        folder: Path,
        used_names: MutableSet[str],
        index: int = 1,
        total: int = 1,
    ) -> ResourceResult:
        """Export ``resource`` into ``folder``.

        ``used_names`` is shared by all resources of the asset and receives
        the chosen filename.
        """
        label = resource.type_label
        try:
            filename = filename_for_resource(asset, resource, capture_time, used_names)
        except Exception as e:
            # No destination yet; the failure is recorded against the folder.
            return self._failed(
                asset, resource, capture_time, folder,
                FailureKind.NAME_FAILED, ResourceWriteError.from_exception(e),
            )
        destination = folder / filename

        exists = self._files.destination_exists(destination)
        if exists and self._incremental:
            logger.debug(
                "asset.resource.skip existing asset=%s type=%s dest=%s",
                asset.identifier, label, destination,
            )
            return ResourceResult(resource, destination, ResourceOutcome.SKIPPED_EXISTING)

        if exists:
            logger.debug("asset.resource.overwrite remove dest=%s", destination)
            try:
                self._files.remove_existing(destination)
            except ResourceClearError as e:
                return self._failed(
                    asset, resource, capture_time, destination, FailureKind.CLEAR_FAILED, e,
                )

        logger.debug(
            "asset.resource.start asset=%s index=%d/%d type=%s uti=%s name=%s dest=%s",
            asset.identifier, index, total, label,
            resource.type_identifier, resource.original_filename, destination,
        )

        try:
            self._writer.write(resource, destination)
        except Exception as e:
            # Writer failures stay with this resource; the asset carries on.
            return self._failed(
                asset, resource, capture_time, destination,
                FailureKind.WRITE_FAILED, ResourceWriteError.from_exception(e),
            )

        size = self._files.file_size(destination)
        extra = ""
        if self._probe_metadata:
            width, height = self._files.probe_dimensions(destination)
            if width and height:
                extra = f" px={width}x{height}"
        if size is not None:
            logger.debug(
                "asset.resource.done asset=%s type=%s path=%s bytes=%d%s",
                asset.identifier, label, destination, size, extra,
            )
        else:
            logger.debug(
                "asset.resource.done asset=%s type=%s path=%s%s",
                asset.identifier, label, destination, extra,
            )

        return ResourceResult(resource, destination, ResourceOutcome.WRITTEN, size_bytes=size)

    def _failed(
        self,
        asset: Asset,
        resource: Resource,
        capture_time: datetime,
        destination: Path,
        kind: FailureKind,
        error: ExportError,
    ) -> ResourceResult:
        failure = FailureRecord(
            kind=kind,
            resource_type=resource.type,
            type_identifier=resource.type_identifier,
            original_filename=resource.original_filename,
            destination_name="" if kind == FailureKind.NAME_FAILED else destination.name,
            error=error,
        )
        marker = "" if kind == FailureKind.WRITE_FAILED else f"{kind.value} "
        line = (
            f"asset={asset.identifier} capture={capture_timestamp(capture_time)} "
            f"resourceType={resource.type_label} uti={resource.type_identifier} "
            f"name={resource.original_filename} dest={destination} "
            f"{marker}{error.details()}"
        )
        logger.debug("asset.resource.failed %s", line)
        self._ledger.append_line(line)
        return ResourceResult(resource, destination, ResourceOutcome.FAILED, failure=failure)


class AssetExporter:
    """Exports every resource of an asset into its month folder."""

    def __init__(
        self,
        source: AssetSource,
        resource_exporter: ResourceExporter,
        file_manager: FileManager,
        ledger: ErrorLedger,
    ):
        self._source = source
        self._resources = resource_exporter
        self._files = file_manager
        self._ledger = ledger

    def export(
        self,
        asset: Asset,
        index: Optional[int] = None,
        total: Optional[int] = None,
    ) -> AssetOutcome:
        """Export one asset.

        Returns:
            EXPORTED when no resource failed (an asset without resources
            included), PARTIAL when some failed,
            FATAL_SKIP when the asset could not be attempted at all.

        Raises:
            ExportPathNotADirectoryError: The month folder is blocked by a
                file. This aborts the run, not just the asset.
        """
        position = f" index={index}/{total}" if index is not None and total is not None else ""

        capture_time = asset.capture_time
        if capture_time is None:
            logger.debug("asset.skip missing creationDate asset=%s", asset.identifier)
            return self._skipped(asset, MissingCaptureTimeError(asset.identifier), position)

        folder = self._files.build_output_directory(capture_time)
        self._files.ensure_directory(folder)
        logger.debug("asset.folder asset=%s folder=%s", asset.identifier, folder)

        resources = list(self._source.resources_of(asset))
        logger.debug("asset.resources count=%d asset=%s", len(resources), asset.identifier)
        if not resources:
            # Nothing to write, nothing failed.
            return AssetOutcome(asset, ExportStatus.EXPORTED)

        # Fresh per asset: it only separates this asset's own resources.
        used_names: set[str] = set()
        results = tuple(
            self._resources.export(
                asset, resource, capture_time, folder, used_names,
                index=i, total=len(resources),
            )
            for i, resource in enumerate(resources, start=1)
        )

        failures = [r.failure for r in results if r.failure is not None]
        if not failures:
            return AssetOutcome(asset, ExportStatus.EXPORTED, results)

        capture = capture_timestamp(capture_time)
        meta = asset_meta(asset, capture)
        summaries = [f.summary() for f in failures]
        self._ledger.append_block(
            f"asset.failed {meta} failures={len(failures)}/{len(results)}",
            summaries,
        )
        error = PartialExportError(
            asset_id=asset.identifier,
            capture=capture,
            failures=summaries,
            total=len(results),
            meta=meta,
        )
        return AssetOutcome(asset, ExportStatus.PARTIAL, results, error)

    def _skipped(self, asset: Asset, error: ExportError, position: str) -> AssetOutcome:
        self._ledger.append_line(f"asset={asset.identifier}{position} {error.details()}")
        return AssetOutcome(asset, ExportStatus.FATAL_SKIP, error=error)
