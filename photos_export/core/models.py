"""Domain models - immutable data classes."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum, IntFlag
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .errors import ExportError


class MediaType(IntEnum):
    """Top-level media kind of an asset."""
    UNKNOWN = 0
    IMAGE = 1
    VIDEO = 2
    AUDIO = 3


class MediaSubtype(IntFlag):
    """Subtype flags of an asset (bitset)."""
    NONE = 0
    PHOTO_PANORAMA = 1 << 0
    PHOTO_HDR = 1 << 1
    PHOTO_SCREENSHOT = 1 << 2
    PHOTO_LIVE = 1 << 3
    PHOTO_DEPTH_EFFECT = 1 << 4
    VIDEO_STREAMED = 1 << 16
    VIDEO_HIGH_FRAME_RATE = 1 << 17
    VIDEO_TIMELAPSE = 1 << 18


class ResourceType(IntEnum):
    """Role of a binary resource within its asset."""
    PHOTO = 1
    VIDEO = 2
    AUDIO = 3
    ALTERNATE_PHOTO = 4
    FULL_SIZE_PHOTO = 5
    FULL_SIZE_VIDEO = 6
    ADJUSTMENT_DATA = 7
    ADJUSTMENT_BASE_PHOTO = 8
    PAIRED_VIDEO = 9
    FULL_SIZE_PAIRED_VIDEO = 10
    ADJUSTMENT_BASE_PAIRED_VIDEO = 11
    ADJUSTMENT_BASE_VIDEO = 12


RESOURCE_TYPE_LABELS = {
    ResourceType.PHOTO: "photo",
    ResourceType.VIDEO: "video",
    ResourceType.AUDIO: "audio",
    ResourceType.ALTERNATE_PHOTO: "alternatePhoto",
    ResourceType.FULL_SIZE_PHOTO: "fullSizePhoto",
    ResourceType.FULL_SIZE_VIDEO: "fullSizeVideo",
    ResourceType.ADJUSTMENT_DATA: "adjustmentData",
}


def resource_type_label(resource_type: int) -> str:
    """Short label for a resource type, ``type<N>`` for unlabelled ones."""
    try:
        return RESOURCE_TYPE_LABELS[ResourceType(resource_type)]
    except (KeyError, ValueError):
        return f"type{int(resource_type)}"


@dataclass(frozen=True, slots=True)
class Asset:
    """A photo or video held in the library.

    The identifier is opaque and stable across runs. ``capture_time`` may be
    missing, in which case the asset cannot be exported.
    """
    identifier: str
    capture_time: Optional[datetime]
    media_type: MediaType = MediaType.IMAGE
    subtypes: MediaSubtype = MediaSubtype.NONE
    pixel_width: int = 0
    pixel_height: int = 0
    duration: float = 0.0

    @property
    def is_video(self) -> bool:
        return self.media_type == MediaType.VIDEO

    @property
    def pixel_size(self) -> str:
        return f"{self.pixel_width}x{self.pixel_height}"


@dataclass(frozen=True, slots=True)
class Resource:
    """One binary resource (original, edit, paired video...) of an asset.

    ``source_path`` is the locator handed to the resource writer; sources
    that stream bytes from elsewhere may leave it empty.
    """
    asset_id: str
    type: ResourceType
    type_identifier: str
    original_filename: str = ""
    source_path: Optional[Path] = None

    @property
    def type_label(self) -> str:
        return resource_type_label(self.type)


class FailureKind(Enum):
    """Why a resource could not be exported."""
    NAME_FAILED = "nameFailed"
    CLEAR_FAILED = "removeExistingFailed"
    WRITE_FAILED = "writeFailed"


@dataclass(frozen=True, slots=True)
class FailureRecord:
    """A failed resource, kept in memory until flushed to the error ledger."""
    kind: FailureKind
    resource_type: int
    type_identifier: str
    original_filename: str
    destination_name: str
    error: "ExportError"

    def summary(self) -> str:
        """Single-line description used in ledger blocks and error messages."""
        return (
            f"type={resource_type_label(self.resource_type)} "
            f"uti={self.type_identifier} name={self.original_filename} "
            f"dest={self.destination_name} {self.error.details()}"
        )


class ResourceOutcome(Enum):
    """Terminal state of a single resource."""
    WRITTEN = "written"
    SKIPPED_EXISTING = "skipped_existing"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ResourceResult:
    """Result of running the export step for one resource."""
    resource: Resource
    destination: Path
    outcome: ResourceOutcome
    failure: Optional[FailureRecord] = None
    size_bytes: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.outcome != ResourceOutcome.FAILED


class ExportStatus(Enum):
    """Per-asset export outcome."""
    EXPORTED = "exported"
    PARTIAL = "partially exported"
    FATAL_SKIP = "fatal-skip"


@dataclass(frozen=True, slots=True)
class AssetOutcome:
    """Result of exporting a single asset."""
    asset: Asset
    status: ExportStatus
    results: tuple[ResourceResult, ...] = field(default_factory=tuple)
    error: Optional["ExportError"] = None

    @property
    def total_resources(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> tuple[FailureRecord, ...]:
        return tuple(r.failure for r in self.results if r.failure is not None)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def exported_paths(self) -> tuple[Path, ...]:
        return tuple(r.destination for r in self.results if r.is_success)

    @property
    def is_success(self) -> bool:
        return self.status == ExportStatus.EXPORTED

    @property
    def label(self) -> str:
        """Progress label: ``exported``, ``partially exported: k/n`` or ``fatal-skip: reason``."""
        if self.status == ExportStatus.PARTIAL:
            return f"{self.status.value}: {self.failed_count}/{self.total_resources}"
        if self.status == ExportStatus.FATAL_SKIP:
            reason = self.error.description if self.error is not None else "unknown"
            return f"{self.status.value}: {reason}"
        return self.status.value


@dataclass(slots=True)
class ExportStats:
    """Mutable statistics for an export run."""
    total_assets: int = 0
    processed: int = 0
    exported: int = 0
    partial: int = 0
    skipped: int = 0
    resources_written: int = 0
    resources_skipped_existing: int = 0
    resources_failed: int = 0
    elapsed_seconds: float = 0.0
    error_log: Optional[Path] = None

    @property
    def has_failures(self) -> bool:
        return self.partial > 0 or self.skipped > 0

    def record(self, outcome: AssetOutcome) -> None:
        """Record an asset outcome."""
        self.processed += 1
        match outcome.status:
            case ExportStatus.EXPORTED:
                self.exported += 1
            case ExportStatus.PARTIAL:
                self.partial += 1
            case ExportStatus.FATAL_SKIP:
                self.skipped += 1

        for result in outcome.results:
            match result.outcome:
                case ResourceOutcome.WRITTEN:
                    self.resources_written += 1
                case ResourceOutcome.SKIPPED_EXISTING:
                    self.resources_skipped_existing += 1
                case ResourceOutcome.FAILED:
                    self.resources_failed += 1

    def summary(self) -> dict[str, int]:
        return {
            "total": self.total_assets,
            "processed": self.processed,
            "exported": self.exported,
            "partial": self.partial,
            "skipped": self.skipped,
            "resources_written": self.resources_written,
            "resources_skipped_existing": self.resources_skipped_existing,
            "resources_failed": self.resources_failed,
        }
