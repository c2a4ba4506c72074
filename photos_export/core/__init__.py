"""Core domain models, errors and protocols."""
from .protocols import (
    AssetSource,
    ResourceWriter,
    ProgressReporter,
)
from .models import (
    Asset,
    Resource,
    MediaType,
    MediaSubtype,
    ResourceType,
    FailureKind,
    FailureRecord,
    ResourceOutcome,
    ResourceResult,
    ExportStatus,
    AssetOutcome,
    ExportStats,
)
from .config import ExportConfig
from .errors import (
    ExportError,
    SettingsError,
    AuthorizationDeniedError,
    ExportPathNotADirectoryError,
    MissingCaptureTimeError,
    ResourceClearError,
    ResourceWriteError,
    PartialExportError,
    error_details,
)

__all__ = [
    # Protocols
    "AssetSource",
    "ResourceWriter",
    "ProgressReporter",
    # Models
    "Asset",
    "Resource",
    "MediaType",
    "MediaSubtype",
    "ResourceType",
    "FailureKind",
    "FailureRecord",
    "ResourceOutcome",
    "ResourceResult",
    "ExportStatus",
    "AssetOutcome",
    "ExportStats",
    # Config
    "ExportConfig",
    # Errors
    "ExportError",
    "SettingsError",
    "AuthorizationDeniedError",
    "ExportPathNotADirectoryError",
    "MissingCaptureTimeError",
    "ResourceClearError",
    "ResourceWriteError",
    "PartialExportError",
    "error_details",
]
