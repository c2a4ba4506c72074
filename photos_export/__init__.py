"""Export a media library into a dated, collision-free folder tree.

Architecture with dependency injection and clean interfaces.
"""

__version__ = "1.0.0"

# Core exports
from .core.config import ExportConfig
from .core.models import Asset, Resource, AssetOutcome, ExportStats
from .core.protocols import AssetSource, ResourceWriter, ProgressReporter

# Engine exports
from .engines.naming import export_filename, fnv1a64

# Service exports
from .services.exporter import AssetExporter, ResourceExporter
from .services.runner import ExportRunner, ExportDependencies
from .services.file_ops import FileManager
from .services.sources import DirectoryAssetSource, CopyResourceWriter

# Persistence exports
from .persistence.error_ledger import ErrorLedger

# Logging exports
from .logging.rich_logger import RichProgressReporter

__all__ = [
    # Core
    "ExportConfig",
    "Asset",
    "Resource",
    "AssetOutcome",
    "ExportStats",
    "AssetSource",
    "ResourceWriter",
    "ProgressReporter",
    # Engines
    "export_filename",
    "fnv1a64",
    # Services
    "AssetExporter",
    "ResourceExporter",
    "ExportRunner",
    "ExportDependencies",
    "FileManager",
    "DirectoryAssetSource",
    "CopyResourceWriter",
    # Persistence
    "ErrorLedger",
    # Logging
    "RichProgressReporter",
]
