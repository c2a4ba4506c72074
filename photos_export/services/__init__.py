"""Service layer - export orchestration and collaborators."""
from .file_ops import FileManager
from .exporter import ResourceExporter, AssetExporter
from .runner import ExportRunner, ExportDependencies
from .sources import DirectoryAssetSource, CopyResourceWriter

__all__ = [
    "FileManager",
    "ResourceExporter",
    "AssetExporter",
    "ExportRunner",
    "ExportDependencies",
    "DirectoryAssetSource",
    "CopyResourceWriter",
]
