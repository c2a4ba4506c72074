"""File operations service."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image

from ..core.errors import ExportPathNotADirectoryError, ResourceClearError
from ..engines.naming import to_local
from ..engines.type_identifiers import IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)


class FileManager:
    """Destination folders and destination files under the export root."""

    def __init__(self, export_root: Path):
        """Initialize file manager.

        Args:
            export_root: Base directory of the export tree.
        """
        self._export_root = export_root

    @property
    def export_root(self) -> Path:
        return self._export_root

    def ensure_directory(self, path: Path) -> None:
        """Create ``path`` (and parents) unless it already exists.

        Raises:
            ExportPathNotADirectoryError: Something other than a directory
                is in the way.
        """
        if path.exists():
            if path.is_dir():
                logger.debug("fs.dir exists path=%s", path)
                return
            raise ExportPathNotADirectoryError(path)

        logger.debug("fs.dir create path=%s", path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except (FileExistsError, NotADirectoryError) as e:
            raise ExportPathNotADirectoryError(path) from e

    def build_output_directory(self, capture_time: datetime) -> Path:
        """``<export_root>/<YYYY>/<MM>`` for a capture time (local calendar)."""
        local = to_local(capture_time)
        return self._export_root / str(local.year) / f"{local.month:02d}"

    def destination_exists(self, path: Path) -> bool:
        return path.exists() or path.is_symlink()

    def remove_existing(self, path: Path) -> None:
        """Remove an existing destination file before overwriting it.

        Raises:
            ResourceClearError: The file could not be removed.
        """
        try:
            if path.is_dir() and not path.is_symlink():
                raise IsADirectoryError(21, "Is a directory", str(path))
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise ResourceClearError(path, e) from e

    def file_size(self, path: Path) -> Optional[int]:
        try:
            return path.stat().st_size
        except OSError:
            return None

    def probe_dimensions(self, path: Path) -> tuple[Optional[int], Optional[int]]:
        """Pixel size of a written image, (None, None) if it cannot be read."""
        if path.suffix.lower().lstrip(".") not in IMAGE_EXTENSIONS:
            return None, None
        try:
            with Image.open(path) as image:
                return image.size
        except (OSError, Image.DecompressionBombError):
            return None, None
