"""Directory-backed asset source and file-copy resource writer.

A library kept as a plain directory tree: files sharing a folder and a
stem (case-insensitive) form one asset, so ``IMG_0001.HEIC``,
``IMG_0001.MOV`` and ``IMG_0001.AAE`` are a live photo with its paired
video and adjustment data.
"""
from __future__ import annotations

import logging
import os
import shutil
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from PIL import Image

from ..core.errors import AuthorizationDeniedError, ResourceWriteError
from ..core.models import Asset, MediaSubtype, MediaType, Resource, ResourceType
from ..engines.naming import to_local
from ..engines.type_identifiers import (
    ADJUSTMENT_EXTENSIONS,
    AUDIO_EXTENSIONS,
    IMAGE_EXTENSIONS,
    VIDEO_EXTENSIONS,
    identifier_for_extension,
)

logger = logging.getLogger(__name__)

EXIF_IFD = 0x8769
TAG_DATETIME = 306
TAG_DATETIME_ORIGINAL = 36867
TAG_OFFSET_TIME_ORIGINAL = 36881
EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


def _ext(path: Path) -> str:
    return path.suffix.lower().lstrip(".")


def read_exif_datetime(path: Path) -> Optional[datetime]:
    """Capture time from EXIF DateTimeOriginal (or DateTime).

    Naive unless the file records an OffsetTimeOriginal.
    """
    try:
        with Image.open(path) as image:
            exif = image.getexif()
    except (OSError, Image.DecompressionBombError):
        return None

    exif_ifd = exif.get_ifd(EXIF_IFD)
    raw = exif_ifd.get(TAG_DATETIME_ORIGINAL) or exif.get(TAG_DATETIME)
    if not raw:
        return None
    try:
        moment = datetime.strptime(str(raw).strip("\x00 "), EXIF_DATE_FORMAT)
    except ValueError:
        return None

    offset = exif_ifd.get(TAG_OFFSET_TIME_ORIGINAL)
    if offset:
        try:
            return datetime.strptime(
                f"{moment:%Y-%m-%d %H:%M:%S}{str(offset).strip()}",
                "%Y-%m-%d %H:%M:%S%z",
            )
        except ValueError:
            pass
    return moment


def read_dimensions(path: Path) -> tuple[int, int]:
    try:
        with Image.open(path) as image:
            return image.size
    except (OSError, Image.DecompressionBombError):
        return 0, 0


class DirectoryAssetSource:
    """Asset source backed by a directory tree.

    Implements the AssetSource protocol.
    """

    def __init__(self, library_root: Path):
        """Initialize the source.

        Args:
            library_root: Root folder of the library.
        """
        self._root = library_root
        self._resources: dict[str, tuple[Resource, ...]] = {}

    @property
    def library_root(self) -> Path:
        return self._root

    def request_access(self) -> None:
        if not self._root.is_dir():
            raise AuthorizationDeniedError(f"restricted (library not found: {self._root})")
        if not os.access(self._root, os.R_OK | os.X_OK):
            raise AuthorizationDeniedError(f"denied ({self._root})")
        logger.debug("library.auth status=authorized root=%s", self._root)

    def fetch_assets(self, start: datetime, end: datetime) -> Iterator[Asset]:
        """Assets captured in [start, end], oldest first."""
        start, end = to_local(start), to_local(end)
        selected: list[Asset] = []
        self._resources.clear()

        for asset, resources in self._scan():
            if asset.capture_time is not None:
                capture = to_local(asset.capture_time)
                if not start <= capture <= end:
                    continue
            self._resources[asset.identifier] = resources
            selected.append(asset)

        selected.sort(
            key=lambda a: (
                a.capture_time is not None,
                to_local(a.capture_time) if a.capture_time else start,
                a.identifier,
            )
        )
        logger.debug("fetch.done total=%d root=%s", len(selected), self._root)
        return iter(selected)

    def resources_of(self, asset: Asset) -> tuple[Resource, ...]:
        return self._resources.get(asset.identifier, ())

    def _scan(self) -> Iterator[tuple[Asset, tuple[Resource, ...]]]:
        groups: dict[tuple[Path, str], list[Path]] = defaultdict(list)
        for path in sorted(self._root.rglob("*")):
            if path.name.startswith(".") or not path.is_file():
                continue
            ext = _ext(path)
            if ext in IMAGE_EXTENSIONS | VIDEO_EXTENSIONS | AUDIO_EXTENSIONS | ADJUSTMENT_EXTENSIONS:
                groups[(path.parent, path.stem.lower())].append(path)

        for (parent, _), files in groups.items():
            built = self._build_asset(parent, files)
            if built is not None:
                yield built

    def _build_asset(
        self, parent: Path, files: list[Path],
    ) -> Optional[tuple[Asset, tuple[Resource, ...]]]:
        images = [f for f in files if _ext(f) in IMAGE_EXTENSIONS]
        videos = [f for f in files if _ext(f) in VIDEO_EXTENSIONS]
        audio = [f for f in files if _ext(f) in AUDIO_EXTENSIONS]
        adjustments = [f for f in files if _ext(f) in ADJUSTMENT_EXTENSIONS]

        if images:
            primary = images[0]
            media_type = MediaType.IMAGE
        elif videos:
            primary = videos[0]
            media_type = MediaType.VIDEO
        elif audio:
            primary = audio[0]
            media_type = MediaType.AUDIO
        else:
            return None

        subtypes = MediaSubtype.NONE
        if images and videos:
            subtypes |= MediaSubtype.PHOTO_LIVE

        identifier = (parent / primary.stem).relative_to(self._root).as_posix()

        def resource(path: Path, kind: ResourceType) -> Resource:
            return Resource(
                asset_id=identifier,
                type=kind,
                type_identifier=identifier_for_extension(_ext(path)),
                original_filename=path.name,
                source_path=path,
            )

        resources: list[Resource] = []
        for path in images:
            kind = ResourceType.PHOTO if path == primary else ResourceType.ALTERNATE_PHOTO
            resources.append(resource(path, kind))
        for path in videos:
            if media_type == MediaType.IMAGE:
                kind = ResourceType.PAIRED_VIDEO
            else:
                kind = ResourceType.VIDEO if path == primary else ResourceType.FULL_SIZE_VIDEO
            resources.append(resource(path, kind))
        for path in audio:
            resources.append(resource(path, ResourceType.AUDIO))
        for path in adjustments:
            resources.append(resource(path, ResourceType.ADJUSTMENT_DATA))

        capture_time = read_exif_datetime(primary) if media_type == MediaType.IMAGE else None
        if capture_time is None:
            try:
                capture_time = datetime.fromtimestamp(primary.stat().st_mtime)
            except OSError:
                capture_time = None

        width, height = read_dimensions(primary) if media_type == MediaType.IMAGE else (0, 0)

        asset = Asset(
            identifier=identifier,
            capture_time=capture_time,
            media_type=media_type,
            subtypes=subtypes,
            pixel_width=width,
            pixel_height=height,
        )
        return asset, tuple(resources)


class CopyResourceWriter:
    """Copies a resource's backing file to the destination.

    Implements the ResourceWriter protocol. Bytes land in a hidden
    ``.partial`` file first so an interrupted copy never leaves a
    destination that incremental runs would treat as done.
    """

    def write(self, resource: Resource, destination: Path) -> None:
        source = resource.source_path
        if source is None:
            raise ResourceWriteError(
                "Resource has no backing file",
                code=2,
                reason=f"resource type {resource.type_label} is not available locally",
            )

        partial = destination.with_name(f".{destination.name}.partial")
        try:
            shutil.copy2(source, partial)
            os.replace(partial, destination)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise ResourceWriteError(
                f"Failed to copy {source.name}",
                domain="OSError",
                code=e.errno or 0,
                underlying=e,
                reason=e.strerror,
            ) from e
