"""Test doubles and file fixtures shared by the test modules.

Fakes implement the AssetSource / ResourceWriter protocols in memory so
the exporter can be driven without a real library.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from PIL import Image

from photos_export.core.errors import AuthorizationDeniedError, ResourceWriteError
from photos_export.core.models import (
    Asset,
    MediaSubtype,
    MediaType,
    Resource,
    ResourceType,
)

CAPTURE = datetime(2025, 1, 2, 3, 4, 5)


def make_asset(
    identifier: str = "asset-1",
    capture_time: Optional[datetime] = CAPTURE,
    media_type: MediaType = MediaType.IMAGE,
    subtypes: MediaSubtype = MediaSubtype.NONE,
    pixel_width: int = 4032,
    pixel_height: int = 3024,
    duration: float = 0.0,
) -> Asset:
    return Asset(
        identifier=identifier,
        capture_time=capture_time,
        media_type=media_type,
        subtypes=subtypes,
        pixel_width=pixel_width,
        pixel_height=pixel_height,
        duration=duration,
    )


def make_resource(
    original_filename: str = "IMG_0001.JPG",
    type: ResourceType = ResourceType.PHOTO,
    type_identifier: str = "public.jpeg",
    asset_id: str = "asset-1",
) -> Resource:
    return Resource(
        asset_id=asset_id,
        type=type,
        type_identifier=type_identifier,
        original_filename=original_filename,
    )


@dataclass
class FakeAssetSource:
    """In-memory asset source."""
    entries: list[tuple[Asset, list[Resource]]] = field(default_factory=list)
    deny: bool = False
    fetched_ranges: list[tuple[datetime, datetime]] = field(default_factory=list)

    def add(self, asset: Asset, *resources: Resource) -> Asset:
        self.entries.append((asset, list(resources)))
        return asset

    def request_access(self) -> None:
        if self.deny:
            raise AuthorizationDeniedError("denied")

    def fetch_assets(self, start: datetime, end: datetime) -> Iterable[Asset]:
        self.fetched_ranges.append((start, end))
        return iter([asset for asset, _ in self.entries])

    def resources_of(self, asset: Asset) -> list[Resource]:
        for candidate, resources in self.entries:
            if candidate.identifier == asset.identifier:
                return list(resources)
        return []


@dataclass
class RecordingWriter:
    """Writes a small payload per resource and records every call.

    Resources whose original filename is in ``fail_names`` fail with a
    structured ResourceWriteError.
    """
    fail_names: set[str] = field(default_factory=set)
    raise_plain: bool = False
    writes: list[tuple[Resource, Path]] = field(default_factory=list)

    def write(self, resource: Resource, destination: Path) -> None:
        self.writes.append((resource, destination))
        if resource.original_filename in self.fail_names:
            if self.raise_plain:
                raise RuntimeError("network unavailable")
            raise ResourceWriteError(
                "The operation couldn't be completed.",
                domain="PHPhotosErrorDomain",
                code=3164,
                underlying=OSError(60, "Operation timed out"),
            )
        destination.write_bytes(f"payload:{resource.original_filename}".encode())

    @property
    def written_paths(self) -> list[Path]:
        return [dest for _, dest in self.writes]


def create_jpeg(
    path: Path,
    date_taken: Optional[datetime] = None,
    size: tuple[int, int] = (64, 48),
    color: str = "red",
) -> Path:
    """Create a JPEG, with an EXIF DateTime when ``date_taken`` is given."""
    path.parent.mkdir(parents=True, exist_ok=True)
    image = Image.new("RGB", size, color=color)
    if date_taken is not None:
        exif = Image.Exif()
        exif[306] = date_taken.strftime("%Y:%m:%d %H:%M:%S")
        image.save(path, "JPEG", exif=exif.tobytes())
    else:
        image.save(path, "JPEG")
    return path


def create_file(path: Path, mtime: Optional[datetime] = None, data: bytes = b"data") -> Path:
    """Create a plain file, optionally with a given (local) modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    if mtime is not None:
        stamp = mtime.timestamp()
        os.utime(path, (stamp, stamp))
    return path


@dataclass
class RecordingProgress:
    """ProgressReporter that keeps every call for assertions."""
    phases: list[tuple[str, int]] = field(default_factory=list)
    advances: list[str] = field(default_factory=list)
    ended: int = 0
    infos: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def start_phase(self, name: str, total: int) -> None:
        self.phases.append((name, total))

    def advance_phase(self, amount: int = 1, description: Optional[str] = None) -> None:
        self.advances.append(description or "")

    def end_phase(self) -> None:
        self.ended += 1

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)
