"""Tests for the directory asset source and the copy writer."""
import pytest
from datetime import datetime
from pathlib import Path

from photos_export.core.errors import AuthorizationDeniedError, ResourceWriteError
from photos_export.core.models import MediaSubtype, MediaType, Resource, ResourceType
from photos_export.services.sources import (
    CopyResourceWriter,
    DirectoryAssetSource,
    read_dimensions,
    read_exif_datetime,
)

from .fixtures import create_file, create_jpeg

YEAR_2024 = (datetime(2024, 1, 1).astimezone(), datetime(2024, 12, 31, 23, 59, 59).astimezone())


class TestExifReading:
    """Tests for EXIF helpers."""

    def test_datetime_from_exif(self, tmp_path: Path):
        image = create_jpeg(tmp_path / "a.jpg", datetime(2024, 6, 15, 10, 20, 30))
        assert read_exif_datetime(image) == datetime(2024, 6, 15, 10, 20, 30)

    def test_no_exif(self, tmp_path: Path):
        assert read_exif_datetime(create_jpeg(tmp_path / "a.jpg")) is None

    def test_not_an_image(self, tmp_path: Path):
        assert read_exif_datetime(create_file(tmp_path / "a.jpg", data=b"junk")) is None

    def test_dimensions(self, tmp_path: Path):
        assert read_dimensions(create_jpeg(tmp_path / "a.jpg", size=(30, 20))) == (30, 20)
        assert read_dimensions(create_file(tmp_path / "b.jpg", data=b"junk")) == (0, 0)


class TestDirectoryAssetSource:
    """Tests for DirectoryAssetSource."""

    @pytest.fixture
    def library(self, tmp_path: Path) -> Path:
        """A small library: a live photo, a plain video, a nested photo and noise."""
        root = tmp_path / "library"
        create_jpeg(root / "IMG_0001.JPG", datetime(2024, 6, 15, 10, 20, 30), size=(64, 48))
        create_file(root / "IMG_0001.MOV", datetime(2024, 6, 15, 10, 20, 31))
        create_file(root / "IMG_0001.AAE", datetime(2024, 6, 15, 10, 21, 0))
        create_file(root / "CLIP.mp4", datetime(2024, 3, 1, 8, 0, 0))
        create_jpeg(root / "trip" / "IMG_0002.jpg", datetime(2024, 8, 1, 9, 0, 0))
        create_file(root / "OLD.mov", datetime(2023, 7, 1, 12, 0, 0))
        create_file(root / "notes.txt")
        create_file(root / ".hidden.jpg")
        return root

    @pytest.fixture
    def source(self, library: Path) -> DirectoryAssetSource:
        return DirectoryAssetSource(library)

    def test_request_access(self, source):
        source.request_access()

    def test_request_access_missing_library(self, tmp_path: Path):
        with pytest.raises(AuthorizationDeniedError):
            DirectoryAssetSource(tmp_path / "missing").request_access()

    def test_fetch_filters_and_orders(self, source):
        assets = list(source.fetch_assets(*YEAR_2024))
        assert [a.identifier for a in assets] == ["CLIP", "IMG_0001", "trip/IMG_0002"]

    def test_other_years_included_by_range(self, source):
        start = datetime(2023, 1, 1).astimezone()
        assets = list(source.fetch_assets(start, YEAR_2024[1]))
        assert assets[0].identifier == "OLD"
        assert len(assets) == 4

    def test_live_photo(self, source):
        assets = {a.identifier: a for a in source.fetch_assets(*YEAR_2024)}
        live = assets["IMG_0001"]

        assert live.media_type == MediaType.IMAGE
        assert MediaSubtype.PHOTO_LIVE in live.subtypes
        assert live.capture_time == datetime(2024, 6, 15, 10, 20, 30)
        assert (live.pixel_width, live.pixel_height) == (64, 48)

        resources = source.resources_of(live)
        assert [r.type for r in resources] == [
            ResourceType.PHOTO, ResourceType.PAIRED_VIDEO, ResourceType.ADJUSTMENT_DATA,
        ]
        assert [r.type_identifier for r in resources] == [
            "public.jpeg", "com.apple.quicktime-movie", "com.apple.private.photos.aae",
        ]
        assert [r.original_filename for r in resources] == [
            "IMG_0001.JPG", "IMG_0001.MOV", "IMG_0001.AAE",
        ]
        assert all(r.asset_id == "IMG_0001" for r in resources)
        assert all(r.source_path is not None and r.source_path.exists() for r in resources)

    def test_video_uses_modification_time(self, source):
        assets = {a.identifier: a for a in source.fetch_assets(*YEAR_2024)}
        clip = assets["CLIP"]
        assert clip.media_type == MediaType.VIDEO
        assert clip.is_video
        assert clip.capture_time == datetime(2024, 3, 1, 8, 0, 0)
        assert [r.type for r in source.resources_of(clip)] == [ResourceType.VIDEO]
        assert clip.subtypes == MediaSubtype.NONE

    def test_resources_of_unknown_asset(self, source):
        from photos_export.core.models import Asset
        assert source.resources_of(Asset("nope", None)) == ()


class TestCopyResourceWriter:
    """Tests for CopyResourceWriter."""

    def test_copies(self, tmp_path: Path):
        source = create_file(tmp_path / "src" / "IMG.MOV", data=b"movie bytes")
        destination = tmp_path / "out" / "20240101000000.mov"
        destination.parent.mkdir()
        resource = Resource("a", ResourceType.VIDEO, "com.apple.quicktime-movie", "IMG.MOV", source)

        CopyResourceWriter().write(resource, destination)

        assert destination.read_bytes() == b"movie bytes"
        assert list(destination.parent.iterdir()) == [destination]

    def test_missing_source(self, tmp_path: Path):
        destination = tmp_path / "out.jpg"
        resource = Resource("a", ResourceType.PHOTO, "public.jpeg", "IMG.JPG", tmp_path / "gone.jpg")

        with pytest.raises(ResourceWriteError) as exc_info:
            CopyResourceWriter().write(resource, destination)

        assert exc_info.value.domain == "OSError"
        assert exc_info.value.code == 2
        assert not destination.exists()
        assert list(tmp_path.iterdir()) == []

    def test_no_backing_file(self, tmp_path: Path):
        resource = Resource("a", ResourceType.PHOTO, "public.jpeg", "IMG.JPG")
        with pytest.raises(ResourceWriteError, match="no backing file"):
            CopyResourceWriter().write(resource, tmp_path / "out.jpg")
