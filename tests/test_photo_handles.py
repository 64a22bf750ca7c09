"""Tests for file and in-memory photo handles."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image

import diary_share_image.photo_handles as dsi_handles
from diary_share_image.constants import COLOR_MODE_RGB
from diary_share_image.type_defs import PhotoHandle

if TYPE_CHECKING:
    from _pytest.logging import LogCaptureFixture
    from pytest_mock import MockerFixture


def test_fill_resize_covers_target() -> None:
    """Downscaling keeps both sides at least as large as the target."""
    img = Image.new(COLOR_MODE_RGB, (400, 300))
    out = dsi_handles.fill_resize(img, (100, 100))
    assert out.size == (133, 100)


def test_fill_resize_never_upscales() -> None:
    """Small images are returned untouched."""
    img = Image.new(COLOR_MODE_RGB, (50, 50))
    assert dsi_handles.fill_resize(img, (100, 100)) is img


class TestBytesPhotoHandle:
    """Handles over bytes already in memory."""

    def test_managed_thumbnail_is_resized_jpeg(
        self,
        make_image_bytes: Callable[..., bytes],
    ) -> None:
        """Thumbnails are JPEG and just large enough to fill the target."""
        handle = dsi_handles.BytesPhotoHandle(
            make_image_bytes((400, 300), "green", "PNG"),
        )
        assert isinstance(handle, PhotoHandle)

        data = handle.fetch_managed_thumbnail((100, 100), 90)

        assert data is not None
        with Image.open(io.BytesIO(data)) as thumb:
            assert thumb.format == "JPEG"
            assert thumb.size == (133, 100)

    def test_missing_bytes_yield_none(self) -> None:
        """No data means no origin and no thumbnail."""
        handle = dsi_handles.BytesPhotoHandle(None)
        assert handle.fetch_origin_bytes() is None
        assert handle.fetch_managed_thumbnail((10, 10), 90) is None

    def test_corrupt_bytes_yield_none(self) -> None:
        """Undecodable origin bytes produce no thumbnail."""
        handle = dsi_handles.BytesPhotoHandle(b"\x00\x01\x02")
        assert handle.fetch_origin_bytes() == b"\x00\x01\x02"
        assert handle.fetch_managed_thumbnail((10, 10), 90) is None


class TestFilePhotoHandle:
    """Handles reading local image files."""

    def test_reads_file_bytes(
        self,
        tmp_path: Path,
        make_image_bytes: Callable[..., bytes],
    ) -> None:
        """Origin bytes are the file contents."""
        data = make_image_bytes((20, 20), "red")
        path = tmp_path / "photo.jpg"
        path.write_bytes(data)

        handle = dsi_handles.FilePhotoHandle(path)
        assert handle.fetch_origin_bytes() == data
        assert handle.fetch_managed_thumbnail((10, 10), 80) is not None
        assert "photo.jpg" in repr(handle)

    def test_missing_file_logs_warning(
        self,
        tmp_path: Path,
        caplog: LogCaptureFixture,
    ) -> None:
        """An unreadable path returns None instead of raising."""
        handle = dsi_handles.FilePhotoHandle(tmp_path / "missing.jpg")
        with caplog.at_level(logging.WARNING):
            assert handle.fetch_origin_bytes() is None
            assert handle.fetch_managed_thumbnail((10, 10), 80) is None
        assert "Cannot read photo" in caplog.text


def test_thumbnail_releases_decoded_images(
    mocker: MockerFixture,
    make_image_bytes: Callable[..., bytes],
) -> None:
    """Both the full decode and the resized copy are closed."""
    closed: list[str] = []

    def tracked(img: Image.Image, label: str) -> Image.Image:
        original_close = img.close

        def close() -> None:
            closed.append(label)
            original_close()

        img.close = close  # type: ignore[method-assign]
        return img

    real_decode = dsi_handles.decode_managed
    real_resize = dsi_handles.fill_resize
    mocker.patch.object(
        dsi_handles, "decode_managed",
        lambda data: tracked(real_decode(data), "decoded"),
    )
    mocker.patch.object(
        dsi_handles, "fill_resize",
        lambda img, size: tracked(real_resize(img, size), "resized"),
    )

    data = dsi_handles.encode_thumbnail(
        make_image_bytes((400, 300)), (100, 100), 90,
    )

    assert data is not None
    assert sorted(closed) == ["decoded", "resized"]
