"""
Test configuration and shared fixtures for diary_share_image.

Provides diary entries, in-memory photo handles, encoded sample images
and logger propagation so ``caplog`` sees compositor warnings.

Note:
    This file is automatically loaded by pytest and should not be
    renamed.

"""
import io
from collections.abc import Callable
from datetime import date

import pytest
from PIL import Image

from diary_share_image.constants import COLOR_MODE_RGB
from diary_share_image.logging_utils import logger
from diary_share_image.type_defs import DiaryEntry


def encode_image(
    size: tuple[int, int] = (64, 48),
    color: str | tuple[int, int, int] = "red",
    image_format: str = "JPEG",
    **save_kwargs: object,
) -> bytes:
    """Encode a solid RGB image and return the bytes."""
    img = Image.new(COLOR_MODE_RGB, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=image_format, **save_kwargs)
    return buffer.getvalue()


class StubPhotoHandle:
    """In-memory photo handle that records the requests it receives."""

    def __init__(
        self,
        thumbnail: bytes | None,
        origin: bytes | None = None,
    ) -> None:
        self.thumbnail = thumbnail
        self.origin = origin
        self.thumbnail_requests: list[tuple[tuple[int, int], int]] = []
        self.origin_requests = 0

    def fetch_origin_bytes(self) -> bytes | None:
        self.origin_requests += 1
        return self.origin

    def fetch_managed_thumbnail(
        self,
        target_size: tuple[int, int],
        quality: int,
    ) -> bytes | None:
        self.thumbnail_requests.append((target_size, quality))
        return self.thumbnail


@pytest.fixture
def make_diary() -> Callable[..., DiaryEntry]:
    """Factory for diary entries with optional overrides."""

    def _build(
        *,
        title: str = "Test Title",
        content: str = "Test Content",
        when: date = date(2025, 1, 1),
        entry_id: str = "test-id",
    ) -> DiaryEntry:
        return DiaryEntry(
            title=title, content=content, date=when, entry_id=entry_id,
        )

    return _build


@pytest.fixture
def diary(make_diary: Callable[..., DiaryEntry]) -> DiaryEntry:
    """A short diary entry."""
    return make_diary()


@pytest.fixture
def make_photo() -> Callable[..., StubPhotoHandle]:
    """Factory for stub photo handles returning encoded solid images."""

    def _build(
        color: str | tuple[int, int, int] = "red",
        size: tuple[int, int] = (64, 48),
        *,
        missing: bool = False,
    ) -> StubPhotoHandle:
        if missing:
            return StubPhotoHandle(None)
        data = encode_image(size, color)
        return StubPhotoHandle(data, origin=data)

    return _build


@pytest.fixture
def sample_image() -> Image.Image:
    """Create a sample 100x100 red RGB PIL image."""
    return Image.new(COLOR_MODE_RGB, (100, 100), color="red")


@pytest.fixture(autouse=True)
def enable_logger_propagation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable propagation for the shared logger so caplog can capture."""
    monkeypatch.setattr(logger, "propagate", True)


@pytest.fixture
def make_image_bytes() -> Callable[..., bytes]:
    """Expose ``encode_image`` to tests that need raw encoded bytes."""
    return encode_image


@pytest.fixture
def stub_handle() -> type[StubPhotoHandle]:
    """The recording handle class, for tests that supply raw bytes."""
    return StubPhotoHandle
