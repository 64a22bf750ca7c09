"""
Photo handles backed by local files or in-memory bytes.

Both implement the ``PhotoHandle`` protocol. The managed thumbnail path
decodes through ``color.decode_managed`` so callers always receive sRGB
JPEG bytes, large enough on both axes to be cropped to fill the target.
"""

from __future__ import annotations

import io
from pathlib import Path

from PIL import Image

from diary_share_image.color import decode_managed
from diary_share_image.constants import THUMBNAIL_FORMAT
from diary_share_image.exceptions import PhotoDecodeError
from diary_share_image.logging_utils import logger


def fill_resize(img: Image.Image, target_size: tuple[int, int]) -> Image.Image:
    """
    Downscale so both sides still cover target_size; never upscale.

    The crop to the final aspect ratio happens later in the compositor.
    """
    target_w, target_h = target_size
    w, h = img.size
    scale = max(target_w / w, target_h / h)
    if scale >= 1.0:
        return img
    new_size = (max(1, round(w * scale)), max(1, round(h * scale)))
    return img.resize(new_size, Image.Resampling.LANCZOS)


def encode_thumbnail(
    origin: bytes | None,
    target_size: tuple[int, int],
    quality: int,
) -> bytes | None:
    """Decode, convert to sRGB, fill-resize and re-encode as JPEG."""
    try:
        img = decode_managed(origin)
    except PhotoDecodeError as exc:
        logger.debug("Managed thumbnail unavailable: %s", exc)
        return None
    buffer = io.BytesIO()
    try:
        resized = fill_resize(img, target_size)
        resized.save(buffer, format=THUMBNAIL_FORMAT, quality=quality)
        if resized is not img:
            resized.close()
    finally:
        img.close()
    return buffer.getvalue()


class BytesPhotoHandle:
    """Photo handle over bytes already held in memory."""

    def __init__(self, data: bytes | None) -> None:
        self._data = data

    def fetch_origin_bytes(self) -> bytes | None:
        return self._data

    def fetch_managed_thumbnail(
        self,
        target_size: tuple[int, int],
        quality: int,
    ) -> bytes | None:
        return encode_thumbnail(self._data, target_size, quality)


class FilePhotoHandle:
    """Photo handle reading a local image file on demand."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FilePhotoHandle({str(self.path)!r})"

    def fetch_origin_bytes(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except OSError as exc:
            logger.warning("Cannot read photo %s: %s", self.path, exc)
            return None

    def fetch_managed_thumbnail(
        self,
        target_size: tuple[int, int],
        quality: int,
    ) -> bytes | None:
        return encode_thumbnail(self.fetch_origin_bytes(), target_size, quality)
