"""Public package exports for the diary share image compositor."""

from __future__ import annotations

from .formats import ShareFormat
from .generator import (
    Failure,
    ShareImage,
    Success,
    generate_share_image,
    render_share_canvas,
)
from .photo_handles import BytesPhotoHandle, FilePhotoHandle
from .type_defs import DiaryEntry, PhotoHandle

__all__ = [
    "BytesPhotoHandle",
    "DiaryEntry",
    "Failure",
    "FilePhotoHandle",
    "PhotoHandle",
    "ShareFormat",
    "ShareImage",
    "Success",
    "generate_share_image",
    "render_share_canvas",
]
