"""Exception types raised or returned by the share image pipeline."""

from __future__ import annotations


class ShareImageError(Exception):
    """Base class for share image failures."""


class GeometryError(ShareImageError, ValueError):
    """Layout math was given non-positive or otherwise invalid sizes."""


class PhotoDecodeError(ShareImageError):
    """Photo bytes could not be decoded into an sRGB image."""


class ImageGenerationError(ShareImageError):
    """
    The composed surface could not be encoded or written.

    Returned to callers inside a ``Failure`` rather than raised, so a
    share flow can show a single "could not generate image" message.
    """

    def __init__(
        self,
        message: str,
        *,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.original_error = original_error

    def __str__(self) -> str:
        base = super().__str__()
        if self.original_error is None:
            return base
        return f"{base}: {self.original_error}"
