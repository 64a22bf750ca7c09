"""
Color-managed decoding for photo bytes.

Photos from wide-gamut cameras usually embed a Display P3 or similar
ICC profile. Compositing their raw pixel values into an sRGB canvas
shifts colors visibly, so every decode goes through ``ImageCms`` and
lands in sRGB before it is drawn.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from PIL import Image, ImageCms, ImageOps, UnidentifiedImageError

from diary_share_image.constants import COLOR_BLACK, COLOR_MODE_RGB
from diary_share_image.exceptions import PhotoDecodeError
from diary_share_image.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from diary_share_image.type_defs import RGB, ShareLogger

_SRGB_PROFILE = ImageCms.createProfile("sRGB")
_CMYK_MODES = ("CMYK",)
# Pillow raises ValueError for bad tile tables and SyntaxError for
# malformed headers in several plugins.
_DECODE_ERRORS = (
    UnidentifiedImageError,
    OSError,
    ValueError,
    SyntaxError,
    Image.DecompressionBombError,
)


def to_rgb(img: Image.Image, *, bg_color: RGB = COLOR_BLACK) -> Image.Image:
    """Convert PIL image to RGB, alpha compositing if needed."""
    if img.mode == COLOR_MODE_RGB:
        return img
    if img.mode in ("RGBA", "LA") or (
        img.mode == "P" and "transparency" in img.info
    ):
        bg = Image.new("RGBA", img.size, (*bg_color, 255))
        comp = Image.alpha_composite(bg, img.convert("RGBA"))
        return comp.convert(COLOR_MODE_RGB)
    return img.convert(COLOR_MODE_RGB)


def _is_srgb(profile: ImageCms.ImageCmsProfile) -> bool:
    description = ImageCms.getProfileDescription(profile) or ""
    return "srgb" in description.lower().replace(" ", "")


def to_srgb(
    img: Image.Image,
    *,
    log: ShareLogger = logger,
) -> Image.Image:
    """
    Return an RGB image whose pixels are in the sRGB color space.

    Images without an embedded profile are assumed to be sRGB already.
    A profile that cannot be parsed is logged and the pixels are used
    as-is.
    """
    icc = img.info.get("icc_profile")
    if not icc:
        return to_rgb(img)

    try:
        source = ImageCms.ImageCmsProfile(io.BytesIO(icc))
        if _is_srgb(source) and img.mode == COLOR_MODE_RGB:
            return img
        if img.mode not in (COLOR_MODE_RGB, *_CMYK_MODES, "L"):
            img = to_rgb(img)
        converted = ImageCms.profileToProfile(
            img,
            source,
            _SRGB_PROFILE,
            renderingIntent=ImageCms.Intent.PERCEPTUAL,
            outputMode=COLOR_MODE_RGB,
        )
    except (ImageCms.PyCMSError, OSError) as exc:
        log.warning("Could not apply embedded color profile: %s", exc)
        return to_rgb(img)

    if converted is None:  # pragma: no cover - only for inPlace=True
        return to_rgb(img)
    converted.info.pop("icc_profile", None)
    return converted


def decode_managed(
    data: bytes | None,
    *,
    log: ShareLogger = logger,
) -> Image.Image:
    """
    Decode photo bytes into an upright sRGB image.

    Raises:
        PhotoDecodeError: If the bytes are missing, not an image, or an
            image whose pixel data cannot be read (truncated strips,
            tiles extending past the declared size).

    """
    if not data:
        msg = "no image bytes available"
        raise PhotoDecodeError(msg)
    try:
        with Image.open(io.BytesIO(data)) as opened:
            opened.load()
            upright = ImageOps.exif_transpose(opened)
            if "icc_profile" in opened.info:
                upright.info["icc_profile"] = opened.info["icc_profile"]
        managed = to_srgb(upright, log=log)
        if managed is not upright:
            upright.close()
        return managed
    except _DECODE_ERRORS as exc:
        msg = f"cannot decode image bytes: {exc}"
        raise PhotoDecodeError(msg) from exc
