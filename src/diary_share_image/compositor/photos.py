"""Photo compositor: draws 1-3 photos, cropped to fill, into the photo area."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

from PIL import Image

from diary_share_image.color import decode_managed
from diary_share_image.compositor.geometry import Rect, crop_rect, photo_cells
from diary_share_image.constants import MAX_PHOTOS, SHARE_IMAGE_QUALITY
from diary_share_image.exceptions import PhotoDecodeError
from diary_share_image.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from diary_share_image.formats import ShareFormat
    from diary_share_image.type_defs import PhotoHandle, ShareLogger


def _fetch_bytes(
    photo: PhotoHandle,
    cell: Rect,
    *,
    quality: int,
    origin_fallback: bool,
) -> bytes | None:
    """Ask the handle for sRGB bytes at least as large as the cell."""
    size = (math.ceil(cell.width), math.ceil(cell.height))
    data = photo.fetch_managed_thumbnail(size, quality)
    if data is None and origin_fallback:
        data = photo.fetch_origin_bytes()
    return data


def draw_photo_into_rect(
    canvas: Image.Image,
    img: Image.Image,
    cell: Rect,
) -> None:
    """Crop img to the cell's aspect ratio and paste it scaled into cell."""
    x0, y0, x1, y1 = cell.to_box()
    dest_w, dest_h = x1 - x0, y1 - y0
    if dest_w <= 0 or dest_h <= 0:
        return
    src = crop_rect(img.width, img.height, dest_w, dest_h)
    scaled = img.resize(
        (dest_w, dest_h),
        Image.Resampling.LANCZOS,
        box=(src.left, src.top, src.right, src.bottom),
    )
    canvas.paste(scaled, (x0, y0))
    scaled.close()


def draw_photos(  # noqa: PLR0913
    canvas: Image.Image,
    photos: Sequence[PhotoHandle],
    area: Rect,
    fmt: ShareFormat,
    *,
    quality: int = SHARE_IMAGE_QUALITY,
    origin_fallback: bool = False,
    log: ShareLogger = logger,
) -> list[Rect]:
    """
    Compose up to three photos into area and return the cells drawn.

    Photos are handled strictly one at a time (fetch, decode, draw,
    release) so at most one decoded image is alive at once. A photo that
    yields no bytes or fails to decode is skipped with a warning and its
    cell stays unpainted; the remaining photos are still drawn.
    """
    if len(photos) > MAX_PHOTOS:
        log.debug(
            "Received %d photos; only the first %d are composed",
            len(photos), MAX_PHOTOS,
        )
    selected = list(photos[:MAX_PHOTOS])
    cells = photo_cells(len(selected), area, fmt)

    drawn: list[Rect] = []
    for index, (photo, cell) in enumerate(zip(selected, cells, strict=True)):
        data = _fetch_bytes(
            photo, cell, quality=quality, origin_fallback=origin_fallback,
        )
        try:
            img = decode_managed(data, log=log)
        except PhotoDecodeError as exc:
            log.warning("Skipping photo %d: %s", index, exc)
            continue
        try:
            draw_photo_into_rect(canvas, img, cell)
        finally:
            img.close()
        drawn.append(cell)
    return drawn
