"""
Share image generation: the pipeline that assembles one diary image.

Runs geometry, photo composition and text composition in sequence on a
fresh canvas, encodes it as PNG and optionally writes it to disk. Encode
and write failures come back as a ``Failure`` so callers can show a
single "could not generate image" message; geometry precondition
violations are programming errors and propagate.
"""

from __future__ import annotations

import io
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, ImageDraw

from diary_share_image.compositor.geometry import Rect, split_layout
from diary_share_image.compositor.photos import draw_photos
from diary_share_image.compositor.text import (
    FontSet,
    TextPlan,
    draw_branding,
    draw_text,
    fill_text_panel,
)
from diary_share_image.config import ShareImageConfig
from diary_share_image.constants import (
    COLOR_BACKGROUND_END,
    COLOR_BACKGROUND_START,
    COLOR_MODE_RGB,
    COLOR_PHOTO_PLACEHOLDER,
    OUTPUT_FORMAT,
)
from diary_share_image.dates import format_diary_date
from diary_share_image.exceptions import ImageGenerationError
from diary_share_image.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

    from diary_share_image.formats import ShareFormat
    from diary_share_image.type_defs import (
        RGB,
        DateFormatter,
        DiaryEntry,
        PhotoHandle,
        ShareLogger,
    )


@dataclass(frozen=True)
class ShareImage:
    """Encoded share image ready to hand to a share sheet."""

    data: bytes
    size: tuple[int, int]
    format: ShareFormat
    path: Path | None = None


@dataclass(frozen=True)
class Success:
    """Successful generation result."""

    value: ShareImage

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Failed generation result carrying the error."""

    error: ImageGenerationError

    @property
    def ok(self) -> bool:
        return False


GenerationResult = Success | Failure


@dataclass(frozen=True)
class RenderReport:
    """What was painted where during one render."""

    photo_rect: Rect
    text_rect: Rect
    photo_cells: tuple[Rect, ...]
    text_plan: TextPlan
    brand_rect: Rect


def make_background(size: tuple[int, int], start: RGB, end: RGB) -> Image.Image:
    """Linear gradient from start (top-left) to end (bottom-right)."""
    w, h = size
    xs = np.arange(w, dtype=np.float32)[np.newaxis, :]
    ys = np.arange(h, dtype=np.float32)[:, np.newaxis]
    # projection of each pixel onto the canvas diagonal, 0..1
    t = (xs * w + ys * h) / np.float32(w * w + h * h)
    mask = Image.fromarray(np.clip(np.rint(t * 255), 0, 255).astype(np.uint8))
    return Image.composite(
        Image.new(COLOR_MODE_RGB, (w, h), end),
        Image.new(COLOR_MODE_RGB, (w, h), start),
        mask,
    )


def _fill_rect(canvas: Image.Image, rect: Rect, color: RGB) -> None:
    x0, y0, x1, y1 = rect.to_box()
    if x1 > x0 and y1 > y0:
        ImageDraw.Draw(canvas).rectangle([x0, y0, x1 - 1, y1 - 1], fill=color)


def render_share_canvas(  # noqa: PLR0913
    diary: DiaryEntry,
    fmt: ShareFormat,
    photos: Sequence[PhotoHandle] | None = None,
    *,
    config: ShareImageConfig | None = None,
    date_formatter: DateFormatter = format_diary_date,
    log: ShareLogger = logger,
) -> tuple[Image.Image, RenderReport]:
    """
    Paint the full share image onto a new canvas.

    Returns the canvas sized exactly to ``fmt`` and a report of the
    regions that were painted.
    """
    cfg = config or ShareImageConfig()
    fonts = FontSet(cfg.text.font_path, cfg.text.bold_font_path)

    canvas = make_background(
        fmt.size, COLOR_BACKGROUND_START, COLOR_BACKGROUND_END,
    )
    photo_rect, text_rect = split_layout(fmt)

    cells: list[Rect] = []
    if photos:
        cells = draw_photos(
            canvas, photos, photo_rect, fmt,
            quality=cfg.photos.thumbnail_quality,
            origin_fallback=cfg.photos.legacy_origin_fallback,
            log=log,
        )
    else:
        _fill_rect(canvas, photo_rect, COLOR_PHOTO_PLACEHOLDER)

    fill_text_panel(canvas, text_rect)
    plan = draw_text(
        canvas, diary, fmt, text_rect,
        fonts=fonts, date_formatter=date_formatter,
        locale=cfg.text.locale, log=log,
    )
    brand_rect = draw_branding(
        canvas, fmt, text_rect, fonts=fonts, text=cfg.text.brand_text,
    )
    report = RenderReport(
        photo_rect=photo_rect,
        text_rect=text_rect,
        photo_cells=tuple(cells),
        text_plan=plan,
        brand_rect=brand_rect,
    )
    return canvas, report


def encode_png(canvas: Image.Image) -> bytes:
    """Encode the canvas in the output format."""
    buffer = io.BytesIO()
    canvas.save(buffer, format=OUTPUT_FORMAT)
    return buffer.getvalue()


def share_image_name(
    diary: DiaryEntry,
    fmt: ShareFormat,
    timestamp_ms: int,
) -> str:
    """Build the output filename for a share image."""
    entry = diary.entry_id.replace(" ", "_").replace("/", "_")
    return f"diary_{entry}_{fmt.label}_{timestamp_ms}.png"


def generate_share_image(  # noqa: PLR0913
    diary: DiaryEntry,
    fmt: ShareFormat,
    photos: Sequence[PhotoHandle] | None = None,
    *,
    config: ShareImageConfig | None = None,
    date_formatter: DateFormatter = format_diary_date,
    log: ShareLogger = logger,
    encoder: Callable[[Image.Image], bytes] = encode_png,
) -> GenerationResult:
    """
    Render, encode and optionally save a share image.

    Returns ``Success`` with the encoded image or ``Failure`` with an
    :class:`ImageGenerationError` when encoding or writing fails.
    """
    cfg = config or ShareImageConfig()
    log.info(
        "Starting image generation: %s (diary %s)", fmt.label, diary.entry_id,
    )

    canvas, report = render_share_canvas(
        diary, fmt, photos,
        config=cfg, date_formatter=date_formatter, log=log,
    )
    log.debug(
        "Painted %d photo cell(s); text fitted=%s after %d pass(es)",
        len(report.photo_cells), report.text_plan.fitted,
        report.text_plan.iterations,
    )

    try:
        data = encoder(canvas)
    except (OSError, ValueError) as exc:
        log.error("Image generation error: %s", exc)
        return Failure(
            ImageGenerationError(
                "Failed to convert image data", original_error=exc,
            ),
        )
    finally:
        canvas.close()

    path: Path | None = None
    if cfg.output.write_file:
        out_dir = Path(cfg.output.output)
        path = out_dir / share_image_name(
            diary, fmt, time.time_ns() // 1_000_000,
        )
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            log.error("Failed to write share image %s: %s", path, exc)
            return Failure(
                ImageGenerationError(
                    "Failed to save image file", original_error=exc,
                ),
            )

    log.info(
        "Image generation completed: %s (%d bytes)",
        path if path is not None else "in memory", len(data),
    )
    return Success(ShareImage(data=data, size=fmt.size, format=fmt, path=path))
