"""Format geometry: layout rectangles, crop boxes, font sizes and spacing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from diary_share_image.constants import (
    BASE_AFTER_DATE_SPACING,
    BASE_AFTER_TITLE_SPACING,
    BASE_BRAND_FONT_SIZE,
    BASE_CONTENT_FONT_SIZE,
    BASE_CONTENT_FONT_SIZE_LONG,
    BASE_DATE_FONT_SIZE,
    BASE_HEIGHT,
    BASE_TITLE_FONT_SIZE,
    BASE_TITLE_FONT_SIZE_LONG,
    BASE_WIDTH,
    CONTENT_LENGTH_THRESHOLD,
    CONTENT_MAX_LINES,
    MAX_SCALE,
    MIN_SCALE,
    PHOTO_SPACING,
    PORTRAIT_MIN_TEXT_HEIGHT,
    PORTRAIT_PHOTO_FRACTION,
    SPLIT_GAP,
    SQUARE_MIN_TEXT_WIDTH,
    SQUARE_PHOTO_FRACTION,
    THREE_PHOTO_TOP_FRACTION,
    TITLE_LENGTH_THRESHOLD,
    TITLE_MAX_LENGTH_THRESHOLD,
    TITLE_MAX_LINES,
    TITLE_MAX_LINES_LONG,
)
from diary_share_image.exceptions import GeometryError
from diary_share_image.type_defs import Spacing, TextSizes

if TYPE_CHECKING:  # pragma: no cover
    from diary_share_image.formats import ShareFormat
    from diary_share_image.type_defs import DiaryEntry


@dataclass(frozen=True)
class Rect:
    """Axis aligned rectangle in canvas pixel space."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        """Right edge."""
        return self.left + self.width

    @property
    def bottom(self) -> float:
        """Bottom edge."""
        return self.top + self.height

    @property
    def area(self) -> float:
        """Width times height, zero for empty rects."""
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def is_empty(self) -> bool:
        """True when either side is not positive."""
        return self.width <= 0 or self.height <= 0

    def intersect(self, other: Rect) -> Rect:
        """Return the overlap of two rects (may be empty)."""
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        return Rect(left, top, max(0.0, right - left), max(0.0, bottom - top))

    def contains(self, other: Rect, tolerance: float = 1e-6) -> bool:
        """Return True when other lies inside this rect."""
        return (
            other.left >= self.left - tolerance
            and other.top >= self.top - tolerance
            and other.right <= self.right + tolerance
            and other.bottom <= self.bottom + tolerance
        )

    def deflate(self, delta: float) -> Rect:
        """Return a copy inset by delta on all sides."""
        return Rect(
            self.left + delta,
            self.top + delta,
            max(0.0, self.width - 2 * delta),
            max(0.0, self.height - 2 * delta),
        )

    def union(self, other: Rect) -> Rect:
        """Return the smallest rect covering both."""
        left = min(self.left, other.left)
        top = min(self.top, other.top)
        right = max(self.right, other.right)
        bottom = max(self.bottom, other.bottom)
        return Rect(left, top, right - left, bottom - top)

    def to_box(self) -> tuple[int, int, int, int]:
        """Round to an integer (x0, y0, x1, y1) box for Pillow."""
        return (
            round(self.left),
            round(self.top),
            round(self.right),
            round(self.bottom),
        )


def _format_scale(fmt: ShareFormat) -> float:
    """Average of width and height ratios to the baseline, clamped."""
    width_scale = fmt.width / BASE_WIDTH
    height_scale = fmt.height / BASE_HEIGHT
    return _clamp((width_scale + height_scale) / 2, MIN_SCALE, MAX_SCALE)


def _text_scale(fmt: ShareFormat) -> float:
    """Square formats scale by width alone."""
    if fmt.is_square:
        return _clamp(fmt.width / BASE_WIDTH, MIN_SCALE, MAX_SCALE)
    return _format_scale(fmt)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def split_layout(fmt: ShareFormat) -> tuple[Rect, Rect]:
    """
    Partition the canvas into a photo region and a text region.

    Square formats split left/right, portrait formats top/bottom. The
    photo side keeps a fixed share of the canvas but always leaves a
    minimum band for text, and a gap scaled by the HD factor separates
    the two regions.

    Returns:
        (photo_rect, text_rect)

    """
    w = float(fmt.width)
    h = float(fmt.height)
    hd = fmt.hd_factor
    gap = SPLIT_GAP * hd

    if fmt.is_square:
        photo_w = _clamp(w * SQUARE_PHOTO_FRACTION, 0.0,
                         w - SQUARE_MIN_TEXT_WIDTH * hd)
        photo_rect = Rect(0.0, 0.0, photo_w, h)
        text_rect = Rect(photo_rect.right + gap, 0.0, w - photo_w - gap, h)
        return photo_rect, text_rect

    photo_h = _clamp(h * PORTRAIT_PHOTO_FRACTION, 0.0,
                     h - PORTRAIT_MIN_TEXT_HEIGHT * hd)
    photo_rect = Rect(0.0, 0.0, w, photo_h)
    text_rect = Rect(0.0, photo_rect.bottom + gap, w, h - photo_h - gap)
    return photo_rect, text_rect


def crop_rect(
    image_w: float,
    image_h: float,
    target_w: float,
    target_h: float,
) -> Rect:
    """
    Return the centered source rect that crops an image to fill a target.

    The result has the target's aspect ratio and lies inside the image.
    Wider images keep their full height, taller ones their full width.

    Raises:
        GeometryError: If any dimension is not positive.

    """
    if min(image_w, image_h, target_w, target_h) <= 0:
        msg = (
            "crop_rect needs positive sizes, got image "
            f"{image_w}x{image_h} and target {target_w}x{target_h}"
        )
        raise GeometryError(msg)

    image_aspect = image_w / image_h
    target_aspect = target_w / target_h

    if image_aspect > target_aspect:
        crop_h = float(image_h)
        crop_w = min(float(image_w), crop_h * target_aspect)
        return Rect((image_w - crop_w) / 2, 0.0, crop_w, crop_h)

    crop_w = float(image_w)
    crop_h = min(float(image_h), crop_w / target_aspect)
    return Rect(0.0, (image_h - crop_h) / 2, crop_w, crop_h)


def text_sizes(fmt: ShareFormat, diary: DiaryEntry) -> TextSizes:
    """Pick initial font sizes and title line limit for a diary entry."""
    scale = _text_scale(fmt)
    title_len = len(diary.title)
    content_len = len(diary.content)

    title_base = (
        BASE_TITLE_FONT_SIZE_LONG
        if title_len > TITLE_LENGTH_THRESHOLD
        else BASE_TITLE_FONT_SIZE
    )
    content_base = (
        BASE_CONTENT_FONT_SIZE_LONG
        if content_len > CONTENT_LENGTH_THRESHOLD
        else BASE_CONTENT_FONT_SIZE
    )
    return TextSizes(
        date_size=float(round(BASE_DATE_FONT_SIZE * scale)),
        title_size=float(round(title_base * scale)),
        title_max_lines=(
            TITLE_MAX_LINES_LONG
            if title_len > TITLE_MAX_LENGTH_THRESHOLD
            else TITLE_MAX_LINES
        ),
        content_size=float(round(content_base * scale)),
        content_max_lines=CONTENT_MAX_LINES,
    )


def spacing(fmt: ShareFormat) -> Spacing:
    """Return the gaps after the date and title blocks."""
    scale = _format_scale(fmt)
    return Spacing(
        after_date=float(round(BASE_AFTER_DATE_SPACING * scale)),
        after_title=float(round(BASE_AFTER_TITLE_SPACING * scale)),
    )


def brand_font_size(fmt: ShareFormat) -> float:
    """Return the branding stamp font size."""
    return float(round(BASE_BRAND_FONT_SIZE * _format_scale(fmt)))


def photo_gap(fmt: ShareFormat) -> float:
    """Gap between photo cells, scaled for HD formats."""
    return PHOTO_SPACING * fmt.hd_factor


def photo_cells(count: int, area: Rect, fmt: ShareFormat) -> list[Rect]:
    """
    Return destination cells for ``count`` photos inside ``area``.

    One photo fills the area. Two sit side by side on square formats
    and stacked otherwise. Three use two cells across the top share of
    the height and one full width cell below. Counts above three are
    laid out as three.
    """
    if count <= 0:
        return []
    if area.is_empty:
        msg = f"Photo area must have positive size, got {area}"
        raise GeometryError(msg)

    gap = photo_gap(fmt)
    if count == 1:
        return [area]

    if count == 2:  # noqa: PLR2004
        if fmt.is_square:
            cell_w = (area.width - gap) / 2
            return [
                Rect(area.left, area.top, cell_w, area.height),
                Rect(area.left + cell_w + gap, area.top, cell_w, area.height),
            ]
        cell_h = (area.height - gap) / 2
        return [
            Rect(area.left, area.top, area.width, cell_h),
            Rect(area.left, area.top + cell_h + gap, area.width, cell_h),
        ]

    top_h = (area.height - gap) * THREE_PHOTO_TOP_FRACTION
    bottom_h = (area.height - gap) - top_h
    top_cell_w = (area.width - gap) / 2
    return [
        Rect(area.left, area.top, top_cell_w, top_h),
        Rect(area.left + top_cell_w + gap, area.top, top_cell_w, top_h),
        Rect(area.left, area.top + top_h + gap, area.width, bottom_h),
    ]
