"""
Text compositor: fits date, title and body into the text panel.

Fitting is an explicit bounded loop. Each pass measures all three blocks
at the current sizes; when they overflow, exactly one parameter shrinks
in fixed priority order (body size, then title size, then body line
height). If every parameter is at its floor, or the iteration cap is
hit, a fallback layout truncates the title and body with an ellipsis so
the painted text always stays inside the panel.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from diary_share_image.compositor.geometry import (
    Rect,
    brand_font_size,
    spacing,
    text_sizes,
)
from diary_share_image.config_defaults import DEFAULT_LOCALE
from diary_share_image.constants import (
    BRAND_ALPHA,
    BRAND_MARGIN,
    BRAND_TEXT,
    COLOR_BLACK,
    COLOR_TEXT_PANEL,
    COLOR_WHITE,
    CONTENT_ALPHA,
    CONTENT_LINE_HEIGHT,
    CONTENT_SHADOW,
    DATE_ALPHA,
    DATE_LINE_HEIGHT,
    ELLIPSIS,
    FONT_SHRINK_STEP,
    LINE_HEIGHT_STEP,
    MAX_FIT_ITERATIONS,
    MIN_CONTENT_FONT_SIZE,
    MIN_CONTENT_LINE_HEIGHT,
    MIN_TITLE_FONT_SIZE,
    TEXT_PADDING_PORTRAIT,
    TEXT_PADDING_SQUARE,
    TITLE_ALPHA,
    TITLE_LINE_HEIGHT,
    TITLE_SHADOW,
)
from diary_share_image.dates import format_diary_date
from diary_share_image.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from diary_share_image.formats import ShareFormat
    from diary_share_image.type_defs import (
        RGB,
        DateFormatter,
        DiaryEntry,
        ShareLogger,
    )

_Font = ImageFont.FreeTypeFont | ImageFont.ImageFont
_Shadow = tuple[tuple[int, int], int, float]

_DEFAULT_REGULAR_FONT = "DejaVuSans.ttf"
_DEFAULT_BOLD_FONT = "DejaVuSans-Bold.ttf"
_TOKEN_RE = re.compile(r"\s+|\S+")
_LINE_HEIGHT_EPS = 1e-9


@lru_cache(maxsize=32)
def load_font(
    px: int,
    path: str | None = None,
    *,
    bold: bool = False,
) -> _Font:
    """Load a TrueType font at px with fallback to Pillow's bundled font."""
    default = _DEFAULT_BOLD_FONT if bold else _DEFAULT_REGULAR_FONT
    try:
        return ImageFont.truetype(path or default, px)
    except OSError:
        if path is not None:
            logger.warning("Font %s not found, using default font", path)
        return ImageFont.load_default(size=px)


@dataclass(frozen=True)
class FontSet:
    """Regular and bold font files used for one render."""

    regular_path: str | None = None
    bold_path: str | None = None

    def regular(self, size: float) -> _Font:
        """Return the regular face at size px."""
        return load_font(max(1, round(size)), self.regular_path)

    def bold(self, size: float) -> _Font:
        """Return the bold face, falling back to the regular one."""
        px = max(1, round(size))
        if self.bold_path is not None:
            return load_font(px, self.bold_path, bold=True)
        if self.regular_path is not None:
            return load_font(px, self.regular_path)
        return load_font(px, bold=True)


def blend(fg: RGB, bg: RGB, alpha: float) -> RGB:
    """Return fg composited over bg at the given opacity."""
    r, g, b = (
        round(f * alpha + k * (1.0 - alpha)) for f, k in zip(fg, bg, strict=True)
    )
    return r, g, b


def text_width(text: str, font: _Font) -> float:
    """Advance width of a single line of text."""
    if not text:
        return 0.0
    return float(font.getlength(text))


def _break_token(token: str, font: _Font, max_width: float) -> list[str]:
    """Split a token with no break opportunities character by character."""
    pieces: list[str] = []
    current = ""
    for ch in token:
        if current and text_width(current + ch, font) > max_width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    pieces.append(current)
    return pieces


def _wrap_paragraph(paragraph: str, font: _Font, max_width: float) -> list[str]:
    if not paragraph:
        return [""]
    lines: list[str] = []
    current = ""
    for token in _TOKEN_RE.findall(paragraph):
        candidate = current + token
        if text_width(candidate.rstrip(), font) <= max_width:
            current = candidate
            continue
        if token.isspace():
            lines.append(current.rstrip())
            current = ""
            continue
        if current.strip():
            lines.append(current.rstrip())
        current = ""
        if text_width(token, font) <= max_width:
            current = token
            continue
        pieces = _break_token(token, font, max_width)
        lines.extend(pieces[:-1])
        current = pieces[-1]
    if current.strip() or not lines:
        lines.append(current.rstrip())
    return lines


def wrap_text(text: str, font: _Font, max_width: float) -> list[str]:
    """
    Greedy line breaking at whitespace, respecting explicit newlines.

    Tokens wider than max_width (long URLs, unspaced CJK runs) are
    broken between characters.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    lines: list[str] = []
    for paragraph in normalized.split("\n"):
        lines.extend(_wrap_paragraph(paragraph, font, max_width))
    return lines


def ellipsize(
    lines: list[str],
    max_lines: int,
    font: _Font,
    max_width: float,
) -> list[str]:
    """Keep max_lines lines, ending the last with an ellipsis if cut."""
    if max_lines <= 0:
        return []
    if len(lines) <= max_lines:
        return list(lines)
    kept = list(lines[:max_lines])
    last = kept[-1].rstrip()
    while last and text_width(last + ELLIPSIS, font) > max_width:
        last = last[:-1].rstrip()
    kept[-1] = last + ELLIPSIS
    return kept


@dataclass(frozen=True)
class TextBlock:
    """Wrapped lines of one style, positioned in canvas space."""

    lines: tuple[str, ...]
    widths: tuple[float, ...]
    font_size: float
    line_height: float
    left: float = 0.0
    top: float = 0.0
    bold: bool = False
    color: RGB = COLOR_WHITE
    shadow: _Shadow | None = None

    @property
    def line_px(self) -> float:
        """Height of a single line box."""
        return self.font_size * self.line_height

    @property
    def height(self) -> float:
        return len(self.lines) * self.line_px

    @property
    def bounds(self) -> Rect:
        """Rect covering every line box."""
        return Rect(
            self.left, self.top, max(self.widths, default=0.0), self.height,
        )


@dataclass(frozen=True)
class TextPlan:
    """Outcome of fitting: positioned blocks plus the sizes that won."""

    blocks: tuple[TextBlock, ...]
    area: Rect
    fitted: bool
    iterations: int
    title_size: float
    content_size: float
    line_height: float

    @property
    def bounds(self) -> Rect | None:
        """Union of all painted line boxes, None when nothing is painted."""
        painted = [b.bounds for b in self.blocks if b.lines]
        if not painted:
            return None
        out = painted[0]
        for rect in painted[1:]:
            out = out.union(rect)
        return out


@dataclass(frozen=True)
class _BlockStyle:
    size: float
    line_height: float
    color: RGB
    bold: bool = False
    shadow: _Shadow | None = None


def _layout_block(  # noqa: PLR0913
    text: str,
    style: _BlockStyle,
    fonts: FontSet,
    max_width: float,
    *,
    max_lines: int | None = None,
    ellipsis: bool = False,
) -> TextBlock:
    font = fonts.bold(style.size) if style.bold else fonts.regular(style.size)
    lines = wrap_text(text, font, max_width)
    if max_lines is not None:
        if ellipsis:
            lines = ellipsize(lines, max_lines, font, max_width)
        else:
            lines = lines[:max(0, max_lines)]
    return TextBlock(
        lines=tuple(lines),
        widths=tuple(text_width(line, font) for line in lines),
        font_size=style.size,
        line_height=style.line_height,
        bold=style.bold,
        color=style.color,
        shadow=style.shadow,
    )


def _styles(
    date_size: float,
    title_size: float,
    content_size: float,
    line_height: float,
    *,
    shadows: bool,
) -> tuple[_BlockStyle, _BlockStyle, _BlockStyle]:
    date_style = _BlockStyle(
        date_size, DATE_LINE_HEIGHT,
        blend(COLOR_WHITE, COLOR_TEXT_PANEL, DATE_ALPHA),
    )
    title_style = _BlockStyle(
        title_size, TITLE_LINE_HEIGHT,
        blend(COLOR_WHITE, COLOR_TEXT_PANEL, TITLE_ALPHA),
        bold=True, shadow=TITLE_SHADOW if shadows else None,
    )
    content_style = _BlockStyle(
        content_size, line_height,
        blend(COLOR_WHITE, COLOR_TEXT_PANEL, CONTENT_ALPHA),
        shadow=CONTENT_SHADOW if shadows else None,
    )
    return date_style, title_style, content_style


def text_padding(fmt: ShareFormat) -> float:
    """Inset between the text panel edge and the text."""
    return TEXT_PADDING_SQUARE if fmt.is_square else TEXT_PADDING_PORTRAIT


def fit_text(  # noqa: PLR0913
    diary: DiaryEntry,
    fmt: ShareFormat,
    content_area: Rect,
    *,
    fonts: FontSet | None = None,
    date_formatter: DateFormatter = format_diary_date,
    locale: str = DEFAULT_LOCALE,
) -> TextPlan:
    """
    Shrink text until date, title and full body fit content_area.

    Never raises for long input: after the iteration cap the fallback
    layout truncates with an ellipsis instead.
    """
    fonts = fonts or FontSet()
    area = content_area.deflate(text_padding(fmt))
    sizes = text_sizes(fmt, diary)
    gaps = spacing(fmt)
    date_text = date_formatter(diary.date, locale)
    has_title = bool(diary.title)

    date_size = sizes.date_size
    title_size = sizes.title_size
    content_size = sizes.content_size
    line_height = CONTENT_LINE_HEIGHT

    iterations = 0
    while iterations < MAX_FIT_ITERATIONS:
        iterations += 1
        date_style, title_style, content_style = _styles(
            date_size, title_size, content_size, line_height, shadows=True,
        )
        date_block = _layout_block(date_text, date_style, fonts, area.width)
        title_block = _layout_block(
            diary.title, title_style, fonts, area.width,
            max_lines=sizes.title_max_lines,
        )
        content_block = _layout_block(
            diary.content, content_style, fonts, area.width,
        )

        total = date_block.height + gaps.after_date + content_block.height
        if has_title:
            total += title_block.height + gaps.after_title

        if total <= area.height:
            blocks: list[TextBlock] = []
            y = area.top
            blocks.append(replace(date_block, left=area.left, top=y))
            y += date_block.height + gaps.after_date
            if has_title:
                blocks.append(replace(title_block, left=area.left, top=y))
                y += title_block.height + gaps.after_title
            blocks.append(replace(content_block, left=area.left, top=y))
            return TextPlan(
                blocks=tuple(blocks), area=area, fitted=True,
                iterations=iterations, title_size=title_size,
                content_size=content_size, line_height=line_height,
            )

        if content_size > MIN_CONTENT_FONT_SIZE:
            content_size = max(MIN_CONTENT_FONT_SIZE,
                               content_size - FONT_SHRINK_STEP)
        elif title_size > MIN_TITLE_FONT_SIZE:
            title_size = max(MIN_TITLE_FONT_SIZE, title_size - FONT_SHRINK_STEP)
        elif line_height > MIN_CONTENT_LINE_HEIGHT + _LINE_HEIGHT_EPS:
            line_height = max(
                MIN_CONTENT_LINE_HEIGHT,
                round(line_height - LINE_HEIGHT_STEP, 2),
            )
        else:
            break

    return _fallback_plan(
        diary, date_text, area, fonts,
        sizes=(date_size, title_size, content_size, line_height),
        title_max_lines=sizes.title_max_lines,
        gaps=(gaps.after_date, gaps.after_title),
        iterations=iterations,
    )


def _lines_that_fit(remaining: float, line_px: float) -> int:
    if line_px <= 0 or remaining <= 0:
        return 0
    return math.floor(remaining / line_px)


def _fallback_plan(  # noqa: PLR0913
    diary: DiaryEntry,
    date_text: str,
    area: Rect,
    fonts: FontSet,
    *,
    sizes: tuple[float, float, float, float],
    title_max_lines: int,
    gaps: tuple[float, float],
    iterations: int,
) -> TextPlan:
    """Truncate title and body so everything stays inside area."""
    date_size, title_size, content_size, line_height = sizes
    after_date, after_title = gaps
    date_style, title_style, content_style = _styles(
        date_size, title_size, content_size, line_height, shadows=False,
    )

    blocks: list[TextBlock] = []
    y = area.top

    date_fit = _lines_that_fit(area.bottom - y, date_style.size
                               * date_style.line_height)
    date_block = _layout_block(
        date_text, date_style, fonts, area.width,
        max_lines=date_fit, ellipsis=True,
    )
    blocks.append(replace(date_block, left=area.left, top=y))
    y += date_block.height + after_date

    if diary.title:
        title_fit = _lines_that_fit(
            area.bottom - y, title_style.size * title_style.line_height,
        )
        title_block = _layout_block(
            diary.title, title_style, fonts, area.width,
            max_lines=min(title_max_lines, title_fit), ellipsis=True,
        )
        blocks.append(replace(title_block, left=area.left, top=y))
        y += title_block.height + after_title

    content_fit = _lines_that_fit(
        area.bottom - y, content_style.size * content_style.line_height,
    )
    content_block = _layout_block(
        diary.content, content_style, fonts, area.width,
        max_lines=content_fit, ellipsis=True,
    )
    blocks.append(replace(content_block, left=area.left, top=y))

    return TextPlan(
        blocks=tuple(blocks), area=area, fitted=False,
        iterations=iterations, title_size=title_size,
        content_size=content_size, line_height=line_height,
    )


def _paint_shadow(
    canvas: Image.Image,
    block: TextBlock,
    font: _Font,
) -> None:
    """Blur a copy of the block's glyphs and darken the canvas under it."""
    if block.shadow is None or not block.lines:
        return
    (dx, dy), radius, opacity = block.shadow
    pad = 2 * radius + max(abs(dx), abs(dy))
    x0, y0, x1, y1 = block.bounds.to_box()
    x0, y0 = max(0, x0 - pad), max(0, y0 - pad)
    x1, y1 = min(canvas.width, x1 + pad), min(canvas.height, y1 + pad)
    if x1 <= x0 or y1 <= y0:
        return

    mask = Image.new("L", (x1 - x0, y1 - y0), 0)
    draw = ImageDraw.Draw(mask)
    level = round(255 * opacity)
    for i, line in enumerate(block.lines):
        mid = block.top + i * block.line_px + block.line_px / 2
        draw.text(
            (round(block.left - x0 + dx), round(mid - y0 + dy)),
            line, font=font, fill=level, anchor="lm",
        )
    mask = mask.filter(ImageFilter.GaussianBlur(radius=radius))
    canvas.paste(COLOR_BLACK, (x0, y0, x1, y1), mask)


def paint_block(
    canvas: Image.Image,
    block: TextBlock,
    fonts: FontSet,
) -> None:
    """Draw each line vertically centered in its line box."""
    font = fonts.bold(block.font_size) if block.bold else fonts.regular(
        block.font_size)
    _paint_shadow(canvas, block, font)
    draw = ImageDraw.Draw(canvas)
    for i, line in enumerate(block.lines):
        if not line:
            continue
        mid = block.top + i * block.line_px + block.line_px / 2
        draw.text(
            (round(block.left), round(mid)),
            line, font=font, fill=block.color, anchor="lm",
        )


def fill_text_panel(canvas: Image.Image, area: Rect) -> None:
    """Paint the solid panel behind the text."""
    x0, y0, x1, y1 = area.to_box()
    if x1 <= x0 or y1 <= y0:
        return
    ImageDraw.Draw(canvas).rectangle(
        [x0, y0, x1 - 1, y1 - 1], fill=COLOR_TEXT_PANEL,
    )


def draw_text(  # noqa: PLR0913
    canvas: Image.Image,
    diary: DiaryEntry,
    fmt: ShareFormat,
    content_area: Rect,
    *,
    fonts: FontSet | None = None,
    date_formatter: DateFormatter = format_diary_date,
    locale: str = DEFAULT_LOCALE,
    log: ShareLogger = logger,
) -> TextPlan:
    """Fit and paint the diary text into content_area."""
    fonts = fonts or FontSet()
    plan = fit_text(
        diary, fmt, content_area,
        fonts=fonts, date_formatter=date_formatter, locale=locale,
    )
    if not plan.fitted:
        log.info(
            "Diary text truncated to fit after %d passes", plan.iterations,
        )
    for block in plan.blocks:
        paint_block(canvas, block, fonts)
    return plan


def draw_branding(
    canvas: Image.Image,
    fmt: ShareFormat,
    area: Rect,
    *,
    fonts: FontSet | None = None,
    text: str = BRAND_TEXT,
) -> Rect:
    """Stamp the brand right-aligned in the bottom-right corner of area."""
    fonts = fonts or FontSet()
    font = fonts.bold(brand_font_size(fmt))
    margin = BRAND_MARGIN * fmt.hd_factor
    anchor_xy = (round(area.right - margin), round(area.bottom - margin))
    draw = ImageDraw.Draw(canvas)
    draw.text(
        anchor_xy, text, font=font,
        fill=blend(COLOR_WHITE, COLOR_TEXT_PANEL, BRAND_ALPHA), anchor="rd",
    )
    x0, y0, x1, y1 = draw.textbbox(anchor_xy, text, font=font, anchor="rd")
    return Rect(x0, y0, x1 - x0, y1 - y0)
