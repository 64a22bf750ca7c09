"""
Tests for text wrapping, fitting and painting.

The fitting loop must terminate for any input, shrink parameters in a
fixed order and keep every painted line inside the text panel.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING

import pytest
from PIL import Image

import diary_share_image.compositor.text as dsi_text
from diary_share_image.compositor.geometry import Rect, split_layout
from diary_share_image.constants import (
    BRAND_MARGIN,
    COLOR_MODE_RGB,
    COLOR_TEXT_PANEL,
    ELLIPSIS,
    MAX_FIT_ITERATIONS,
    MIN_CONTENT_FONT_SIZE,
    MIN_CONTENT_LINE_HEIGHT,
    MIN_TITLE_FONT_SIZE,
)
from diary_share_image.formats import ShareFormat
from diary_share_image.type_defs import DiaryEntry

if TYPE_CHECKING:
    from _pytest.logging import LogCaptureFixture
    from pytest_mock import MockerFixture

LOREM = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do "
    "eiusmod tempor incididunt ut labore et dolore magna aliqua. "
)


@pytest.fixture
def font() -> dsi_text.ImageFont.ImageFont:
    """Regular font at a fixed size."""
    return dsi_text.FontSet().regular(20)


@pytest.fixture
def long_diary(make_diary: Callable[..., DiaryEntry]) -> DiaryEntry:
    """Entry whose body can never fit any text panel."""
    content = (LOREM * 50)[:5000]
    return make_diary(title="A rather long title, really", content=content)


class TestWrapping:
    """Greedy line breaking and ellipsis truncation."""

    def test_lines_respect_max_width(
        self,
        font: dsi_text.ImageFont.ImageFont,
    ) -> None:
        """No wrapped line is wider than the limit."""
        lines = dsi_text.wrap_text(LOREM * 3, font, 200)
        assert len(lines) > 1
        assert all(dsi_text.text_width(line, font) <= 200 for line in lines)  # noqa: PLR2004
        assert " ".join(lines).split() == (LOREM * 3).split()

    def test_explicit_newlines_are_kept(
        self,
        font: dsi_text.ImageFont.ImageFont,
    ) -> None:
        """Newlines always break, and blank lines survive."""
        lines = dsi_text.wrap_text("one\n\ntwo\r\nthree", font, 1000)
        assert lines == ["one", "", "two", "three"]

    def test_unbreakable_token_is_split(
        self,
        font: dsi_text.ImageFont.ImageFont,
    ) -> None:
        """Long runs without spaces break between characters."""
        token = "x" * 200
        lines = dsi_text.wrap_text(token, font, 100)
        assert len(lines) > 1
        assert "".join(lines) == token
        assert all(dsi_text.text_width(line, font) <= 100 for line in lines)  # noqa: PLR2004

    def test_empty_text_is_one_empty_line(
        self,
        font: dsi_text.ImageFont.ImageFont,
    ) -> None:
        """An empty string still occupies one (blank) line."""
        assert dsi_text.wrap_text("", font, 100) == [""]

    def test_ellipsize_truncates_last_line(
        self,
        font: dsi_text.ImageFont.ImageFont,
    ) -> None:
        """Overflowing lines are cut and the last kept line ends with …."""
        lines = dsi_text.wrap_text(LOREM * 4, font, 150)
        kept = dsi_text.ellipsize(lines, 2, font, 150)
        assert len(kept) == 2  # noqa: PLR2004
        assert kept[-1].endswith(ELLIPSIS)
        assert dsi_text.text_width(kept[-1], font) <= 150  # noqa: PLR2004

    def test_ellipsize_leaves_short_input(
        self,
        font: dsi_text.ImageFont.ImageFont,
    ) -> None:
        """Nothing changes when the lines already fit."""
        assert dsi_text.ellipsize(["a", "b"], 3, font, 100) == ["a", "b"]
        assert dsi_text.ellipsize(["a", "b"], 0, font, 100) == []


def test_blend_mixes_channels() -> None:
    """Opacity blends foreground over background per channel."""
    assert dsi_text.blend((255, 255, 255), (0, 0, 0), 1.0) == (255, 255, 255)
    assert dsi_text.blend((255, 255, 255), (0, 0, 0), 0.0) == (0, 0, 0)
    assert dsi_text.blend((200, 100, 0), (0, 100, 200), 0.5) == (100, 100, 100)


class TestFitText:
    """Bounded fitting loop and fallback layout."""

    def test_short_text_fits_first_pass(self, diary: DiaryEntry) -> None:
        """Short entries fit at their initial sizes."""
        _, text_rect = split_layout(ShareFormat.PORTRAIT)
        plan = dsi_text.fit_text(diary, ShareFormat.PORTRAIT, text_rect)

        assert plan.fitted
        assert plan.iterations == 1
        assert [b.lines for b in plan.blocks] == [
            ("Wed, Jan 1, 2025",), ("Test Title",), ("Test Content",),
        ]
        tops = [b.top for b in plan.blocks]
        assert tops == sorted(tops)
        assert plan.bounds is not None
        assert text_rect.contains(plan.bounds)

    def test_empty_title_is_skipped(
        self,
        make_diary: Callable[..., DiaryEntry],
    ) -> None:
        """Without a title only date and body blocks are laid out."""
        _, text_rect = split_layout(ShareFormat.SQUARE)
        plan = dsi_text.fit_text(
            make_diary(title=""), ShareFormat.SQUARE, text_rect,
        )
        assert len(plan.blocks) == 2  # noqa: PLR2004
        assert plan.blocks[1].lines == ("Test Content",)

    def test_injected_date_formatter(self, diary: DiaryEntry) -> None:
        """The date line comes from the supplied formatter and locale."""
        seen: list[tuple[date, str]] = []

        def formatter(value: date, locale: str) -> str:
            seen.append((value, locale))
            return "custom date"

        _, text_rect = split_layout(ShareFormat.PORTRAIT)
        plan = dsi_text.fit_text(
            diary, ShareFormat.PORTRAIT, text_rect,
            date_formatter=formatter, locale="ja",
        )
        assert plan.blocks[0].lines == ("custom date",)
        assert seen == [(date(2025, 1, 1), "ja")]

    @pytest.mark.parametrize("fmt", [ShareFormat.SQUARE, ShareFormat.PORTRAIT])
    def test_long_text_terminates_inside_area(
        self,
        long_diary: DiaryEntry,
        fmt: ShareFormat,
    ) -> None:
        """A 5000 character body ends in a truncated fallback layout."""
        _, text_rect = split_layout(fmt)
        plan = dsi_text.fit_text(long_diary, fmt, text_rect)

        assert not plan.fitted
        assert plan.iterations <= MAX_FIT_ITERATIONS
        assert plan.content_size == MIN_CONTENT_FONT_SIZE
        assert plan.title_size == MIN_TITLE_FONT_SIZE
        assert plan.line_height == pytest.approx(MIN_CONTENT_LINE_HEIGHT)
        assert plan.bounds is not None
        assert plan.area.contains(plan.bounds)
        assert text_rect.contains(plan.bounds)
        content = plan.blocks[-1]
        assert content.lines
        assert content.lines[-1].endswith(ELLIPSIS)

    def test_shrink_order_is_body_then_title_then_line_height(
        self,
        long_diary: DiaryEntry,
        mocker: MockerFixture,
    ) -> None:
        """Each pass changes one parameter, in priority order."""
        spy = mocker.spy(dsi_text, "_layout_block")
        _, text_rect = split_layout(ShareFormat.PORTRAIT)
        plan = dsi_text.fit_text(long_diary, ShareFormat.PORTRAIT, text_rect)

        passes = [
            c.args[1] for c in spy.call_args_list
            if c.args[1].shadow is not None
        ]
        titles = [s.size for s in passes if s.bold]
        bodies = [(s.size, s.line_height) for s in passes if not s.bold]

        assert len(titles) == len(bodies) == plan.iterations
        # body shrinks 34 -> 22 while the title holds
        assert [b[0] for b in bodies[:7]] == [34, 32, 30, 28, 26, 24, 22]
        assert set(titles[:7]) == {56}
        # then the title shrinks 56 -> 36 with the body at its floor
        assert titles[6:17] == list(range(56, 34, -2))
        # finally the body line height steps down to its floor
        assert [b[1] for b in bodies[16:]] == pytest.approx(
            [1.6, 1.55, 1.5, 1.45, 1.4],
        )
        assert plan.iterations == 21  # noqa: PLR2004

    def test_tiny_area_paints_nothing_out_of_bounds(
        self,
        diary: DiaryEntry,
    ) -> None:
        """When no line fits, nothing is planned outside the area."""
        plan = dsi_text.fit_text(
            diary, ShareFormat.PORTRAIT, Rect(0, 0, 200, 60),
        )
        assert not plan.fitted
        bounds = plan.bounds
        assert bounds is None or plan.area.contains(bounds)


class TestPainting:
    """Rasterizing planned text and the brand stamp."""

    pytestmark = pytest.mark.visual

    def test_draw_text_paints_inside_panel(
        self,
        long_diary: DiaryEntry,
        caplog: LogCaptureFixture,
    ) -> None:
        """Glyph pixels appear in the panel and truncation is logged."""
        fmt = ShareFormat.SQUARE
        canvas = Image.new(COLOR_MODE_RGB, fmt.size, (255, 0, 255))
        _, text_rect = split_layout(fmt)
        dsi_text.fill_text_panel(canvas, text_rect)

        with caplog.at_level(logging.INFO):
            plan = dsi_text.draw_text(canvas, long_diary, fmt, text_rect)

        assert not plan.fitted
        assert "truncated" in caplog.text
        panel = canvas.crop(text_rect.to_box())
        colors = {c for _, c in panel.getcolors(maxcolors=1 << 16)}
        assert COLOR_TEXT_PANEL in colors
        assert len(colors) > 2  # noqa: PLR2004
        # photo side untouched
        assert canvas.getpixel((10, 10)) == (255, 0, 255)

    @pytest.mark.parametrize("fmt", list(ShareFormat))
    def test_branding_sits_in_bottom_right(self, fmt: ShareFormat) -> None:
        """The brand stamp stays inside the text area, inset by a margin."""
        canvas = Image.new(COLOR_MODE_RGB, fmt.size, COLOR_TEXT_PANEL)
        _, text_rect = split_layout(fmt)
        rect = dsi_text.draw_branding(canvas, fmt, text_rect)

        margin = BRAND_MARGIN * fmt.hd_factor
        assert text_rect.contains(rect)
        assert rect.right <= text_rect.right - margin + 1
        assert rect.bottom <= text_rect.bottom - margin + 1
        assert rect.left > text_rect.left + text_rect.width / 3
        assert rect.top > text_rect.top + text_rect.height / 2

    def test_custom_brand_text(self) -> None:
        """A different brand string produces a different stamp width."""
        fmt = ShareFormat.PORTRAIT
        canvas = Image.new(COLOR_MODE_RGB, fmt.size, COLOR_TEXT_PANEL)
        _, text_rect = split_layout(fmt)
        default = dsi_text.draw_branding(canvas, fmt, text_rect)
        short = dsi_text.draw_branding(canvas, fmt, text_rect, text="SPD")
        assert short.width < default.width
