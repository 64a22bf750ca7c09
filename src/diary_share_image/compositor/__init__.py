"""
Share image compositors split into geometry, photo and text modules.

Geometry is pure layout math; the photo and text modules paint onto a
caller-owned Pillow canvas using the rectangles geometry produces.
"""

from __future__ import annotations

from . import geometry, photos, text
from .geometry import (
    Rect,
    brand_font_size,
    crop_rect,
    photo_cells,
    spacing,
    split_layout,
    text_sizes,
)
from .photos import draw_photos
from .text import (
    FontSet,
    TextPlan,
    draw_branding,
    draw_text,
    fill_text_panel,
    fit_text,
    wrap_text,
)

__all__ = [
    "FontSet",
    "Rect",
    "TextPlan",
    "brand_font_size",
    "crop_rect",
    "draw_branding",
    "draw_photos",
    "draw_text",
    "fill_text_panel",
    "fit_text",
    "geometry",
    "photo_cells",
    "photos",
    "spacing",
    "split_layout",
    "text",
    "text_sizes",
    "wrap_text",
]
