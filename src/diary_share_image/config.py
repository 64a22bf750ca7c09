"""
Configuration schema and loader for the share image compositor.

Defines Pydantic models for the user-adjustable settings and a
TOML-based loader with validation. Layout and typography constants stay
fixed in ``constants.py``.
"""

from pathlib import Path

import tomlkit
from pydantic import BaseModel, Field

from diary_share_image.config_defaults import (
    DEFAULT_BOLD_FONT_PATH,
    DEFAULT_BRAND_TEXT,
    DEFAULT_FONT_PATH,
    DEFAULT_FORMAT,
    DEFAULT_LEGACY_ORIGIN_FALLBACK,
    DEFAULT_LOCALE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_THUMBNAIL_QUALITY,
    DEFAULT_WRITE_FILE,
)
from diary_share_image.type_defs import FormatName


class OutputConfig(BaseModel):
    """Configure where and in which format share images are written."""

    output: str = Field(DEFAULT_OUTPUT_DIR)
    format: FormatName = Field(DEFAULT_FORMAT)
    write_file: bool = DEFAULT_WRITE_FILE


class TextConfig(BaseModel):
    """Fonts, locale and branding for the text panel."""

    font_path: str | None = DEFAULT_FONT_PATH
    bold_font_path: str | None = DEFAULT_BOLD_FONT_PATH
    locale: str = Field(DEFAULT_LOCALE, min_length=2)
    brand_text: str = Field(DEFAULT_BRAND_TEXT, min_length=1)


class PhotoConfig(BaseModel):
    """Control how photo bytes are requested from photo handles."""

    thumbnail_quality: int = Field(DEFAULT_THUMBNAIL_QUALITY, ge=1, le=100)
    legacy_origin_fallback: bool = DEFAULT_LEGACY_ORIGIN_FALLBACK


class ShareImageConfig(BaseModel):
    """
    Root configuration object combining all supported sections.

    Mirrors the structure of config.toml.
    """

    output: OutputConfig = Field(
        default_factory=lambda: OutputConfig.model_validate({}),
    )
    text: TextConfig = Field(
        default_factory=lambda: TextConfig.model_validate({}),
    )
    photos: PhotoConfig = Field(
        default_factory=lambda: PhotoConfig.model_validate({}),
    )


class ConfigLoader:
    """
    Loads and parses a TOML configuration file into a typed config object.

    Falls back to defaults for any missing subsections or fields.
    """

    @staticmethod
    def load(path: str) -> ShareImageConfig:
        """Load and validate a share image configuration from TOML."""
        config_path = Path(path)
        if not config_path.is_file():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with config_path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)

        return ShareImageConfig.model_validate(doc.unwrap())
