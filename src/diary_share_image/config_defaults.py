"""Shared default values for user-facing configuration settings."""
from diary_share_image.constants import BRAND_TEXT, SHARE_IMAGE_QUALITY

# Output
DEFAULT_OUTPUT_DIR = "out"
DEFAULT_FORMAT = "portrait"
DEFAULT_WRITE_FILE = True

# Text
DEFAULT_FONT_PATH: str | None = None
DEFAULT_BOLD_FONT_PATH: str | None = None
DEFAULT_LOCALE = "en"
DEFAULT_BRAND_TEXT = BRAND_TEXT

# Photos
DEFAULT_THUMBNAIL_QUALITY = SHARE_IMAGE_QUALITY
DEFAULT_LEGACY_ORIGIN_FALLBACK = False
