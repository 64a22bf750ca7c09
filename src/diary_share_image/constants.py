"""
Constants used internally by the share image compositor.

Layout and typography values are fixed for every share format and are
not exposed through config files or CLI arguments.
"""

# Baseline canvas all font and spacing sizes are designed against
BASE_WIDTH = 1080.0
BASE_HEIGHT = 1920.0
MIN_SCALE = 0.8
MAX_SCALE = 2.0

# Base font sizes (px at baseline scale)
BASE_DATE_FONT_SIZE = 36.0
BASE_TITLE_FONT_SIZE = 66.0
BASE_TITLE_FONT_SIZE_LONG = 56.0
BASE_CONTENT_FONT_SIZE = 38.0
BASE_CONTENT_FONT_SIZE_LONG = 34.0
BASE_BRAND_FONT_SIZE = 28.0

# Base spacing (px at baseline scale)
BASE_AFTER_DATE_SPACING = 32.0
BASE_AFTER_TITLE_SPACING = 40.0

# Text length thresholds (characters)
TITLE_LENGTH_THRESHOLD = 20
TITLE_MAX_LENGTH_THRESHOLD = 30
CONTENT_LENGTH_THRESHOLD = 200

# Line limits
TITLE_MAX_LINES = 3
TITLE_MAX_LINES_LONG = 4
CONTENT_MAX_LINES = 15

# Split layout
SQUARE_PHOTO_FRACTION = 0.56
PORTRAIT_PHOTO_FRACTION = 0.62
SQUARE_MIN_TEXT_WIDTH = 80.0
PORTRAIT_MIN_TEXT_HEIGHT = 200.0
SPLIT_GAP = 12.0

# Photo grid
PHOTO_SPACING = 6.0
THREE_PHOTO_TOP_FRACTION = 0.55
MAX_PHOTOS = 3

# Text fitting
TEXT_PADDING_SQUARE = 24.0
TEXT_PADDING_PORTRAIT = 28.0
MIN_TITLE_FONT_SIZE = 36.0
MIN_CONTENT_FONT_SIZE = 22.0
FONT_SHRINK_STEP = 2.0
CONTENT_LINE_HEIGHT = 1.6
MIN_CONTENT_LINE_HEIGHT = 1.4
LINE_HEIGHT_STEP = 0.05
MAX_FIT_ITERATIONS = 24
DATE_LINE_HEIGHT = 1.4
TITLE_LINE_HEIGHT = 1.3
ELLIPSIS = "…"

# Branding
BRAND_TEXT = "Smart Photo Diary"
BRAND_MARGIN = 20.0

# Internal color constants
COLOR_MODE_RGB = "RGB"
COLOR_BLACK = (0, 0, 0)
COLOR_WHITE = (255, 255, 255)
COLOR_BACKGROUND_START = (0x0E, 0x0F, 0x12)
COLOR_BACKGROUND_END = (0x15, 0x18, 0x21)
COLOR_PHOTO_PLACEHOLDER = (0x23, 0x26, 0x32)
COLOR_TEXT_PANEL = (0x0F, 0x11, 0x17)

# Text opacity over the text panel
DATE_ALPHA = 0.95
TITLE_ALPHA = 1.0
CONTENT_ALPHA = 0.98
BRAND_ALPHA = 0.86
TITLE_SHADOW = ((0, 1), 3, 0.3)     # offset, blur radius, opacity
CONTENT_SHADOW = ((0, 1), 2, 0.2)

# Managed thumbnail encoding
THUMBNAIL_FORMAT = "JPEG"
SHARE_IMAGE_QUALITY = 95

# Output encoding
OUTPUT_FORMAT = "PNG"
