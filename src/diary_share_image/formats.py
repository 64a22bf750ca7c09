"""Closed set of share image formats and their derived properties."""

from __future__ import annotations

from enum import Enum

_HD_SCALE = 2


class ShareFormat(Enum):
    """
    Target pixel formats for the composed share image.

    Each member carries its final pixel size and the HD multiplier used
    to scale gaps and margins. HD members share the aspect ratio of
    their standard counterpart.
    """

    SQUARE = ("square", 1080, 1080, 1)
    PORTRAIT = ("portrait", 1080, 1920, 1)
    SQUARE_HD = ("square-hd", 1080 * _HD_SCALE, 1080 * _HD_SCALE, _HD_SCALE)
    PORTRAIT_HD = (
        "portrait-hd", 1080 * _HD_SCALE, 1920 * _HD_SCALE, _HD_SCALE,
    )

    def __init__(self, label: str, width: int, height: int, scale: int) -> None:
        self.label = label
        self.width = width
        self.height = height
        self.scale = scale

    @property
    def size(self) -> tuple[int, int]:
        """Return (width, height) in pixels."""
        return self.width, self.height

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @property
    def is_square(self) -> bool:
        return self.width == self.height

    @property
    def is_portrait(self) -> bool:
        return not self.is_square

    @property
    def is_hd(self) -> bool:
        return self.scale > 1

    @property
    def hd_factor(self) -> float:
        """Multiplier applied to gaps and margins (1.0 unless HD)."""
        return float(self.scale) if self.is_hd else 1.0

    @classmethod
    def from_name(cls, name: str) -> ShareFormat:
        """Look up a format by label (``square-hd``) or member name."""
        key = name.strip().lower().replace("_", "-")
        for member in cls:
            if member.label == key:
                return member
        choices = ", ".join(m.label for m in cls)
        msg = f"Unknown share format '{name}'. Choose one of: {choices}"
        raise ValueError(msg)


FORMAT_CHOICES: tuple[str, ...] = tuple(f.label for f in ShareFormat)
