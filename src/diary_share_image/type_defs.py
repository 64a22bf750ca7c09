"""
Defines shared value types and collaborator protocols.

Centralizes the records passed between the geometry, photo and text
compositors so every module agrees on their shape.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Literal, Protocol, runtime_checkable

FormatName = Literal["square", "portrait", "square-hd", "portrait-hd"]
DateFormatter = Callable[[date, str], str]
RGB = tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class DiaryEntry:
    """Immutable diary record consumed by the compositor."""

    title: str
    content: str
    date: date
    entry_id: str = "diary"


@runtime_checkable
class PhotoHandle(Protocol):
    """Caller-owned photo reference exposing byte fetches."""

    def fetch_origin_bytes(self) -> bytes | None:
        """Return the full resolution original, or None if unavailable."""
        ...

    def fetch_managed_thumbnail(
        self,
        target_size: tuple[int, int],
        quality: int,
    ) -> bytes | None:
        """Return sRGB bytes filling at least target_size, or None."""
        ...


class ShareLogger(Protocol):
    """Subset of the logging API the compositors call."""

    def debug(self, msg: str, *args: object) -> None: ...

    def info(self, msg: str, *args: object) -> None: ...

    def warning(self, msg: str, *args: object) -> None: ...

    def error(self, msg: str, *args: object) -> None: ...


@dataclass(frozen=True, slots=True)
class TextSizes:
    """Initial font sizes and line limits for one render."""

    date_size: float
    title_size: float
    title_max_lines: int
    content_size: float
    content_max_lines: int


@dataclass(frozen=True, slots=True)
class Spacing:
    """Vertical gaps after the date and title blocks."""

    after_date: float
    after_title: float
