"""Default locale-aware short date formatter for the share image header."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from datetime import date

_MONTHS_EN = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
_WEEKDAYS_JA = ("月", "火", "水", "木", "金", "土", "日")
_WEEKDAYS_EN = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _language(locale: str) -> str:
    return locale.replace("-", "_").split("_", 1)[0].lower()


def format_diary_date(value: date, locale: str) -> str:
    """
    Format a diary date for display in the given locale.

    Japanese uses ``2025年1月1日(水)``, English ``Wed, Jan 1, 2025``; any
    other language falls back to ISO ``2025-01-01``.
    """
    lang = _language(locale)
    if lang == "ja":
        weekday = _WEEKDAYS_JA[value.weekday()]
        return f"{value.year}年{value.month}月{value.day}日({weekday})"
    if lang == "en":
        weekday = _WEEKDAYS_EN[value.weekday()]
        month = _MONTHS_EN[value.month - 1]
        return f"{weekday}, {month} {value.day}, {value.year}"
    return value.isoformat()[:10]
