"""Presentation helpers for session lists and detail views."""

from __future__ import annotations

from datetime import date, datetime

from .forms import DEFAULT_SOURCE

EXCERPT_LIMIT = 160


def format_date(value: str, long: bool = False) -> str:
    """"Mar 4, 2025" (or "March 4, 2025" with long=True); unparseable input is returned as-is."""
    try:
        parsed = date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        try:
            parsed = datetime.fromisoformat(value).date()
        except (TypeError, ValueError):
            return value
    month = parsed.strftime("%B" if long else "%b")
    return f"{month} {parsed.day}, {parsed.year}"


def intensity_chip(intensity: str | None) -> str:
    level = (intensity or "").lower()
    if level == "intense":
        return "chip chip--intense"
    if level == "light":
        return "chip chip--light"
    return "chip chip--moderate"


def excerpt(text: str | None, limit: int = EXCERPT_LIMIT) -> str:
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}…"


def source_label(source: str | None) -> str:
    return source or DEFAULT_SOURCE


def shows_source_badge(source: str | None) -> bool:
    """List cards only badge sources other than the default manual entry."""
    return bool(source) and source != DEFAULT_SOURCE
