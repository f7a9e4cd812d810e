"""Utility helpers for the Event Planner client."""

from __future__ import annotations

from datetime import UTC, date, datetime
import re

_email_pattern = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_time_pattern = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def utcnow() -> datetime:
    """Return a naive UTC datetime."""

    return datetime.now(UTC).replace(tzinfo=None)


def clean_text(value: str | None) -> str | None:
    """Strip form input, turning blank strings into ``None``."""
    cleaned = (value or "").strip()
    return cleaned or None


def is_valid_email(value: str | None) -> bool:
    return bool(_email_pattern.match((value or "").strip()))


def is_valid_date(value: str | None) -> bool:
    try:
        date.fromisoformat((value or "").strip())
    except ValueError:
        return False
    return True


def is_valid_time(value: str | None) -> bool:
    return bool(_time_pattern.match((value or "").strip()))


def format_event_when(event_date: str | None, event_time: str | None = None) -> str:
    """Return a friendly string such as 'Mon 01 Dec 2025 at 18:30'."""
    if not event_date:
        return "Date TBD"
    try:
        parsed = date.fromisoformat(event_date)
    except ValueError:
        label = event_date
    else:
        label = parsed.strftime("%a %d %b %Y")
    if not event_time:
        return label
    return f"{label} at {event_time[:5]}"
