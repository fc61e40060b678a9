"""Timestamp helpers shared by the API-facing models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an API timestamp into an aware datetime.

    Accepts ISO-8601 strings (with a trailing "Z" or an explicit offset),
    epoch milliseconds, or a datetime. Naive values are taken as UTC.
    Returns None for empty input.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Inverse of parse_timestamp for session and JSON output."""
    return value.isoformat() if value else None
