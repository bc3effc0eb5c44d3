"""Timestamp helpers for Drive metadata and the submission wire format."""

from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_dt(dt: datetime) -> datetime:
    """Reject naive datetimes; everything stored is tz-aware."""
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp into a UTC datetime.

    Both Drive (`2025-01-01T12:34:56.123Z`) and the submission service
    (`2025-01-01T12:34:56+06:00`) forms are accepted.
    """
    if not isinstance(value, str) or not value:
        raise ValueError("RFC3339 value must be a non-empty string")

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return normalize_dt(datetime.fromisoformat(text)).astimezone(timezone.utc)


def parse_optional_rfc3339(value: object) -> datetime | None:
    """Parse a wire timestamp, returning None for missing or malformed values."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return parse_rfc3339(value)
    except ValueError:
        return None


def to_rfc3339(dt: datetime) -> str:
    """Format as UTC with millisecond precision and a trailing 'Z'."""
    utc = normalize_dt(dt).astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
