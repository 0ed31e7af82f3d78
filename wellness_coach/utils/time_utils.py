"""
Time and date utilities.

Key concepts:
  - All timestamps handled by the package are timezone-aware UTC.
  - The hosted record service and SQLite both store ISO-8601 strings;
    ``to_iso`` / ``parse_timestamp`` convert at the storage boundary.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; convert an aware one to UTC.

    Args:
        value: Any ``datetime``.

    Returns:
        Timezone-aware UTC ``datetime``.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str | datetime | date | None) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware UTC ``datetime``.

    Accepts a trailing ``Z`` (as emitted by JavaScript's ``toISOString()``),
    plain dates, and ``datetime`` objects. ``None`` and empty strings map to
    ``None``.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def to_iso(value: datetime) -> str:
    """Format an aware datetime as ``YYYY-MM-DDTHH:MM:SS[.ffffff]Z``."""
    return ensure_utc(value).isoformat().replace("+00:00", "Z")
