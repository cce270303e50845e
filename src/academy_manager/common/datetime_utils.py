"""Instant helpers.

The core works with timezone-aware UTC ``datetime`` values only. Anything
coming from the outside (ISO strings, naive values from the database) is
converted with the helpers below before it reaches a service.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union


def now_utc() -> datetime:
    """Current instant.

    Note: Wrapped so tests can patch/mock it easily.
    """
    return datetime.now(timezone.utc)


def to_instant(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Normalize an incoming value to an aware UTC datetime.

    Naive datetimes are assumed to already be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        raise TypeError(f"Unsupported instant value: {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Instant -> naive UTC, the shape MySQL DATETIME columns store."""
    if value is None:
        return None
    return to_instant(value).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return to_instant(value).isoformat()


def parse_iso_date(value: Union[date, str, None]) -> Optional[date]:
    """Parse YYYY-MM-DD string into date."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise TypeError(f"Unsupported date value: {value!r}")
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()
