from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

RFC3339_PATTERN = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def ensure_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def parse_rfc3339(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime.

    Only the full ``date-time`` form is accepted. Fractional seconds beyond
    microseconds are truncated. Raises ValueError for anything else.
    """
    if not value or not isinstance(value, str):
        raise ValueError("timestamp is required")
    match = RFC3339_PATTERN.fullmatch(value)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value}")

    fraction = (match.group("fraction") or "0")[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset in ("Z", "z"):
        offset = "+00:00"
    dt = datetime.fromisoformat(f"{match.group('date')}T{match.group('time')}.{fraction}{offset}")
    return dt.astimezone(timezone.utc)


def format_rfc3339(ts: datetime) -> str:
    return ensure_utc(ts).strftime("%Y-%m-%dT%H:%M:%SZ")
