from __future__ import annotations
from datetime import datetime, date, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores UTC without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat(timespec='seconds') + 'Z'
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def parse_datetime(raw: str) -> datetime:
    """Accept `YYYY-MM-DD` or ISO-8601 (trailing Z allowed); return naive UTC."""
    value = datetime.fromisoformat(raw.strip().replace('Z', '+00:00'))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_date(raw: str) -> date:
    return date.fromisoformat(raw.strip()[:10])
