"""Reusable request validation helpers.

Keeps status and payload checks consistent so every view reports 400s the same way.
"""
from __future__ import annotations
import math
from typing import Any, Dict, Iterable, List
from flask import abort


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or aborts with 400.
    """
    if new_status not in allowed:
        abort(400, description=f"{field_name} invalid")
    return new_status


def require_fields(data: Dict[str, Any], *names: str, message: str | None = None):
    missing = [n for n in names if data.get(n) in (None, '', [])]
    if missing:
        abort(400, description=message or f"{', '.join(missing)} required")
    return [data.get(n) for n in names]


def normalize_email(raw, *, required: bool = True) -> str:
    """Strip and lowercase an email; non-string values are a 400."""
    if raw is None:
        raw = ''
    if not isinstance(raw, str):
        abort(400, description='email must be a string')
    email = raw.strip().lower()
    if required and not email:
        abort(400, description='email required')
    return email


def normalize_section_names(raw) -> List[str]:
    """Lowercase, strip and de-duplicate section names while keeping request order."""
    if not isinstance(raw, (list, tuple)):
        abort(400, description='sections must be a list')
    out: List[str] = []
    for name in raw:
        if not isinstance(name, str) or not name.strip():
            abort(400, description='section names must be non-empty strings')
        key = name.strip().lower()
        if key not in out:
            out.append(key)
    return out


def parse_number(raw, field_name: str, *, positive: bool = False, allow_zero: bool = True) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        abort(400, description=f'{field_name} must be a number')
    if not math.isfinite(value):
        abort(400, description=f'{field_name} must be a number')
    if value < 0 or (positive and value == 0) or (not allow_zero and value == 0):
        abort(400, description=f'{field_name} must be positive' if positive else f'{field_name} must not be negative')
    return value


__all__ = ['validate_status', 'require_fields', 'normalize_email', 'normalize_section_names', 'parse_number']
