from __future__ import annotations
from flask import abort


def apply_multi_sort(query, sort_expr: str | None, allowed: dict, tie_breaker):
    """Apply multi-field sort to a SQLAlchemy query.
    sort_expr: comma-separated tokens, each optionally prefixed with '-'.
    allowed: mapping of field key -> column object.
    tie_breaker: column appended for deterministic ordering.
    """
    if not sort_expr:
        return query.order_by(tie_breaker.asc())
    clauses = []
    for raw in sort_expr.split(','):
        token = raw.strip()
        if not token:
            continue
        desc = token.startswith('-')
        key = token[1:] if desc else token
        col = allowed.get(key)
        if col is None:
            abort(400, description=f'Invalid sort field {key}')
        clauses.append(col.desc() if desc else col.asc())
    clauses.append(tie_breaker.asc())
    return query.order_by(*clauses)


def sort_records(rows: list, key_funcs: dict, sort_by: str, sort_order: str = 'asc') -> list:
    """In-memory counterpart for payloads assembled in Python (task queues)."""
    if sort_order not in ('asc', 'desc'):
        abort(400, description='sortOrder must be asc or desc')
    key = key_funcs.get(sort_by)
    if key is None:
        abort(400, description=f'Invalid sort field {sort_by}')
    return sorted(rows, key=key, reverse=(sort_order == 'desc'))
