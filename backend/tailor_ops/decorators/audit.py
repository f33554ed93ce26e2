from __future__ import annotations
"""Audit logging decorator for administrative mutations.

Usage:

@audit_log('USER.CREATE', entity='User', entity_id_key='id', meta_keys=['email', 'role'])
def create_user():
    ... return {'id': user.id, ...}, 201

@audit_log('INVENTORY.STOCK_IN', entity='InventoryItem', entity_id_arg='item_id',
           diff_keys=['remaining_stock'], pre_fetch=lambda a, kw: _snapshot(kw['item_id']))
def stock_in(item_id): ...

Parameters:
  action: audit action code
  entity: optional entity label
  entity_id_key: key in the returned JSON object whose value becomes entity_id
  entity_id_arg: path parameter used for entity_id when the key is absent
  meta_keys: keys projected from the returned JSON into meta
  diff_keys / pre_fetch: snapshot taken before the view runs; changed keys land in meta['changes']

Only successful (2xx) responses are audited. Audit failures are logged and never
change the view's response.
"""

import logging
from functools import wraps
from typing import Any, Callable, Dict, Iterable, Optional

from tailor_ops import get_db
from tailor_ops.services.audit import add_audit

log = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    """Return (data, status) for dict / (dict, status) / (dict, status, headers) returns."""
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def _unwrap(data: Any):
    # workflow envelopes nest the entity under `data`
    if isinstance(data, dict) and isinstance(data.get('data'), dict) and 'success' in data:
        return data['data']
    return data


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
            rv = fn(*args, **kwargs)
            data, status = _extract_payload(rv)
            if status >= 300:
                return rv
            try:
                data = _unwrap(data)
                if not isinstance(data, dict):
                    data = {}
                entity_id = None
                if entity_id_key and entity_id_key in data:
                    entity_id = data.get(entity_id_key)
                elif entity_id_arg and entity_id_arg in kwargs:
                    entity_id = kwargs.get(entity_id_arg)
                meta = {k: data.get(k) for k in (meta_keys or ()) if k in data}
                if diff_keys and isinstance(before, dict):
                    changes = {
                        k: {'before': before.get(k), 'after': data.get(k)}
                        for k in diff_keys
                        if k in before and k in data and before.get(k) != data.get(k)
                    }
                    if changes:
                        meta['changes'] = changes
                add_audit(action, entity, entity_id, meta)
                get_db().commit()
            except Exception:
                log.exception('audit write failed for %s', action)
                get_db().rollback()
            return rv
        wrapper.wrapped_view = fn
        return wrapper
    return outer
