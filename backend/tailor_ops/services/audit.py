from __future__ import annotations
import logging
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from tailor_ops import get_db
from tailor_ops.models.audit import AuditLog

log = logging.getLogger(__name__)


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      action: short action code e.g. USER.CREATE, INVENTORY.STOCK_IN
      entity: optional entity name (User, InventoryItem, etc.)
      entity_id: optional primary key string
      meta: additional JSON-safe dictionary (shallow copied)
    """
    session = get_db()
    claims = {}
    actor = None
    try:
        claims = get_jwt() or {}
        ident = get_jwt_identity()
        actor = int(ident) if ident is not None else None
    except RuntimeError:
        # no verified JWT in this context (CLI, seeding)
        pass
    entry = AuditLog(
        actor_user_id=actor or 0,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        perms_snapshot={'perms': claims.get('perms', [])},
        meta=dict(meta or {}),
    )
    session.add(entry)
    log.debug('audit %s %s:%s by %s', action, entity, entity_id, actor)
    # No commit here; caller's transaction boundary controls durability.
    return entry
