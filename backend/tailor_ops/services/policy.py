from __future__ import annotations
from typing import Any, Dict, Optional, Set
from flask import abort
from flask_jwt_extended import get_jwt, get_jwt_identity

from tailor_ops.services.session import SessionUser


def current_permissions() -> Set[str]:
    claims = get_jwt()
    return set(claims.get('perms', []))


def current_principal() -> SessionUser:
    """The authenticated caller as carried by the verified token."""
    return SessionUser.from_claims(get_jwt_identity(), get_jwt())


def token_claims_for(user) -> Dict[str, Any]:
    return {
        'role': user.role,
        'perms': list(user.permissions or []),
        'name': user.name,
        'email': user.email,
    }


def claims_outdated(user, claims: Dict[str, Any]) -> bool:
    """True when a token no longer matches the stored account: gone, deactivated, or re-permissioned."""
    if user is None or not user.is_active:
        return True
    if claims.get('role') != user.role:
        return True
    return sorted(claims.get('perms') or []) != sorted(user.permissions or [])


def acting_user(data: Optional[Dict[str, Any]]) -> SessionUser:
    """Resolve the acting user for a mutation; a body `userId` must name the caller."""
    principal = current_principal()
    claimed = (data or {}).get('userId')
    if claimed not in (None, '') and str(claimed) != str(principal.id):
        abort(403, description='userId does not match the authenticated user')
    return principal
