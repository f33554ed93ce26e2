"""Permission checks over a user's permission set.

`user` may be None, a mapping with a `permissions` key, or any object exposing a
`permissions` attribute (ORM User, SessionUser). Missing users or permission lists
never raise; they simply fail the check.
"""
from __future__ import annotations
from typing import Any, Iterable, Optional, Sequence

from tailor_ops.constants.permissions import USER_ROLES


def _field(user: Any, name: str):
    if user is None:
        return None
    if isinstance(user, dict):
        return user.get(name)
    return getattr(user, name, None)


def _permissions(user: Any) -> Optional[frozenset]:
    perms = _field(user, 'permissions')
    if perms is None:
        return None
    return frozenset(perms)


def has_permission(user: Any, key: str) -> bool:
    perms = _permissions(user)
    if not perms:
        return False
    return key in perms


def has_any_permission(user: Any, keys: Iterable[str]) -> bool:
    perms = _permissions(user)
    if not perms:
        return False
    return any(k in perms for k in (keys or ()))


def has_all_permissions(user: Any, keys: Iterable[str]) -> bool:
    perms = _permissions(user)
    if perms is None:
        return False
    return all(k in perms for k in (keys or ()))


def can_access_route(user: Any, required: Optional[Sequence[str]] = None) -> bool:
    if not required:
        return True
    return has_any_permission(user, required)


def check_access(user: Any, permissions: Optional[Sequence[str]] = None, require_all: bool = False) -> bool:
    if user is None:
        return False
    if not permissions:
        return True
    if require_all:
        return has_all_permissions(user, permissions)
    return has_any_permission(user, permissions)


def has_role(user: Any, role: str) -> bool:
    current = _field(user, 'role')
    return bool(current) and current == role


def is_admin(user: Any) -> bool:
    return has_role(user, USER_ROLES['ADMIN'])


def user_permission_count(user: Any) -> int:
    perms = _field(user, 'permissions')
    return len(perms) if perms else 0


__all__ = [
    'has_permission', 'has_any_permission', 'has_all_permissions', 'can_access_route',
    'check_access', 'has_role', 'is_admin', 'user_permission_count',
]
