from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from tailor_ops.services.access import can_access_route
from tailor_ops.constants.navigation import NAV_ITEMS


def filter_navigation_by_permissions(items: Sequence[Dict[str, Any]], user: Any) -> List[Dict[str, Any]]:
    """Items the user may see, in input order; nobody logged in sees nothing."""
    if user is None:
        return []
    return [item for item in items if can_access_route(user, item.get('requiredPermissions'))]


def navigation_for(user: Any, items: Optional[Sequence[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
    return filter_navigation_by_permissions(NAV_ITEMS if items is None else items, user)


__all__ = ['filter_navigation_by_permissions', 'navigation_for']
