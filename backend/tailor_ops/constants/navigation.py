"""Sidebar navigation items and the page route table.

Both declare required permissions with OR semantics; an empty list means any
authenticated user. Every key referenced here is checked against the permission
registry when the app starts.
"""
from __future__ import annotations
from typing import Dict, List, Any

NAV_ITEMS: List[Dict[str, Any]] = [
    {'name': 'Dashboard', 'href': '/dashboard', 'requiredPermissions': []},
    {'name': 'Orders', 'href': '/orders', 'requiredPermissions': ['orders.view']},
    {'name': 'Inventory', 'href': '/inventory', 'requiredPermissions': ['inventory.view']},
    {'name': 'Products', 'href': '/products', 'requiredPermissions': ['products.view']},
    {'name': 'Low Stock Alerts', 'href': '/inventory/alerts/low-stock', 'requiredPermissions': ['inventory.view']},
    {'name': 'Fabrication', 'href': '/fabrication', 'requiredPermissions': ['fabrication.view']},
    {'name': 'Packets', 'href': '/packet/my-tasks', 'requiredPermissions': ['fabrication.view', 'production.approve_packets']},
    {'name': 'Dyeing', 'href': '/dyeing', 'requiredPermissions': ['dyeing.view']},
    {'name': 'Production', 'href': '/production', 'requiredPermissions': ['production.view']},
    {'name': 'QA', 'href': '/qa', 'requiredPermissions': ['qa.view']},
    {'name': 'Dispatch', 'href': '/dispatch', 'requiredPermissions': ['dispatch.view']},
    {'name': 'Users', 'href': '/admin/users', 'requiredPermissions': ['users.view']},
    {'name': 'Measurement Charts', 'href': '/admin/measurements', 'requiredPermissions': ['measurements.view']},
]

# (pattern, required permissions). `public` routes skip the authentication guard.
ROUTE_TABLE: List[Dict[str, Any]] = [
    {'pattern': '/login', 'requiredPermissions': [], 'public': True},
    {'pattern': '/dashboard', 'requiredPermissions': []},
    {'pattern': '/orders', 'requiredPermissions': ['orders.view']},
    {'pattern': '/orders/new', 'requiredPermissions': ['orders.create']},
    {'pattern': '/orders/:id', 'requiredPermissions': ['orders.view']},
    {'pattern': '/orders/:id/edit', 'requiredPermissions': ['orders.edit']},
    {'pattern': '/orders/:id/items/:itemId', 'requiredPermissions': ['orders.view']},
    {'pattern': '/orders/:id/items/:itemId/form', 'requiredPermissions': ['orders.edit']},
    {'pattern': '/inventory', 'requiredPermissions': ['inventory.view']},
    {'pattern': '/inventory/new', 'requiredPermissions': ['inventory.create']},
    {'pattern': '/inventory/alerts/low-stock', 'requiredPermissions': ['inventory.view']},
    {'pattern': '/inventory/:id', 'requiredPermissions': ['inventory.view']},
    {'pattern': '/inventory/:id/edit', 'requiredPermissions': ['inventory.edit']},
    {'pattern': '/procurement', 'requiredPermissions': []},
    {'pattern': '/products', 'requiredPermissions': ['products.view']},
    {'pattern': '/products/new', 'requiredPermissions': ['products.create']},
    {'pattern': '/products/:id', 'requiredPermissions': ['products.view']},
    {'pattern': '/products/:id/edit', 'requiredPermissions': ['products.edit']},
    {'pattern': '/fabrication', 'requiredPermissions': ['fabrication.view']},
    {'pattern': '/fabrication/orders/:orderId', 'requiredPermissions': ['fabrication.view']},
    {'pattern': '/fabrication/orders/:orderId/items/:itemId', 'requiredPermissions': ['fabrication.view', 'fabrication.create_bom']},
    {'pattern': '/packet/my-tasks', 'requiredPermissions': ['fabrication.view']},
    {'pattern': '/packet/check-queue', 'requiredPermissions': ['production.approve_packets']},
    {'pattern': '/dyeing', 'requiredPermissions': ['dyeing.view']},
    {'pattern': '/dyeing/available', 'requiredPermissions': ['dyeing.view']},
    {'pattern': '/dyeing/my-tasks', 'requiredPermissions': ['dyeing.view']},
    {'pattern': '/dyeing/completed', 'requiredPermissions': ['dyeing.view']},
    {'pattern': '/dyeing/task/:orderItemId', 'requiredPermissions': ['dyeing.view']},
    {'pattern': '/production', 'requiredPermissions': ['production.view']},
    {'pattern': '/production/order-item/:orderItemId', 'requiredPermissions': ['production.manage']},
    {'pattern': '/qa', 'requiredPermissions': ['qa.view']},
    {'pattern': '/dispatch', 'requiredPermissions': ['dispatch.view']},
    {'pattern': '/admin/measurements', 'requiredPermissions': ['measurements.view']},
    {'pattern': '/admin/users', 'requiredPermissions': ['users.view']},
    {'pattern': '/admin/users/new', 'requiredPermissions': ['users.create']},
    {'pattern': '/admin/users/:id/edit', 'requiredPermissions': ['users.edit']},
]


def referenced_permission_keys() -> List[str]:
    keys: List[str] = []
    for entry in NAV_ITEMS + ROUTE_TABLE:
        keys.extend(entry['requiredPermissions'])
    return keys


__all__ = ['NAV_ITEMS', 'ROUTE_TABLE', 'referenced_permission_keys']
