"""Central catalog of permission keys and role templates.

Keys follow the `<feature>.<action>` convention. Extend cautiously; never rename a key
silently since stored user permission lists reference them verbatim.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Any

from tailor_ops.errors import UnknownPermissionError

PERMISSION_GROUPS: Dict[str, Dict[str, Any]] = {
    'USERS': {
        'label': 'User Management',
        'description': 'Manage system users and their permissions',
        'permissions': {
            'users.view': 'View users',
            'users.create': 'Create new users',
            'users.edit': 'Edit user details',
            'users.delete': 'Deactivate users',
        },
    },
    'INVENTORY': {
        'label': 'Inventory Management',
        'description': 'Manage inventory items and stock levels',
        'permissions': {
            'inventory.view': 'View inventory',
            'inventory.create': 'Create inventory items',
            'inventory.edit': 'Edit inventory items',
            'inventory.delete': 'Delete inventory items',
            'inventory.stock_in': 'Add stock (stock-in)',
            'inventory.stock_out': 'Remove stock (stock-out)',
        },
    },
    'PRODUCTS': {
        'label': 'Products & BOM',
        'description': 'Manage products and bill of materials',
        'permissions': {
            'products.view': 'View products',
            'products.create': 'Create products',
            'products.edit': 'Edit products',
            'products.delete': 'Delete products',
            'products.manage_bom': 'Manage Bill of Materials',
        },
    },
    'MEASUREMENTS': {
        'label': 'Measurement Charts',
        'description': 'Manage standard size and height charts',
        'permissions': {
            'measurements.view': 'View measurement charts',
            'measurements.edit': 'Edit measurement charts',
        },
    },
    'ORDERS': {
        'label': 'Order Management',
        'description': 'Manage customer orders and forms',
        'permissions': {
            'orders.view': 'View orders',
            'orders.create': 'Create new orders',
            'orders.edit': 'Edit orders',
            'orders.delete': 'Delete orders',
            'orders.manage_customer_forms': 'Manage customer forms',
            'orders.approve_customer_forms': 'Approve customer forms',
        },
    },
    'FABRICATION': {
        'label': 'Fabrication',
        'description': 'Author custom bills of material and assemble packets',
        'permissions': {
            'fabrication.view': 'View fabrication queue',
            'fabrication.create_bom': 'Create custom BOM',
        },
    },
    'PRODUCTION': {
        'label': 'Production Workflow',
        'description': 'Manage production tasks and workflows',
        'permissions': {
            'production.view': 'View production tasks',
            'production.manage': 'Manage production workflow',
            'production.assign_tasks': 'Assign tasks to workers',
            'production.approve_packets': 'Approve packets',
        },
    },
    'DYEING': {
        'label': 'Dyeing',
        'description': 'Accept, perform and reject dyeing of garment sections',
        'permissions': {
            'dyeing.view': 'View dyeing tasks',
            'dyeing.manage': 'Accept, start and complete dyeing',
            'dyeing.reject': 'Reject sections from dyeing',
        },
    },
    'PROCUREMENT': {
        'label': 'Procurement',
        'description': 'Manage procurement demands and purchasing',
        'permissions': {
            'procurement.view': 'View procurement demands',
            'procurement.manage': 'Manage procurement',
        },
    },
    'QA': {
        'label': 'Quality Assurance',
        'description': 'Quality control and approval workflows',
        'permissions': {
            'qa.view': 'View QA tasks',
            'qa.approve': 'Approve quality checks',
            'qa.request_rework': 'Request rework',
        },
    },
    'DISPATCH': {
        'label': 'Dispatch & Shipping',
        'description': 'Manage order dispatch and shipping',
        'permissions': {
            'dispatch.view': 'View dispatch tasks',
            'dispatch.manage': 'Manage dispatch operations',
        },
    },
    'REPORTS': {
        'label': 'Reports & Analytics',
        'description': 'Access system reports and analytics',
        'permissions': {
            'reports.view': 'View reports',
        },
    },
}


def build_all_permission_codes() -> List[str]:
    codes: List[str] = []
    for group in PERMISSION_GROUPS.values():
        codes.extend(group['permissions'].keys())
    return codes


ALL_PERMISSION_CODES = build_all_permission_codes()
_KNOWN = frozenset(ALL_PERMISSION_CODES)


def get_permission_label(key: str) -> str:
    """Human label for a key; unknown keys fall back to the key itself."""
    for group in PERMISSION_GROUPS.values():
        if key in group['permissions']:
            return group['permissions'][key]
    return key


def is_known_permission(key: str) -> bool:
    return key in _KNOWN


def validate_permission_keys(keys: Iterable[str]) -> List[str]:
    """Return keys as a list if every one is registered, else raise UnknownPermissionError."""
    keys = list(keys or [])
    unknown = [k for k in keys if not isinstance(k, str) or k not in _KNOWN]
    if unknown:
        raise UnknownPermissionError([str(k) for k in unknown])
    return keys


# Role labels are informational; access is decided by the permission set alone.
USER_ROLES = {
    'ADMIN': 'ADMIN',
    'SALES': 'SALES',
    'PRODUCTION_HEAD': 'PRODUCTION_HEAD',
    'PACKET_CREATOR': 'PACKET_CREATOR',
    'WORKER': 'WORKER',
    'QA': 'QA',
    'PURCHASER': 'PURCHASER',
    'FABRICATION': 'FABRICATION',
    'DYEING': 'DYEING',
    'DISPATCH': 'DISPATCH',
    'CUSTOM': 'CUSTOM',
}

ROLE_TEMPLATES: Dict[str, Dict[str, Any]] = {
    'ADMIN': {'label': 'Administrator (Full Access)', 'permissions': list(ALL_PERMISSION_CODES)},
    'SALES': {
        'label': 'Sales Representative',
        'permissions': [
            'orders.view', 'orders.create', 'orders.manage_customer_forms',
            'orders.approve_customer_forms', 'inventory.view', 'products.view',
        ],
    },
    'PRODUCTION_HEAD': {
        'label': 'Production Head',
        'permissions': [
            'orders.view', 'production.view', 'production.manage', 'production.assign_tasks',
            'production.approve_packets', 'inventory.view', 'products.view',
        ],
    },
    'PACKET_CREATOR': {
        'label': 'Packet Creator',
        'permissions': ['orders.view', 'production.view', 'fabrication.view', 'inventory.view', 'products.view'],
    },
    'WORKER': {'label': 'Production Worker', 'permissions': ['production.view', 'orders.view']},
    'QA': {
        'label': 'Quality Assurance',
        'permissions': ['orders.view', 'qa.view', 'qa.approve', 'qa.request_rework', 'products.view'],
    },
    'PURCHASER': {
        'label': 'Purchaser',
        'permissions': [
            'procurement.view', 'procurement.manage', 'inventory.view', 'inventory.stock_in', 'orders.view',
        ],
    },
    'FABRICATION': {
        'label': 'Fabrication (Bespoke)',
        'permissions': ['orders.view', 'fabrication.view', 'fabrication.create_bom', 'inventory.view', 'products.view'],
    },
    'DYEING': {
        'label': 'Dyeing Operator',
        'permissions': ['orders.view', 'dyeing.view', 'dyeing.manage', 'dyeing.reject'],
    },
    'DISPATCH': {'label': 'Dispatch Manager', 'permissions': ['orders.view', 'dispatch.view', 'dispatch.manage']},
    'CUSTOM': {'label': 'Custom Role (Select Permissions Manually)', 'permissions': []},
}


def get_template_permissions(role: str) -> List[str]:
    template = ROLE_TEMPLATES.get(role)
    return list(template['permissions']) if template else []


__all__ = [
    'PERMISSION_GROUPS', 'ALL_PERMISSION_CODES', 'build_all_permission_codes', 'get_permission_label',
    'is_known_permission', 'validate_permission_keys', 'USER_ROLES', 'ROLE_TEMPLATES', 'get_template_permissions',
]
