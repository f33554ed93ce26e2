import pytest
from tailor_ops.constants.permissions import (
    ALL_PERMISSION_CODES, PERMISSION_GROUPS, ROLE_TEMPLATES, USER_ROLES, get_permission_label,
    get_template_permissions, is_known_permission, validate_permission_keys,
)
from tailor_ops.constants.navigation import NAV_ITEMS, ROUTE_TABLE, referenced_permission_keys
from tailor_ops.errors import UnknownPermissionError
from tailor_ops import validate_permission_references


def test_keys_follow_feature_action_convention():
    for code in ALL_PERMISSION_CODES:
        feature, _, action = code.partition('.')
        assert feature and action, code


def test_registry_has_no_duplicates():
    assert len(ALL_PERMISSION_CODES) == len(set(ALL_PERMISSION_CODES))


def test_groups_present():
    for group in ['USERS', 'INVENTORY', 'ORDERS', 'DYEING', 'DISPATCH', 'REPORTS']:
        assert group in PERMISSION_GROUPS


def test_label_lookup_falls_back_to_key():
    assert get_permission_label('orders.view') == 'View orders'
    assert get_permission_label('nope.nothing') == 'nope.nothing'


def test_validate_rejects_unknown_keys():
    assert validate_permission_keys(['orders.view', 'dyeing.manage']) == ['orders.view', 'dyeing.manage']
    with pytest.raises(UnknownPermissionError) as exc:
        validate_permission_keys(['orders.view', 'orders.fly', 'zzz.x'])
    assert exc.value.unknown == ['orders.fly', 'zzz.x']
    assert not is_known_permission('orders.fly')


def test_navigation_and_routes_reference_registered_keys():
    validate_permission_keys(referenced_permission_keys())
    for item in NAV_ITEMS:
        validate_permission_keys(item['requiredPermissions'])
    for entry in ROUTE_TABLE:
        validate_permission_keys(entry['requiredPermissions'])
    validate_permission_references()


def test_templates_cover_roles():
    assert set(ROLE_TEMPLATES) == set(USER_ROLES)
    assert get_template_permissions('ADMIN') == list(ALL_PERMISSION_CODES)
    assert get_template_permissions('CUSTOM') == []
    assert get_template_permissions('UNKNOWN') == []
    for template in ROLE_TEMPLATES.values():
        validate_permission_keys(template['permissions'])


def test_dyeing_and_dispatch_actions_granted_by_a_concrete_role():
    concrete = {k: v for k, v in ROLE_TEMPLATES.items() if k not in ('ADMIN', 'CUSTOM')}
    granted = {p for t in concrete.values() for p in t['permissions']}
    for key in ['dyeing.view', 'dyeing.manage', 'dyeing.reject', 'dispatch.view', 'dispatch.manage']:
        assert key in granted, key
