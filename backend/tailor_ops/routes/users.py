from __future__ import annotations
import logging
from flask import Blueprint, request, abort
from flask_jwt_extended import get_jwt_identity
from sqlalchemy import select
from tailor_ops import get_db
from tailor_ops.constants.permissions import (
    PERMISSION_GROUPS, ROLE_TEMPLATES, USER_ROLES, get_template_permissions, validate_permission_keys,
)
from tailor_ops.decorators.audit import audit_log
from tailor_ops.decorators.auth import require_permissions
from tailor_ops.errors import UnknownPermissionError
from tailor_ops.models.authz import User
from tailor_ops.serializers import user_json
from tailor_ops.utils.filters import apply_filters, parse_bool
from tailor_ops.utils.listing import apply_pagination, build_list_payload
from tailor_ops.utils.validation import normalize_email, require_fields, validate_status

log = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__)


def _checked_permissions(raw):
    if not isinstance(raw, list):
        abort(400, description='permissions must be a list')
    try:
        return validate_permission_keys(raw)
    except UnknownPermissionError as e:
        abort(400, description=str(e))


def _load_user(user_id: int) -> User:
    user = get_db().get(User, user_id)
    if not user:
        abort(404, description='User not found')
    return user


@users_bp.get('')
@require_permissions('users.view')
def list_users():
    session = get_db()
    q = session.query(User)
    filter_specs = {
        'role': {'op': lambda qu, v: qu.filter(User.role == v)},
        'is_active': {'coerce': parse_bool, 'op': lambda qu, v: qu.filter(User.is_active == v)},
    }
    q = apply_filters(q, filter_specs, request.args).order_by(User.id.asc())
    paged_q, total, limit, offset = apply_pagination(q)
    return build_list_payload([user_json(u) for u in paged_q.all()], total, limit, offset)


@users_bp.get('/permissions')
@require_permissions('users.view')
def permission_catalog():
    """Registered permission groups and role templates, for the user editor."""
    return {
        'groups': PERMISSION_GROUPS,
        'roles': list(USER_ROLES),
        'templates': ROLE_TEMPLATES,
    }


@users_bp.get('/<int:user_id>')
@require_permissions('users.view')
def get_user(user_id: int):
    return user_json(_load_user(user_id))


@users_bp.post('')
@require_permissions('users.create')
@audit_log('USER.CREATE', entity='User', entity_id_key='id', meta_keys=['email', 'role'])
def create_user():
    session = get_db()
    data = request.json or {}
    name, email, password = require_fields(data, 'name', 'email', 'password', message='name, email, password required')
    email = normalize_email(email)
    role = validate_status(data.get('role') or 'CUSTOM', USER_ROLES, field_name='role')
    if 'permissions' in data and data['permissions'] is not None:
        permissions = _checked_permissions(data['permissions'])
    else:
        permissions = get_template_permissions(role)
    if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
        abort(400, description='email exists')
    user = User(name=name, email=email, phone=data.get('phone'), role=role, permissions=permissions, is_active=True)
    user.set_password(password)
    session.add(user)
    session.commit()
    log.info('user %s created with role %s (%d permissions)', user.id, role, len(permissions))
    return user_json(user), 201


@users_bp.put('/<int:user_id>')
@require_permissions('users.edit')
@audit_log(
    'USER.UPDATE',
    entity='User',
    entity_id_key='id',
    diff_keys=['role', 'permissions', 'isActive'],
    pre_fetch=lambda a, kw: _snapshot(kw.get('user_id')),
)
def update_user(user_id: int):
    session = get_db()
    user = _load_user(user_id)
    data = request.json or {}
    if 'name' in data:
        if not data['name']:
            abort(400, description='name required')
        user.name = data['name']
    if 'phone' in data:
        user.phone = data['phone']
    if 'email' in data:
        email = normalize_email(data['email'])
        clash = session.execute(select(User).where(User.email == email, User.id != user.id)).scalar_one_or_none()
        if clash:
            abort(400, description='email exists')
        user.email = email
    if 'role' in data:
        user.role = validate_status(data['role'], USER_ROLES, field_name='role')
    if 'permissions' in data:
        user.permissions = _checked_permissions(data['permissions'])
    if 'isActive' in data:
        user.is_active = bool(data['isActive'])
    if data.get('password'):
        user.set_password(data['password'])
    session.commit()
    return user_json(user)


@users_bp.delete('/<int:user_id>')
@require_permissions('users.delete')
@audit_log('USER.DEACTIVATE', entity='User', entity_id_key='id', meta_keys=['email'])
def deactivate_user(user_id: int):
    """Deactivate rather than delete; history keeps referencing the user id."""
    session = get_db()
    user = _load_user(user_id)
    if str(user.id) == str(get_jwt_identity()):
        abort(400, description='cannot deactivate your own account')
    user.is_active = False
    session.commit()
    log.info('user %s deactivated', user.id)
    return user_json(user)


def _snapshot(user_id):
    user = get_db().get(User, user_id)
    if not user:
        return {}
    return {'role': user.role, 'permissions': list(user.permissions or []), 'isActive': user.is_active}
