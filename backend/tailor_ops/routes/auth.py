import logging
from flask import Blueprint, request, abort
from flask_jwt_extended import create_access_token, jwt_required, get_jwt, get_jwt_identity
from sqlalchemy import select
from tailor_ops import get_db
from tailor_ops.models.authz import User, RevokedToken
from tailor_ops.serializers import user_json
from tailor_ops.services.policy import token_claims_for
from tailor_ops.services.session import session_from_request
from tailor_ops.utils.validation import normalize_email

log = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/login')
def login():
    """Exchange email and password for an access token."""
    data = request.json or {}
    email = normalize_email(data.get('email'), required=False)
    password = data.get('password')
    if not email or not password:
        abort(400, description='email & password required')
    session = get_db()
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not user.verify_password(password):
        log.warning('failed login for %s', email)
        abort(401, description='invalid credentials')
    if not user.is_active:
        log.warning('login attempt by deactivated user %s', user.id)
        abort(401, description='account is deactivated')
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id), additional_claims=token_claims_for(user))
    log.info('user %s logged in', user.id)
    return {'user': user_json(user), 'accessToken': token, 'message': 'Login successful'}


@auth_bp.get('/me')
@jwt_required()
def me():
    """Current user as stored, with the permissions carried by the token."""
    user = get_db().get(User, int(get_jwt_identity()))
    if not user:
        abort(404)
    body = user_json(user)
    body['tokenPermissions'] = list(get_jwt().get('perms', []))
    return body


@auth_bp.get('/session')
def session_state():
    """Resolved session context for the presented token (never 401s)."""
    return session_from_request().to_dict()


@auth_bp.post('/logout')
@jwt_required()
def logout():
    """Revoke the presented token."""
    claims = get_jwt()
    session = get_db()
    session.add(RevokedToken(jti=claims['jti'], user_id=int(get_jwt_identity())))
    session.commit()
    log.info('user %s logged out', get_jwt_identity())
    return {'success': True, 'message': 'Logged out'}
