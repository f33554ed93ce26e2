from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine, select
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from datetime import timedelta
from typing import Optional, Dict, Any
import logging
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()

DEFAULT_TOKEN_TTL = 8 * 3600


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def load_models():
    """Import every model module so Base.metadata knows all tables."""
    from .models import authz, audit, inventory, order, packet  # noqa: F401
    return authz.Base


def validate_permission_references():
    """Fail fast when navigation, routes or role templates name an unregistered key."""
    from .constants.permissions import ROLE_TEMPLATES, validate_permission_keys
    from .constants.navigation import referenced_permission_keys
    keys = list(referenced_permission_keys())
    for template in ROLE_TEMPLATES.values():
        keys.extend(template['permissions'])
    validate_permission_keys(keys)


def _error_body(status: int, title: str, detail: str, extra: Optional[Dict[str, Any]] = None):
    error = {'status': status, 'title': title, 'detail': detail}
    if extra:
        error.update(extra)
    return {'success': False, 'error': error}


def _register_jwt_callbacks():
    from .models.authz import RevokedToken, User
    from .services.policy import claims_outdated

    @jwt.token_in_blocklist_loader
    def token_revoked(jwt_header, jwt_payload):
        session = get_db()
        jti = jwt_payload.get('jti')
        if session.execute(select(RevokedToken.id).where(RevokedToken.jti == jti)).first() is not None:
            return True
        # deactivation and permission edits take effect on tokens already issued
        try:
            user = session.get(User, int(jwt_payload.get('sub')))
        except (TypeError, ValueError):
            return True
        return claims_outdated(user, jwt_payload)

    @jwt.unauthorized_loader
    def missing_token(reason):
        return _error_body(401, 'Unauthorized', reason), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return _error_body(401, 'Unauthorized', reason), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return _error_body(401, 'Unauthorized', 'Token has expired', {'reason': 'expired'}), 401

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return _error_body(401, 'Unauthorized', 'Token has been revoked', {'reason': 'revoked'}), 401


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret-change-me-0123456789abcdef')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(seconds=int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', DEFAULT_TOKEN_TTL)))
    app.config['LOGIN_PATH'] = os.getenv('LOGIN_PATH', '/login')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    app.config['STRICT_PERMISSION_REGISTRY'] = _env_flag('STRICT_PERMISSION_REGISTRY', True)

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    logging.getLogger('tailor_ops').setLevel(str(app.config['LOG_LEVEL']).upper())

    if app.config['STRICT_PERMISSION_REGISTRY']:
        validate_permission_references()

    # Database
    load_models()
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)
    _register_jwt_callbacks()

    from .routes.auth import auth_bp
    from .routes.navigation import nav_bp
    from .routes.dyeing import dyeing_bp
    from .routes.dispatch import dispatch_bp
    from .routes.inventory import inv_bp
    from .routes.orders import orders_bp
    from .routes.users import users_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(nav_bp, url_prefix='/navigation')
    app.register_blueprint(dyeing_bp, url_prefix='/dyeing')
    app.register_blueprint(dispatch_bp, url_prefix='/dispatch')
    app.register_blueprint(inv_bp, url_prefix='/inventory')
    app.register_blueprint(orders_bp, url_prefix='/orders')
    app.register_blueprint(users_bp, url_prefix='/users')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if SessionLocal is not None:
            SessionLocal().rollback()
        if isinstance(e, HTTPException):
            return _error_body(e.code, e.name, e.description, getattr(e, 'extra', None)), e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return _error_body(500, 'Internal Server Error', 'Unexpected error'), 500

    from .openapi import build_openapi_spec

    @app.route('/openapi.json')
    def openapi_spec():
        return build_openapi_spec()

    return app


def get_db():
    return SessionLocal()
