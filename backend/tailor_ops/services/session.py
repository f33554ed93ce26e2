"""Explicit per-request session context.

The context starts in LOADING and resolves to AUTHENTICATED or UNAUTHENTICATED once
the bearer token has been inspected. Guards receive the context as an argument; nothing
in the evaluators reads ambient auth state.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException, RevokedTokenError
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from tailor_ops.utils.fsm import TransitionValidator

log = logging.getLogger(__name__)


class SessionState:
    LOADING = 'LOADING'
    AUTHENTICATED = 'AUTHENTICATED'
    UNAUTHENTICATED = 'UNAUTHENTICATED'


SESSION_FSM = TransitionValidator({
    SessionState.LOADING: {SessionState.AUTHENTICATED, SessionState.UNAUTHENTICATED},
    SessionState.AUTHENTICATED: {SessionState.AUTHENTICATED, SessionState.UNAUTHENTICATED},
    SessionState.UNAUTHENTICATED: {SessionState.AUTHENTICATED, SessionState.UNAUTHENTICATED},
}, field_name='session state')


@dataclass(frozen=True)
class SessionUser:
    id: int
    name: str
    role: str
    permissions: Tuple[str, ...] = ()
    email: Optional[str] = None

    @classmethod
    def from_model(cls, user) -> 'SessionUser':
        return cls(id=user.id, name=user.name, role=user.role,
                   permissions=tuple(user.permissions or ()), email=user.email)

    @classmethod
    def from_claims(cls, identity, claims: Dict[str, Any]) -> 'SessionUser':
        return cls(id=int(identity), name=claims.get('name') or 'Unknown User', role=claims.get('role') or '',
                   permissions=tuple(claims.get('perms') or ()), email=claims.get('email'))

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'email': self.email, 'role': self.role,
                'permissions': list(self.permissions)}


@dataclass
class SessionContext:
    state: str = SessionState.LOADING
    user: Optional[SessionUser] = None
    token_id: Optional[str] = None
    reason: Optional[str] = field(default=None)

    @property
    def is_loading(self) -> bool:
        return self.state == SessionState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    def login(self, user: SessionUser, token_id: Optional[str] = None) -> 'SessionContext':
        SESSION_FSM.assert_can_transition(self.state, SessionState.AUTHENTICATED)
        self.state = SessionState.AUTHENTICATED
        self.user = user
        self.token_id = token_id
        self.reason = None
        return self

    def logout(self, reason: str = 'logged_out') -> 'SessionContext':
        SESSION_FSM.assert_can_transition(self.state, SessionState.UNAUTHENTICATED)
        self.state = SessionState.UNAUTHENTICATED
        self.user = None
        self.token_id = None
        self.reason = reason
        return self

    def expire(self) -> 'SessionContext':
        return self.logout(reason='expired')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state,
            'isAuthenticated': self.is_authenticated,
            'isLoading': self.is_loading,
            'user': self.user.to_dict() if self.user else None,
            'reason': self.reason,
        }


def session_from_request() -> SessionContext:
    """Resolve the session for the current request from its (optional) bearer token."""
    ctx = SessionContext()
    try:
        verify_jwt_in_request(optional=True)
    except (ExpiredSignatureError, RevokedTokenError):
        return ctx.expire()
    except (InvalidTokenError, JWTExtendedException) as e:
        log.info('rejecting unusable token: %s', e)
        return ctx.logout(reason='invalid_token')
    identity = get_jwt_identity()
    if identity is None:
        return ctx.logout(reason='no_token')
    claims = get_jwt()
    return ctx.login(SessionUser.from_claims(identity, claims), token_id=claims.get('jti'))


__all__ = ['SessionState', 'SessionUser', 'SessionContext', 'session_from_request', 'SESSION_FSM']
