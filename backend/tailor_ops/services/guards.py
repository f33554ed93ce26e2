"""Route guards: an authentication guard driven by the session state and a pure
permission guard. Both return a GuardDecision that the client renders."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tailor_ops.services.access import can_access_route
from tailor_ops.services.session import SessionContext, SessionState
from tailor_ops.constants.navigation import ROUTE_TABLE

ACCESS_DENIED_MESSAGE = ("You don't have permission to access this page. Please contact your "
                         "administrator if you believe this is an error.")


class GuardOutcome:
    RENDER = 'RENDER'
    LOADING = 'LOADING'
    REDIRECT = 'REDIRECT'
    ACCESS_DENIED = 'ACCESS_DENIED'
    NOT_FOUND = 'NOT_FOUND'


@dataclass(frozen=True)
class GuardDecision:
    outcome: str
    redirect_to: Optional[str] = None
    from_location: Optional[str] = None
    replace: bool = False
    required_permissions: Tuple[str, ...] = ()
    history_delta: Optional[int] = None
    message: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome == GuardOutcome.RENDER

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {'outcome': self.outcome}
        if self.outcome == GuardOutcome.REDIRECT:
            body.update({'redirectTo': self.redirect_to, 'state': {'from': self.from_location}, 'replace': self.replace})
        elif self.outcome == GuardOutcome.ACCESS_DENIED:
            body.update({'requiredPermissions': list(self.required_permissions),
                         'back': {'historyDelta': self.history_delta}, 'message': self.message})
        return body


RENDER = GuardDecision(GuardOutcome.RENDER)


def authentication_guard(session: SessionContext, location: str, login_path: str = '/login') -> GuardDecision:
    if session.state == SessionState.LOADING:
        return GuardDecision(GuardOutcome.LOADING)
    if session.state != SessionState.AUTHENTICATED:
        return GuardDecision(GuardOutcome.REDIRECT, redirect_to=login_path, from_location=location, replace=True)
    return RENDER


def permission_guard(user: Any, required: Optional[Sequence[str]] = None) -> GuardDecision:
    if not required:
        return RENDER
    if can_access_route(user, required):
        return RENDER
    return GuardDecision(GuardOutcome.ACCESS_DENIED, required_permissions=tuple(required),
                         history_delta=-1, message=ACCESS_DENIED_MESSAGE)


def _split(path: str) -> List[str]:
    return [seg for seg in path.split('?', 1)[0].strip().split('/') if seg]


def match_route(path: str, table: Optional[Sequence[Dict[str, Any]]] = None) -> Optional[Tuple[Dict[str, Any], Dict[str, str]]]:
    """Find the route entry for a concrete path; static segments win over `:param` ones."""
    segments = _split(path)
    best = None
    best_score = None
    for entry in (ROUTE_TABLE if table is None else table):
        pattern = _split(entry['pattern'])
        if len(pattern) != len(segments):
            continue
        params: Dict[str, str] = {}
        for pat, seg in zip(pattern, segments):
            if pat.startswith(':'):
                params[pat[1:]] = seg
            elif pat != seg:
                break
        else:
            score = len(params)
            if best_score is None or score < best_score:
                best, best_score = (entry, params), score
    return best


def resolve_route(session: SessionContext, path: str, login_path: str = '/login') -> GuardDecision:
    """Run the authentication guard, then the permission guard of the matched route."""
    match = match_route(path)
    if match is None:
        return GuardDecision(GuardOutcome.NOT_FOUND)
    entry, _params = match
    if entry.get('public'):
        return RENDER
    decision = authentication_guard(session, path, login_path)
    if not decision.allowed:
        return decision
    return permission_guard(session.user, entry.get('requiredPermissions'))


__all__ = [
    'GuardOutcome', 'GuardDecision', 'authentication_guard', 'permission_guard', 'match_route', 'resolve_route',
]
