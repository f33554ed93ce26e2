from flask import Blueprint, request, abort, current_app
from tailor_ops.services.guards import resolve_route, GuardOutcome
from tailor_ops.services.navigation import navigation_for
from tailor_ops.services.session import session_from_request

nav_bp = Blueprint('navigation', __name__)


@nav_bp.get('')
def navigation():
    """Sidebar items visible to the caller; empty when not logged in."""
    ctx = session_from_request()
    return {'data': navigation_for(ctx.user), 'session': ctx.state}


@nav_bp.get('/resolve')
def resolve():
    """Guard decision for a client-side page path."""
    path = request.args.get('path')
    if not path or not path.startswith('/'):
        abort(400, description='path query parameter must be an absolute path')
    ctx = session_from_request()
    decision = resolve_route(ctx, path, current_app.config['LOGIN_PATH'])
    status = 404 if decision.outcome == GuardOutcome.NOT_FOUND else 200
    return {'path': path, 'session': ctx.state, **decision.to_dict()}, status
