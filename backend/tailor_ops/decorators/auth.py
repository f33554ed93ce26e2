import logging
from functools import wraps
from flask import request
from flask_jwt_extended import verify_jwt_in_request
from tailor_ops.errors import AccessDenied
from tailor_ops.services.access import check_access
from tailor_ops.services.policy import current_principal

log = logging.getLogger(__name__)


def require_permissions(*codes: str, require_all: bool = False):
    """Verify the bearer token, then require any (or all) of `codes`.

    The codes are also attached to the view as `required_permissions` so the
    OpenAPI builder can publish them.
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            principal = current_principal()
            if not check_access(principal, codes, require_all=require_all):
                log.warning('user %s denied %s %s (needs %s)', principal.id, request.method, request.path, list(codes))
                raise AccessDenied(codes)
            return fn(*args, **kwargs)
        wrapper.required_permissions = list(codes)
        wrapper.require_all = require_all
        return wrapper
    return outer
