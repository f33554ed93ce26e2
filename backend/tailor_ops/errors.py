"""Domain exceptions rendered by the app-wide error handler.

HTTP-facing errors subclass werkzeug exceptions so `abort()`-style propagation keeps
working; any `extra` mapping is merged into the JSON error envelope.
"""
from __future__ import annotations
from typing import Iterable, Optional
from werkzeug.exceptions import BadRequest, Forbidden


class SectionStateError(BadRequest):
    """A workflow transition was requested on sections not in the expected prior state."""

    def __init__(self, description: str, sections: Iterable[str]):
        super().__init__(description=description)
        self.sections = list(sections)
        self.extra = {'sections': self.sections}


class InvalidTransition(BadRequest):
    def __init__(self, description: str, current: Optional[str] = None, target: Optional[str] = None):
        super().__init__(description=description)
        self.extra = {'current': current, 'target': target}


class AccessDenied(Forbidden):
    """Caller lacks every permission that would satisfy the requirement."""

    def __init__(self, required: Iterable[str], description: Optional[str] = None):
        super().__init__(description=description or "You don't have permission to access this resource")
        self.required_permissions = list(required)
        self.extra = {'required_permissions': self.required_permissions}


class UnknownPermissionError(ValueError):
    def __init__(self, unknown: Iterable[str]):
        self.unknown = sorted(set(unknown))
        super().__init__(f"Unknown permission keys: {self.unknown}")


__all__ = ['SectionStateError', 'InvalidTransition', 'AccessDenied', 'UnknownPermissionError']
