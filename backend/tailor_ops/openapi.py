"""Deterministic OpenAPI document generated from the registered URL map.

Every operation guarded by `require_permissions` carries `x-required-permissions`
(and `x-require-all` when AND semantics apply); lifecycle schemas expose their
transition graphs as `x-transitions`.
"""
import re
from typing import Any, Dict
from flask import current_app

from tailor_ops.services.dyeing import DYEING_FSM
from tailor_ops.services.dispatch import ORDER_FSM
from tailor_ops.services.session import SESSION_FSM

_CONVERTER = re.compile(r'<(?:(\w+):)?(\w+)>')
_SKIP_METHODS = {'HEAD', 'OPTIONS'}


def _openapi_path(rule: str):
    params = []

    def repl(m):
        kind, name = m.group(1), m.group(2)
        params.append({
            'name': name,
            'in': 'path',
            'required': True,
            'schema': {'type': 'integer' if kind == 'int' else 'string'},
        })
        return '{' + name + '}'
    return _CONVERTER.sub(repl, rule), params


def _transitions(fsm) -> Dict[str, list]:
    return {state: sorted(targets) for state, targets in sorted(fsm.graph.items())}


def build_openapi_spec() -> Dict[str, Any]:
    paths: Dict[str, Dict[str, Any]] = {}
    for rule in sorted(current_app.url_map.iter_rules(), key=lambda r: r.rule):
        if rule.endpoint == 'static':
            continue
        view = current_app.view_functions[rule.endpoint]
        path, params = _openapi_path(rule.rule)
        doc = (view.__doc__ or '').strip().splitlines()
        for method in sorted((rule.methods or set()) - _SKIP_METHODS):
            op: Dict[str, Any] = {
                'operationId': f'{rule.endpoint}.{method.lower()}',
                'tags': [rule.endpoint.split('.', 1)[0]],
                'responses': {'200': {'description': 'OK'}},
            }
            if doc:
                op['summary'] = doc[0]
            if params:
                op['parameters'] = params
            required = getattr(view, 'required_permissions', None)
            if required is not None:
                op['security'] = [{'bearerAuth': []}]
                op['x-required-permissions'] = list(required)
                if getattr(view, 'require_all', False):
                    op['x-require-all'] = True
                op['responses'].update({
                    '401': {'$ref': '#/components/responses/Unauthorized'},
                    '403': {'$ref': '#/components/responses/Forbidden'},
                })
            paths.setdefault(path, {})[method.lower()] = op

    error_schema = {
        'type': 'object',
        'properties': {
            'success': {'type': 'boolean'},
            'error': {
                'type': 'object',
                'properties': {
                    'status': {'type': 'integer'},
                    'title': {'type': 'string'},
                    'detail': {'type': 'string'},
                    'sections': {'type': 'array', 'items': {'type': 'string'}},
                    'required_permissions': {'type': 'array', 'items': {'type': 'string'}},
                },
            },
        },
    }
    return {
        'openapi': '3.0.3',
        'info': {'title': 'Tailor Ops API', 'version': '0.1.0'},
        'paths': paths,
        'components': {
            'securitySchemes': {'bearerAuth': {'type': 'http', 'scheme': 'bearer', 'bearerFormat': 'JWT'}},
            'schemas': {
                'Error': error_schema,
                'ItemSection': {'type': 'object', 'x-transitions': _transitions(DYEING_FSM)},
                'Order': {'type': 'object', 'x-transitions': _transitions(ORDER_FSM)},
                'Session': {'type': 'object', 'x-transitions': _transitions(SESSION_FSM)},
            },
            'responses': {
                'Unauthorized': {'description': 'Missing or invalid token',
                                 'content': {'application/json': {'schema': {'$ref': '#/components/schemas/Error'}}}},
                'Forbidden': {'description': 'Missing permission',
                              'content': {'application/json': {'schema': {'$ref': '#/components/schemas/Error'}}}},
            },
        },
    }


__all__ = ['build_openapi_spec']
