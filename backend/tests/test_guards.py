from tailor_ops.services.guards import (
    GuardOutcome, authentication_guard, permission_guard, match_route, resolve_route,
)
from tailor_ops.services.session import SessionContext, SessionUser, SessionState
from test_utils_seed import user_with


def _session(perms=()):
    return SessionContext().login(SessionUser(id=7, name='U', role='CUSTOM', permissions=tuple(perms)))


def test_loading_session_renders_loading():
    assert authentication_guard(SessionContext(), '/orders').outcome == GuardOutcome.LOADING


def test_unauthenticated_redirects_with_from():
    ctx = SessionContext().logout('no_token')
    decision = authentication_guard(ctx, '/orders/5', '/login')
    assert decision.outcome == GuardOutcome.REDIRECT
    body = decision.to_dict()
    assert body['redirectTo'] == '/login'
    assert body['state'] == {'from': '/orders/5'}
    assert body['replace'] is True


def test_permission_guard_denies_listing_required():
    decision = permission_guard({'permissions': ['orders.view']}, ['orders.edit'])
    assert decision.outcome == GuardOutcome.ACCESS_DENIED
    body = decision.to_dict()
    assert body['requiredPermissions'] == ['orders.edit']
    assert body['back'] == {'historyDelta': -1}
    assert body['message']


def test_permission_guard_empty_requirement_renders():
    assert permission_guard(None, []).allowed
    assert permission_guard({'permissions': ['orders.view']}, ['orders.edit', 'orders.view']).allowed


def test_match_route_prefers_static_segments():
    entry, params = match_route('/orders/new')
    assert entry['pattern'] == '/orders/new'
    assert params == {}
    entry, params = match_route('/orders/42/items/9')
    assert entry['pattern'] == '/orders/:id/items/:itemId'
    assert params == {'id': '42', 'itemId': '9'}
    assert match_route('/no/such/page') is None


def test_resolve_route():
    assert resolve_route(_session(['orders.view']), '/orders/3/edit').outcome == GuardOutcome.ACCESS_DENIED
    assert resolve_route(_session(['orders.edit']), '/orders/3/edit').allowed
    assert resolve_route(SessionContext().logout(), '/login').allowed
    assert resolve_route(_session(), '/unknown').outcome == GuardOutcome.NOT_FOUND


def test_session_transitions():
    ctx = SessionContext()
    assert ctx.is_loading
    ctx.login(SessionUser(id=1, name='A', role='ADMIN'))
    assert ctx.state == SessionState.AUTHENTICATED
    ctx.expire()
    assert ctx.state == SessionState.UNAUTHENTICATED
    assert ctx.user is None
    assert ctx.reason == 'expired'


def test_resolve_endpoint(client):
    resp = client.get('/navigation/resolve?path=/orders/1/edit')
    body = resp.get_json()
    assert body['outcome'] == 'REDIRECT'
    assert body['state'] == {'from': '/orders/1/edit'}

    _user, headers = user_with(client, ['orders.view'])
    body = client.get('/navigation/resolve?path=/orders/1/edit', headers=headers).get_json()
    assert body['outcome'] == 'ACCESS_DENIED'
    assert body['requiredPermissions'] == ['orders.edit']

    assert client.get('/navigation/resolve?path=/orders', headers=headers).get_json()['outcome'] == 'RENDER'
    assert client.get('/navigation/resolve?path=/nowhere', headers=headers).status_code == 404
    assert client.get('/navigation/resolve?path=orders', headers=headers).status_code == 400
