from tailor_ops import get_db
from tailor_ops.constants.permissions import get_template_permissions
from tailor_ops.models.audit import AuditLog
from test_utils_seed import login, unique, user_with

ADMIN_PERMS = ['users.view', 'users.create', 'users.edit', 'users.delete']


def test_create_user_defaults_to_role_template(client):
    _admin, headers = user_with(client, ADMIN_PERMS, role='ADMIN')
    email = f"{unique('Dyer')}@Example.com"
    resp = client.post('/users', headers=headers, json={'name': 'Dyer', 'email': email, 'password': 'secret', 'role': 'DYEING'})
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    assert body['email'] == email.lower()
    assert body['permissions'] == get_template_permissions('DYEING')
    assert login(client, email.lower(), 'secret')

    dup = client.post('/users', headers=headers, json={'name': 'D', 'email': email, 'password': 'x'})
    assert dup.status_code == 400
    assert get_db().query(AuditLog).filter(AuditLog.action == 'USER.CREATE').count() >= 1


def test_unknown_permission_keys_rejected(client):
    _admin, headers = user_with(client, ADMIN_PERMS)
    resp = client.post('/users', headers=headers, json={
        'name': 'Bad', 'email': f"{unique('bad')}@example.com", 'password': 'x', 'permissions': ['orders.view', 'orders.teleport'],
    })
    assert resp.status_code == 400
    assert 'orders.teleport' in resp.get_json()['error']['detail']

    resp = client.post('/users', headers=headers, json={
        'name': 'Bad', 'email': f"{unique('bad')}@example.com", 'password': 'x', 'role': 'WIZARD',
    })
    assert resp.status_code == 400


def test_update_and_deactivate(client):
    admin, headers = user_with(client, ADMIN_PERMS)
    target, _ = user_with(client, ['orders.view'])

    resp = client.put(f'/users/{target.id}', headers=headers, json={'permissions': ['orders.view', 'orders.edit']})
    assert resp.status_code == 200
    assert resp.get_json()['permissions'] == ['orders.view', 'orders.edit']
    audit = get_db().query(AuditLog).filter(AuditLog.action == 'USER.UPDATE').order_by(AuditLog.id.desc()).first()
    assert audit.meta['changes']['permissions'] == {'before': ['orders.view'], 'after': ['orders.view', 'orders.edit']}

    assert client.put(f'/users/{target.id}', headers=headers, json={'permissions': ['nope.nope']}).status_code == 400

    resp = client.delete(f'/users/{target.id}', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['isActive'] is False
    denied = client.post('/auth/login', json={'email': target.email, 'password': 'pw'})
    assert denied.status_code == 401
    assert denied.get_json()['error']['detail'] == 'account is deactivated'

    assert client.delete(f'/users/{admin.id}', headers=headers).status_code == 400


def test_permission_catalog_and_listing(client):
    _viewer, headers = user_with(client, ['users.view'])
    catalog = client.get('/users/permissions', headers=headers).get_json()
    assert 'DYEING' in catalog['groups']
    assert catalog['templates']['CUSTOM']['permissions'] == []

    body = client.get('/users?limit=5', headers=headers).get_json()
    assert body['pagination']['limit'] == 5
    assert client.post('/users', headers=headers, json={}).status_code == 403


def test_deactivation_cuts_off_existing_token(client):
    _admin, headers = user_with(client, ADMIN_PERMS)
    dyer, dyer_headers = user_with(client, ['dyeing.view'])
    assert client.get('/dyeing/available-tasks', headers=dyer_headers).status_code == 200

    assert client.delete(f'/users/{dyer.id}', headers=headers).status_code == 200
    resp = client.get('/dyeing/available-tasks', headers=dyer_headers)
    assert resp.status_code == 401
    assert resp.get_json()['error']['reason'] == 'revoked'


def test_permission_change_invalidates_existing_token(client):
    _admin, headers = user_with(client, ADMIN_PERMS)
    dyer, dyer_headers = user_with(client, ['dyeing.view'])
    resp = client.put(f'/users/{dyer.id}', headers=headers, json={'permissions': ['orders.view']})
    assert resp.status_code == 200
    assert client.get('/dyeing/available-tasks', headers=dyer_headers).status_code == 401

    fresh = {'Authorization': f"Bearer {login(client, dyer.email)}"}
    assert client.get('/dyeing/available-tasks', headers=fresh).status_code == 403
    assert client.get('/orders', headers=fresh).status_code == 200


def test_non_string_email_rejected(client):
    _admin, headers = user_with(client, ADMIN_PERMS)
    resp = client.post('/users', headers=headers, json={'name': 'X', 'email': ['a'], 'password': 'x'})
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'email must be a string'

    target, _ = user_with(client, ['orders.view'])
    assert client.put(f'/users/{target.id}', headers=headers, json={'email': 42}).status_code == 400
    assert client.put(f'/users/{target.id}', headers=headers, json={'email': '  '}).status_code == 400
