def test_openapi_spec_available(client):
    resp = client.get('/openapi.json')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['openapi'].startswith('3.')
    assert '/auth/login' in body['paths']
    assert 'x-required-permissions' not in body['paths']['/auth/login']['post']


def test_guarded_operations_publish_permissions(client):
    paths = client.get('/openapi.json').get_json()['paths']
    accept = paths['/dyeing/task/{item_id}/accept']['post']
    assert accept['x-required-permissions'] == ['dyeing.manage']
    assert accept['parameters'][0] == {'name': 'item_id', 'in': 'path', 'required': True, 'schema': {'type': 'integer'}}
    assert '403' in accept['responses']
    assert set(paths['/dyeing/task/{item_id}/reject']['post']['x-required-permissions']) == {'dyeing.reject', 'dyeing.manage'}
    assert paths['/dispatch/order/{order_id}/dispatch']['post']['x-required-permissions'] == ['dispatch.manage']
    assert paths['/users']['post']['x-required-permissions'] == ['users.create']


def test_every_guarded_key_is_registered(client):
    from tailor_ops.constants.permissions import validate_permission_keys
    paths = client.get('/openapi.json').get_json()['paths']
    for ops in paths.values():
        for op in ops.values():
            validate_permission_keys(op.get('x-required-permissions', []))
