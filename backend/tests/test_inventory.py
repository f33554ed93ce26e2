from tailor_ops import get_db
from tailor_ops.models.audit import AuditLog
from test_utils_seed import ensure_inventory_item, unique, user_with


def test_inventory_create_list_and_stock_moves(client):
    _user, headers = user_with(client, ['inventory.view', 'inventory.create', 'inventory.stock_in', 'inventory.stock_out'])
    sku = unique('CHIFFON')
    resp = client.post('/inventory/items', headers=headers, json={
        'name': 'Chiffon', 'sku': sku, 'category': 'FABRIC', 'remaining_stock': 12, 'reorder_level': 5,
    })
    assert resp.status_code == 201, resp.get_json()
    item = resp.get_json()
    assert item['remaining_stock'] == 12
    assert item['isLowStock'] is False

    dup = client.post('/inventory/items', headers=headers, json={'name': 'Again', 'sku': sku})
    assert dup.status_code == 400

    resp = client.post(f"/inventory/items/{item['id']}/stock-out", headers=headers, json={'quantity': 9})
    assert resp.status_code == 200
    assert resp.get_json()['remaining_stock'] == 3
    assert resp.get_json()['isLowStock'] is True

    resp = client.post(f"/inventory/items/{item['id']}/stock-out", headers=headers, json={'quantity': 4})
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'].startswith('Insufficient stock')

    resp = client.post(f"/inventory/items/{item['id']}/stock-in", headers=headers, json={'quantity': 7.5})
    assert resp.get_json()['remaining_stock'] == 10.5

    assert client.post(f"/inventory/items/{item['id']}/stock-in", headers=headers, json={'quantity': -1}).status_code == 400
    assert client.post(f"/inventory/items/{item['id']}/stock-in", headers=headers, json={'quantity': 'lots'}).status_code == 400
    for bad in ('nan', 'inf'):
        resp = client.post(f"/inventory/items/{item['id']}/stock-in", headers=headers, json={'quantity': bad})
        assert resp.status_code == 400
        assert resp.get_json()['error']['detail'] == 'quantity must be a number'
        resp = client.post(f"/inventory/items/{item['id']}/stock-out", headers=headers, json={'quantity': bad})
        assert resp.status_code == 400

    audits = get_db().query(AuditLog).filter(AuditLog.action == 'INVENTORY.STOCK_IN').all()
    assert audits, 'Expected INVENTORY.STOCK_IN audit entry'
    changes = (audits[-1].meta or {}).get('changes')
    assert changes == {'remaining_stock': {'before': 3, 'after': 10.5}}


def test_list_filters_and_pagination(client):
    low = ensure_inventory_item(unique('LOW'), remaining_stock=1, reorder_level=10, category='ADDA_MATERIAL')
    ok = ensure_inventory_item(unique('OK'), remaining_stock=50, reorder_level=10, category='ADDA_MATERIAL')
    _user, headers = user_with(client, ['inventory.view'])

    body = client.get('/inventory/items?category=ADDA_MATERIAL&low_stock=true', headers=headers).get_json()
    skus = [i['sku'] for i in body['data']]
    assert low.sku in skus and ok.sku not in skus
    assert body['pagination']['total'] == len(body['data'])

    body = client.get('/inventory/items?limit=1&sort=-remaining_stock', headers=headers).get_json()
    assert body['pagination']['limit'] == 1
    assert body['pagination']['returned'] == 1

    assert client.get('/inventory/items?low_stock=maybe', headers=headers).status_code == 400
    assert client.get('/inventory/items?sort=colour', headers=headers).status_code == 400

    alerts = client.get('/inventory/alerts/low-stock', headers=headers).get_json()
    assert low.sku in [i['sku'] for i in alerts['data']]
    assert all(i['isLowStock'] for i in alerts['data'])

    assert client.get(f'/inventory/items/{ok.id}', headers=headers).get_json()['sku'] == ok.sku
    assert client.get('/inventory/items/999999', headers=headers).status_code == 404


def test_inventory_requires_permissions(client):
    _user, headers = user_with(client, ['inventory.view'])
    resp = client.post('/inventory/items', headers=headers, json={'name': 'X', 'sku': unique('X')})
    assert resp.status_code == 403
    assert resp.get_json()['error']['required_permissions'] == ['inventory.create']
