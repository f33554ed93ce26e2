from tailor_ops.constants.statuses import OrderStatus, SectionStatus as S
from test_utils_seed import create_dyeing_item, create_order, ensure_inventory_item, unique, user_with


def test_order_list_filters(client):
    mine = create_order(status=OrderStatus.RECEIVED, customer_name='Zainab Qureshi')
    create_order(status=OrderStatus.IN_PROGRESS, customer_name='Other Person')
    _user, headers = user_with(client, ['orders.view'])

    body = client.get('/orders?customer_name=zainab', headers=headers).get_json()
    assert [o['id'] for o in body['data']] == [mine.id]
    assert body['pagination']['total'] == 1

    body = client.get('/orders?status=RECEIVED&sort=-created_at', headers=headers).get_json()
    assert all(o['status'] == 'RECEIVED' for o in body['data'])

    assert client.get('/orders?status=LOST', headers=headers).status_code == 400
    assert client.get('/orders', headers={}).status_code == 401


def test_order_and_item_detail(client):
    inv = ensure_inventory_item(unique('SILK'))
    item = create_dyeing_item({'shirt': S.READY_FOR_DYEING}, materials=[('shirt', inv, 2.0)], packet_sections=['shirt'])
    _user, headers = user_with(client, ['orders.view'])

    order = client.get(f'/orders/{item.order_id}', headers=headers).get_json()
    assert order['itemCount'] == 1
    assert order['items'][0]['sectionStatuses'] == {'shirt': {'status': 'READY_FOR_DYEING', 'dyeingRound': 1}}

    detail = client.get(f'/orders/{item.order_id}/items/{item.id}', headers=headers).get_json()
    assert detail['sections'][0]['name'] == 'Shirt'
    assert detail['sections'][0]['materials'][0]['requiredQty'] == 2.0
    assert detail['packets'][0]['sectionsIncluded'] == ['shirt']

    assert client.get(f'/orders/{item.order_id + 1000}/items/{item.id}', headers=headers).status_code == 404
    assert client.get('/orders/999999', headers=headers).status_code == 404
