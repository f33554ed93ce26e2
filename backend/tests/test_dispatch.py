import pytest
from datetime import date, timedelta
from werkzeug.exceptions import BadRequest

from tailor_ops import get_db
from tailor_ops.constants.statuses import OrderStatus, OrderItemStatus, SectionStatus as S, Priority
from tailor_ops.errors import InvalidTransition
from tailor_ops.models.order import Order
from tailor_ops.services import dispatch
from tailor_ops.services.session import SessionUser
from tailor_ops.utils.timeutils import utcnow
from test_utils_seed import create_dyeing_item, create_order, user_with

DISPATCH_PERMS = ['orders.view', 'dispatch.view', 'dispatch.manage']


def _ready_order(**kwargs):
    order = create_order(status=OrderStatus.READY_FOR_DISPATCH, **kwargs)
    create_dyeing_item({'shirt': S.COMPLETED}, order=order, item_status=OrderItemStatus.READY_FOR_DISPATCH)
    return order


def test_dispatch_validations(app_ctx):
    clerk = SessionUser(id=1, name='Clerk', role='DISPATCH')
    order = create_order(status=OrderStatus.IN_PROGRESS)
    with pytest.raises(InvalidTransition) as exc:
        dispatch.dispatch_order(get_db(), order.id, clerk, 'TCS', 'T1', '2026-01-01')
    assert exc.value.description == 'Order must be in READY_FOR_DISPATCH status. Current: IN_PROGRESS'

    ready = _ready_order()
    with pytest.raises(BadRequest) as exc:
        dispatch.dispatch_order(get_db(), ready.id, clerk, 'TCS', '', '2026-01-01')
    assert exc.value.description == 'Courier, tracking number, and dispatch date are required'
    with pytest.raises(BadRequest):
        dispatch.dispatch_order(get_db(), ready.id, clerk, 'TCS', 'T1', 'next tuesday')
    assert get_db().get(Order, ready.id).status == OrderStatus.READY_FOR_DISPATCH


def test_complete_requires_dispatched(app_ctx):
    clerk = SessionUser(id=1, name='Clerk', role='DISPATCH')
    ready = _ready_order()
    with pytest.raises(InvalidTransition):
        dispatch.complete_order(get_db(), ready.id, clerk)


def test_dispatch_and_complete_over_http(client):
    order = _ready_order(priority=Priority.HIGH)
    user, headers = user_with(client, DISPATCH_PERMS, role='DISPATCH', name='Dispatcher')

    queue = client.get('/dispatch/queue', headers=headers).get_json()
    assert order.id in [o['id'] for o in queue['data']]

    resp = client.post(f'/dispatch/order/{order.id}/dispatch', headers=headers, json={
        'courier': 'Leopards', 'trackingNumber': 'LP-777', 'dispatchDate': utcnow().date().isoformat(), 'notes': 'fragile',
    })
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()['data']
    assert body['status'] == 'DISPATCHED'
    assert body['dispatchData']['courier'] == 'Leopards'
    assert body['dispatchData']['dispatchedBy'] == user.id
    assert all(i['status'] == 'DISPATCHED' for i in body['items'])

    item_id = body['items'][0]['id']
    detail = client.get(f'/orders/{order.id}/items/{item_id}', headers=headers).get_json()
    assert detail['timeline'][-1]['action'] == 'Order dispatched via Leopards, tracking: LP-777'

    stats = client.get('/dispatch/stats', headers=headers).get_json()['data']
    assert stats['dispatchedToday'] >= 1
    assert stats['totalDispatched'] >= 1

    again = client.post(f'/dispatch/order/{order.id}/dispatch', headers=headers, json={
        'courier': 'Leopards', 'trackingNumber': 'LP-778', 'dispatchDate': date.today().isoformat(),
    })
    assert again.status_code == 400

    assert order.id in [o['id'] for o in client.get('/dispatch/dispatched', headers=headers).get_json()['data']]

    resp = client.post(f'/dispatch/order/{order.id}/complete', headers=headers)
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()['data']
    assert body['status'] == 'COMPLETED'
    assert body['completedBy'] == user.id
    assert all(i['status'] == 'COMPLETED' for i in body['items'])
    assert order.id in [o['id'] for o in client.get('/dispatch/completed', headers=headers).get_json()['data']]


def test_queue_puts_urgent_first(app_ctx):
    normal = _ready_order(priority=Priority.NORMAL, fwd_date=date.today())
    urgent = _ready_order(priority=Priority.URGENT, fwd_date=date.today() + timedelta(days=20))
    ids = [o.id for o in dispatch.dispatch_queue(get_db())]
    assert ids.index(urgent.id) < ids.index(normal.id)


def test_dispatch_requires_manage(client):
    order = _ready_order()
    _user, headers = user_with(client, ['dispatch.view'])
    resp = client.post(f'/dispatch/order/{order.id}/dispatch', headers=headers, json={
        'courier': 'TCS', 'trackingNumber': 'X', 'dispatchDate': '2026-01-01',
    })
    assert resp.status_code == 403
