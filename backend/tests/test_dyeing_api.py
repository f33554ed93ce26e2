from datetime import date, timedelta
from tailor_ops.constants.statuses import SectionStatus as S, Priority
from test_utils_seed import create_dyeing_item, ensure_inventory_item, unique, user_with

DYER_PERMS = ['orders.view', 'dyeing.view', 'dyeing.manage', 'dyeing.reject']


def test_dyeing_endpoints_require_permission(client):
    item = create_dyeing_item({'shirt': S.READY_FOR_DYEING})
    assert client.get('/dyeing/available-tasks').status_code == 401
    _user, headers = user_with(client, ['orders.view'])
    resp = client.get('/dyeing/available-tasks', headers=headers)
    assert resp.status_code == 403
    body = resp.get_json()
    assert body['success'] is False
    assert body['error']['required_permissions'] == ['dyeing.view']
    resp = client.post(f'/dyeing/task/{item.id}/accept', json={'sections': ['shirt']}, headers=headers)
    assert resp.status_code == 403


def test_view_only_user_cannot_reject(client):
    item = create_dyeing_item({'shirt': S.READY_FOR_DYEING})
    _user, headers = user_with(client, ['dyeing.view'])
    resp = client.post(f'/dyeing/task/{item.id}/reject', json={'sections': ['shirt'], 'notes': 'x'}, headers=headers)
    assert resp.status_code == 403
    assert set(resp.get_json()['error']['required_permissions']) == {'dyeing.reject', 'dyeing.manage'}


def test_full_dyeing_flow_over_http(client):
    item = create_dyeing_item({'shirt': S.READY_FOR_DYEING, 'dupatta': S.READY_FOR_DYEING}, priority=Priority.URGENT)
    user, headers = user_with(client, DYER_PERMS, role='DYEING', name='Dyer Bee')

    available = client.get('/dyeing/available-tasks', headers=headers).get_json()
    assert available['success'] is True
    task = next(t for t in available['data'] if t['orderItemId'] == item.id)
    assert [s['name'] for s in task['readyForDyeingSections']] == ['Shirt', 'Dupatta']

    resp = client.post(f'/dyeing/task/{item.id}/accept', json={'userId': user.id, 'sections': ['shirt', 'dupatta']},
                       headers=headers)
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body['message'] == 'Accepted 2 section(s) for dyeing'
    assert body['data']['orderItem']['status'] == 'IN_DYEING'
    assert body['data']['acceptedSections'] == ['Shirt', 'Dupatta']

    mine = client.get('/dyeing/my-tasks', headers=headers).get_json()
    assert any(t['orderItemId'] == item.id for t in mine['data'])
    assert mine['meta']['accepted'] >= 1

    resp = client.post(f'/dyeing/task/{item.id}/start', json={'sections': ['shirt']}, headers=headers)
    assert resp.get_json()['message'] == 'Started dyeing for 1 section(s)'

    stats = client.get('/dyeing/stats', headers=headers).get_json()['data']
    assert stats['acceptedCount'] == 1
    assert stats['inProgressCount'] == 1
    assert stats['completedTodayCount'] == 0

    resp = client.post(f'/dyeing/task/{item.id}/complete', json={'sections': ['shirt', 'dupatta']}, headers=headers)
    body = resp.get_json()
    assert body['message'] == 'Dyeing completed for 2 section(s). Order item ready for production!'
    assert body['data']['allSectionsReady'] is True
    assert body['data']['orderItem']['status'] == 'READY_FOR_PRODUCTION'

    stats = client.get('/dyeing/stats', headers=headers).get_json()['data']
    assert stats['completedTodayCount'] == 2

    history = client.get('/dyeing/completed-tasks?mine=true', headers=headers).get_json()
    assert history['meta']['total'] == 1
    assert history['data'][0]['orderItemId'] == item.id

    detail = client.get(f'/dyeing/task/{item.id}', headers=headers).get_json()['data']
    assert [t['action'] for t in detail['timeline']][-1].endswith('All sections ready for production.')


def test_userid_must_match_token(client):
    item = create_dyeing_item({'shirt': S.READY_FOR_DYEING})
    user, headers = user_with(client, DYER_PERMS)
    resp = client.post(f'/dyeing/task/{item.id}/accept', json={'userId': user.id + 1000, 'sections': ['shirt']},
                       headers=headers)
    assert resp.status_code == 403
    assert resp.get_json()['error']['detail'] == 'userId does not match the authenticated user'


def test_invalid_sections_report_names(client):
    item = create_dyeing_item({'shirt': S.PACKET_CREATED})
    _user, headers = user_with(client, DYER_PERMS)
    resp = client.post(f'/dyeing/task/{item.id}/accept', json={'sections': ['shirt']}, headers=headers)
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['error']['detail'] == 'Sections not ready for dyeing: Shirt'
    assert body['error']['sections'] == ['shirt']


def test_reject_over_http(client):
    inv = ensure_inventory_item(unique('SILK'), remaining_stock=5)
    item = create_dyeing_item({'shirt': S.READY_FOR_DYEING}, materials=[('shirt', inv, 2.5)], packet_sections=['shirt'])
    _user, headers = user_with(client, DYER_PERMS)
    resp = client.post(f'/dyeing/task/{item.id}/reject',
                       json={'sections': ['shirt'], 'reasonCode': 'WRONG_MATERIAL', 'notes': 'silk instead of chiffon'},
                       headers=headers)
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body['message'] == 'Rejected 1 section(s). Inventory released, sections sent back to inventory check.'
    data = body['data']
    assert data['rejectedSections'] == [{'name': 'Shirt', 'round': 2, 'previousFabricationUser': None}]
    assert data['inventoryReleased'][0]['quantity'] == 2.5
    assert data['packetsInvalidated'][0]['section'] == 'Shirt'
    assert data['orderItem']['status'] == 'INVENTORY_CHECK'
    section = data['orderItem']['sections'][0]
    assert section['status'] == 'PENDING_INVENTORY_CHECK'
    assert section['dyeingRejectionReasonCode'] == 'WRONG_MATERIAL'

    resp = client.post(f'/dyeing/task/{item.id}/reject', json={'sections': ['shirt']}, headers=headers)
    assert resp.status_code == 400


def test_available_tasks_sorting_and_filters(client):
    soon = create_dyeing_item({'shirt': S.READY_FOR_DYEING}, fwd_date=date.today() + timedelta(days=1),
                              priority=Priority.LOW)
    later = create_dyeing_item({'shirt': S.READY_FOR_DYEING}, fwd_date=date.today() + timedelta(days=30),
                               priority=Priority.URGENT)
    _user, headers = user_with(client, ['dyeing.view'])

    data = client.get('/dyeing/available-tasks?sortBy=fwdDate&sortOrder=asc', headers=headers).get_json()['data']
    ids = [t['orderItemId'] for t in data]
    assert ids.index(soon.id) < ids.index(later.id)

    data = client.get('/dyeing/available-tasks?sortBy=priority', headers=headers).get_json()['data']
    ids = [t['orderItemId'] for t in data]
    assert ids.index(later.id) < ids.index(soon.id)

    data = client.get('/dyeing/available-tasks?priority=LOW', headers=headers).get_json()['data']
    assert all(t['priority'] == 'LOW' for t in data)
    assert soon.id in [t['orderItemId'] for t in data]

    assert client.get('/dyeing/available-tasks?priority=SOMEDAY', headers=headers).status_code == 400
    assert client.get('/dyeing/available-tasks?sortBy=colour', headers=headers).status_code == 400
    assert client.get('/dyeing/completed-tasks?page=abc', headers=headers).status_code == 400


def test_my_completed_history_lists_only_my_sections(client):
    item = create_dyeing_item({'shirt': S.READY_FOR_DYEING, 'dupatta': S.READY_FOR_DYEING})
    _first, first_headers = user_with(client, DYER_PERMS, name='First Dyer')
    _second, second_headers = user_with(client, DYER_PERMS, name='Second Dyer')

    for headers, section in ((first_headers, 'shirt'), (second_headers, 'dupatta')):
        resp = client.post(f'/dyeing/task/{item.id}/accept', json={'sections': [section]}, headers=headers)
        assert resp.status_code == 200, resp.get_json()
        resp = client.post(f'/dyeing/task/{item.id}/complete', json={'sections': [section]}, headers=headers)
        assert resp.status_code == 200, resp.get_json()

    mine = client.get('/dyeing/completed-tasks?mine=true', headers=first_headers).get_json()
    row = next(r for r in mine['data'] if r['orderItemId'] == item.id)
    assert [s['name'] for s in row['completedSections']] == ['Shirt']

    everyone = client.get('/dyeing/completed-tasks?limit=100', headers=first_headers).get_json()
    row = next(r for r in everyone['data'] if r['orderItemId'] == item.id)
    assert sorted(s['name'] for s in row['completedSections']) == ['Dupatta', 'Shirt']
