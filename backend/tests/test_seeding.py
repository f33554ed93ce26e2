from sqlalchemy import select
from tailor_ops import get_db
from tailor_ops.constants.permissions import ROLE_TEMPLATES, get_template_permissions
from tailor_ops.models.authz import User
from tailor_ops.models.order import Order
from tailor_ops.seeding import seed_demo, demo_email, role_summary


def test_seed_is_idempotent(app_ctx):
    session = get_db()
    first = seed_demo(session)
    session.commit()
    second = seed_demo(session)
    session.commit()
    assert second['users'] == 0
    assert second['orders'] == 0
    assert first['inventory'] == second['inventory']

    dyer = session.execute(select(User).where(User.email == demo_email('DYEING'))).scalar_one()
    assert dyer.permissions == get_template_permissions('DYEING')
    assert dyer.verify_password('ChangeMe123!')
    assert session.execute(select(User).where(User.email == demo_email('CUSTOM'))).scalar_one_or_none() is None

    order = session.execute(select(Order).where(Order.order_number == 'ORD-1001')).scalar_one()
    item = order.items[0]
    assert [s.name for s in item.sections] == ['shirt', 'dupatta', 'trouser']
    assert item.packets[0].sections_included == ['shirt', 'dupatta', 'trouser']

    roles = {row[0] for row in role_summary(session)}
    assert set(ROLE_TEMPLATES) - {'CUSTOM'} <= roles


def test_seeded_dyer_can_work_the_queue(client, app_ctx):
    session = get_db()
    seed_demo(session)
    session.commit()
    resp = client.post('/auth/login', json={'email': demo_email('DYEING'), 'password': 'ChangeMe123!'})
    headers = {'Authorization': f"Bearer {resp.get_json()['accessToken']}"}
    tasks = client.get('/dyeing/available-tasks', headers=headers).get_json()['data']
    assert 'ORD-1001' in [t['orderNumber'] for t in tasks]
