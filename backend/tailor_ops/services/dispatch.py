"""Order dispatch lifecycle: READY_FOR_DISPATCH -> DISPATCHED -> COMPLETED."""
from __future__ import annotations
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from flask import abort
from sqlalchemy import select, func

from tailor_ops.constants.statuses import OrderStatus, OrderItemStatus, Priority
from tailor_ops.models.order import Order, TimelineEntry
from tailor_ops.services.session import SessionUser
from tailor_ops.utils.fsm import TransitionValidator
from tailor_ops.utils.timeutils import utcnow, iso, parse_date
from tailor_ops.utils.uow import unit_of_work

log = logging.getLogger(__name__)

ORDER_FSM = TransitionValidator({
    OrderStatus.RECEIVED: {OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED},
    OrderStatus.IN_PROGRESS: {OrderStatus.READY_FOR_DISPATCH, OrderStatus.CANCELLED},
    OrderStatus.READY_FOR_DISPATCH: {OrderStatus.DISPATCHED, OrderStatus.CANCELLED},
    OrderStatus.DISPATCHED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}, field_name='order status')


def load_order(db, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        abort(404, description='Order not found')
    return order


def _require_status(order: Order, target: str, expected: str):
    ORDER_FSM.assert_can_transition(
        order.status, target,
        description=f'Order must be in {expected} status. Current: {order.status}',
    )


def _set_items(order: Order, status: str, action: str, user_name: str, now):
    for item in order.items:
        item.status = status
        item.updated_at = now
        item.timeline.append(TimelineEntry(action=action, user=user_name, timestamp=now))


def dispatch_order(db, order_id: int, user: SessionUser, courier: Optional[str], tracking_number: Optional[str],
                   dispatch_date: Optional[str], notes: Optional[str] = None) -> Order:
    order = load_order(db, order_id)
    _require_status(order, OrderStatus.DISPATCHED, OrderStatus.READY_FOR_DISPATCH)
    if not courier or not tracking_number or not dispatch_date:
        abort(400, description='Courier, tracking number, and dispatch date are required')
    try:
        shipped_on = parse_date(str(dispatch_date))
    except ValueError:
        abort(400, description='dispatchDate must be an ISO date (YYYY-MM-DD)')

    now = utcnow()
    with unit_of_work(db):
        order.status = OrderStatus.DISPATCHED
        order.dispatch_data = {
            'courier': courier,
            'trackingNumber': tracking_number,
            'dispatchDate': shipped_on.isoformat(),
            'notes': notes or '',
            'dispatchedBy': user.id,
            'dispatchedByName': user.name,
            'dispatchedAt': iso(now),
        }
        order.updated_at = now
        _set_items(order, OrderItemStatus.DISPATCHED,
                   f'Order dispatched via {courier}, tracking: {tracking_number}', user.name, now)
    log.info('order %s dispatched via %s (%s) by user %s', order.order_number, courier, tracking_number, user.id)
    return order


def complete_order(db, order_id: int, user: SessionUser) -> Order:
    order = load_order(db, order_id)
    _require_status(order, OrderStatus.COMPLETED, OrderStatus.DISPATCHED)
    now = utcnow()
    with unit_of_work(db):
        order.status = OrderStatus.COMPLETED
        order.completed_at = now
        order.completed_by = user.id
        order.updated_at = now
        _set_items(order, OrderItemStatus.COMPLETED, 'Order marked as completed, delivery confirmed', user.name, now)
    log.info('order %s completed by user %s', order.order_number, user.id)
    return order


def _orders_in(db, status: str) -> List[Order]:
    return list(db.execute(select(Order).where(Order.status == status).order_by(Order.id.asc())).scalars())


def dispatch_queue(db) -> List[Order]:
    """Ready orders, urgent first, then by forward date (undated last)."""
    orders = _orders_in(db, OrderStatus.READY_FOR_DISPATCH)
    return sorted(orders, key=lambda o: (o.priority != Priority.URGENT, o.fwd_date or date.max, o.id))


def dispatched_orders(db) -> List[Order]:
    orders = _orders_in(db, OrderStatus.DISPATCHED)
    return sorted(orders, key=lambda o: (o.dispatch_data or {}).get('dispatchedAt') or iso(o.updated_at) or '', reverse=True)


def completed_orders(db) -> List[Order]:
    orders = _orders_in(db, OrderStatus.COMPLETED)
    return sorted(orders, key=lambda o: o.updated_at, reverse=True)


def dispatch_stats(db, today: Optional[date] = None) -> Dict[str, Any]:
    today_iso = (today or utcnow().date()).isoformat()

    def count(status: str) -> int:
        return db.execute(select(func.count(Order.id)).where(Order.status == status)).scalar_one()

    shipped = db.execute(
        select(Order.dispatch_data).where(Order.status.in_((OrderStatus.DISPATCHED, OrderStatus.COMPLETED)))
    ).scalars()
    return {
        'readyForDispatch': count(OrderStatus.READY_FOR_DISPATCH),
        'dispatchedToday': sum(1 for data in shipped if (data or {}).get('dispatchDate') == today_iso),
        'totalDispatched': count(OrderStatus.DISPATCHED),
        'totalCompleted': count(OrderStatus.COMPLETED),
    }


__all__ = [
    'ORDER_FSM', 'dispatch_order', 'complete_order', 'dispatch_queue', 'dispatched_orders', 'completed_orders',
    'dispatch_stats', 'load_order',
]
