from flask import Blueprint, request, abort
from tailor_ops import get_db
from tailor_ops.constants.statuses import OrderStatus
from tailor_ops.decorators.auth import require_permissions
from tailor_ops.models.order import Order, OrderItem
from tailor_ops.serializers import order_json, order_item_json
from tailor_ops.utils.filters import apply_filters
from tailor_ops.utils.listing import apply_pagination, build_list_payload
from tailor_ops.utils.sorting import apply_multi_sort

orders_bp = Blueprint('orders', __name__)

SORT_FIELDS = {
    'order_number': Order.order_number,
    'customer_name': Order.customer_name,
    'fwd_date': Order.fwd_date,
    'priority': Order.priority,
    'created_at': Order.created_at,
}


@orders_bp.get('')
@require_permissions('orders.view')
def list_orders():
    session = get_db()
    q = session.query(Order)
    filter_specs = {
        'status': {'op': lambda qu, v: qu.filter(Order.status == v), 'validate': lambda v: v in OrderStatus.ALL},
        'customer_name': {'op': lambda qu, v: qu.filter(Order.customer_name.ilike(f'%{v}%'))},
        'priority': {'op': lambda qu, v: qu.filter(Order.priority == v)},
    }
    q = apply_filters(q, filter_specs, request.args)
    q = apply_multi_sort(q, request.args.get('sort'), SORT_FIELDS, Order.id)
    paged_q, total, limit, offset = apply_pagination(q)
    rows = [order_json(o) for o in paged_q.all()]
    return build_list_payload(rows, total, limit, offset)


@orders_bp.get('/<int:order_id>')
@require_permissions('orders.view')
def get_order(order_id: int):
    order = get_db().get(Order, order_id)
    if not order:
        abort(404, description='Order not found')
    return order_json(order, with_items=True)


@orders_bp.get('/<int:order_id>/items/<int:item_id>')
@require_permissions('orders.view')
def get_order_item(order_id: int, item_id: int):
    """One item with its sections, materials, timeline and packets."""
    item = get_db().get(OrderItem, item_id)
    if not item or item.order_id != order_id:
        abort(404, description='Order item not found')
    return order_item_json(item, detail=True)
