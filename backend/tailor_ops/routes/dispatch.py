from flask import Blueprint, request
from tailor_ops import get_db
from tailor_ops.decorators.auth import require_permissions
from tailor_ops.serializers import order_json
from tailor_ops.services import dispatch
from tailor_ops.services.policy import acting_user
from tailor_ops.utils.listing import envelope

dispatch_bp = Blueprint('dispatch', __name__)


@dispatch_bp.get('/queue')
@require_permissions('dispatch.view')
def queue():
    """Orders ready to ship, urgent first."""
    orders = dispatch.dispatch_queue(get_db())
    return envelope([order_json(o, with_items=True) for o in orders], total=len(orders))


@dispatch_bp.get('/dispatched')
@require_permissions('dispatch.view')
def dispatched():
    orders = dispatch.dispatched_orders(get_db())
    return envelope([order_json(o, with_items=True) for o in orders], total=len(orders))


@dispatch_bp.get('/completed')
@require_permissions('dispatch.view')
def completed():
    orders = dispatch.completed_orders(get_db())
    return envelope([order_json(o, with_items=True) for o in orders], total=len(orders))


@dispatch_bp.get('/stats')
@require_permissions('dispatch.view')
def stats():
    return envelope(dispatch.dispatch_stats(get_db()))


@dispatch_bp.post('/order/<int:order_id>/dispatch')
@require_permissions('dispatch.manage')
def dispatch_order(order_id: int):
    """Hand an order to the courier."""
    data = request.json or {}
    user = acting_user(data)
    order = dispatch.dispatch_order(
        get_db(), order_id, user,
        courier=data.get('courier'),
        tracking_number=data.get('trackingNumber'),
        dispatch_date=data.get('dispatchDate'),
        notes=data.get('notes'),
    )
    return envelope(order_json(order, with_items=True), f'Order {order.order_number} dispatched successfully')


@dispatch_bp.post('/order/<int:order_id>/complete')
@require_permissions('dispatch.manage')
def complete_order(order_id: int):
    """Confirm delivery and close the order."""
    user = acting_user(request.get_json(silent=True))
    order = dispatch.complete_order(get_db(), order_id, user)
    return envelope(order_json(order, with_items=True), f'Order {order.order_number} marked as completed')
