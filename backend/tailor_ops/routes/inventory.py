from __future__ import annotations
import logging
from flask import Blueprint, request, abort
from sqlalchemy import select
from tailor_ops import get_db
from tailor_ops.models.inventory import InventoryItem
from tailor_ops.decorators.auth import require_permissions
from tailor_ops.decorators.audit import audit_log
from tailor_ops.serializers import inventory_json
from tailor_ops.utils.filters import apply_filters, parse_bool
from tailor_ops.utils.listing import apply_pagination, build_list_payload
from tailor_ops.utils.sorting import apply_multi_sort
from tailor_ops.utils.validation import require_fields, parse_number

log = logging.getLogger(__name__)

inv_bp = Blueprint('inventory', __name__)

SORT_FIELDS = {
    'name': InventoryItem.name,
    'sku': InventoryItem.sku,
    'category': InventoryItem.category,
    'remaining_stock': InventoryItem.remaining_stock,
    'updated_at': InventoryItem.updated_at,
}


def _low_stock(qu, flag: bool):
    if flag:
        return qu.filter(InventoryItem.remaining_stock < InventoryItem.reorder_level)
    return qu.filter(InventoryItem.remaining_stock >= InventoryItem.reorder_level)


@inv_bp.get('/items')
@require_permissions('inventory.view')
def list_items():
    session = get_db()
    q = session.query(InventoryItem)
    filter_specs = {
        'category': {'op': lambda qu, v: qu.filter(InventoryItem.category == v)},
        'sku': {'op': lambda qu, v: qu.filter(InventoryItem.sku == v)},
        'low_stock': {'coerce': parse_bool, 'op': _low_stock},
    }
    q = apply_filters(q, filter_specs, request.args)
    q = apply_multi_sort(q, request.args.get('sort'), SORT_FIELDS, InventoryItem.id)
    paged_q, total, limit, offset = apply_pagination(q)
    rows = [inventory_json(i) for i in paged_q.all()]
    return build_list_payload(rows, total, limit, offset)


@inv_bp.get('/items/<int:item_id>')
@require_permissions('inventory.view')
def get_item(item_id: int):
    inv = get_db().get(InventoryItem, item_id)
    if not inv:
        abort(404, description='Inventory item not found')
    return inventory_json(inv)


@inv_bp.post('/items')
@require_permissions('inventory.create')
@audit_log('INVENTORY.CREATE', entity='InventoryItem', entity_id_key='id', meta_keys=['name', 'sku'])
def create_item():
    session = get_db()
    data = request.json or {}
    name, sku = require_fields(data, 'name', 'sku', message='name, sku required')
    if session.execute(select(InventoryItem).where(InventoryItem.sku == sku)).scalar_one_or_none():
        abort(400, description='sku exists')
    inv = InventoryItem(
        name=name,
        sku=sku,
        category=data.get('category'),
        unit=data.get('unit') or 'meter',
        remaining_stock=parse_number(data.get('remaining_stock', 0), 'remaining_stock'),
        reorder_level=parse_number(data.get('reorder_level', 0), 'reorder_level'),
    )
    session.add(inv)
    session.commit()
    return inventory_json(inv), 201


def _load_for_update(item_id: int) -> InventoryItem:
    inv = get_db().get(InventoryItem, item_id)
    if not inv:
        abort(404, description='Inventory item not found')
    return inv


def _prefetch_stock(item_id):
    inv = get_db().get(InventoryItem, item_id)
    if not inv:
        return {}
    return {'remaining_stock': inv.remaining_stock}


@inv_bp.post('/items/<int:item_id>/stock-in')
@require_permissions('inventory.stock_in')
@audit_log(
    'INVENTORY.STOCK_IN',
    entity='InventoryItem',
    entity_id_key='id',
    diff_keys=['remaining_stock'],
    pre_fetch=lambda a, kw: _prefetch_stock(kw.get('item_id')),
    meta_keys=['remaining_stock'],
)
def stock_in(item_id: int):
    session = get_db()
    inv = _load_for_update(item_id)
    data = request.json or {}
    qty = parse_number(data.get('quantity'), 'quantity', positive=True)
    inv.remaining_stock = (inv.remaining_stock or 0) + qty
    session.commit()
    log.info('stock-in %s %s on %s', qty, inv.unit, inv.sku)
    return inventory_json(inv)


@inv_bp.post('/items/<int:item_id>/stock-out')
@require_permissions('inventory.stock_out')
@audit_log(
    'INVENTORY.STOCK_OUT',
    entity='InventoryItem',
    entity_id_key='id',
    diff_keys=['remaining_stock'],
    pre_fetch=lambda a, kw: _prefetch_stock(kw.get('item_id')),
    meta_keys=['remaining_stock'],
)
def stock_out(item_id: int):
    session = get_db()
    inv = _load_for_update(item_id)
    data = request.json or {}
    qty = parse_number(data.get('quantity'), 'quantity', positive=True)
    if qty > (inv.remaining_stock or 0):
        abort(400, description=f'Insufficient stock: {inv.remaining_stock} {inv.unit} available')
    inv.remaining_stock = (inv.remaining_stock or 0) - qty
    session.commit()
    log.info('stock-out %s %s on %s', qty, inv.unit, inv.sku)
    return inventory_json(inv)


@inv_bp.get('/alerts/low-stock')
@require_permissions('inventory.view')
def low_stock_alerts():
    """Items whose remaining stock is under their reorder level."""
    session = get_db()
    rows = session.execute(
        select(InventoryItem)
        .where(InventoryItem.remaining_stock < InventoryItem.reorder_level)
        .order_by(InventoryItem.remaining_stock.asc(), InventoryItem.id.asc())
    ).scalars().all()
    return {'data': [inventory_json(i) for i in rows], 'total': len(rows)}
