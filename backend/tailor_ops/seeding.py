"""Idempotent demo data: one user per role template, fabric stock, and orders whose
items sit at different points of the dyeing and dispatch flow.

Every `ensure_*` helper looks rows up by a natural key (email, sku, order number) and
only inserts what is missing; callers own the commit.
"""
from __future__ import annotations
import logging
from datetime import date, timedelta
from typing import Dict, List

from sqlalchemy import select

from tailor_ops.constants.permissions import ROLE_TEMPLATES, get_template_permissions, validate_permission_keys
from tailor_ops.constants.statuses import OrderStatus, OrderItemStatus, SectionStatus, PacketStatus, Priority
from tailor_ops.models.authz import User
from tailor_ops.models.inventory import InventoryItem
from tailor_ops.models.order import Order, OrderItem, ItemSection, MaterialRequirement, TimelineEntry
from tailor_ops.models.packet import Packet

log = logging.getLogger(__name__)

DEMO_DOMAIN = 'tailor.local'
DEFAULT_PASSWORD = 'ChangeMe123!'

DEMO_INVENTORY = [
    {'sku': 'FAB-RAW-SILK', 'name': 'Raw Silk', 'category': 'FABRIC', 'unit': 'meter', 'remaining_stock': 120, 'reorder_level': 20},
    {'sku': 'FAB-CHIFFON', 'name': 'Pure Chiffon', 'category': 'FABRIC', 'unit': 'meter', 'remaining_stock': 80, 'reorder_level': 25},
    {'sku': 'FAB-ORGANZA', 'name': 'Organza', 'category': 'FABRIC', 'unit': 'meter', 'remaining_stock': 8, 'reorder_level': 15},
    {'sku': 'ADA-ZARI-LACE', 'name': 'Zari Lace', 'category': 'ADDA_MATERIAL', 'unit': 'meter', 'remaining_stock': 40, 'reorder_level': 10},
]

# (piece, sku, qty)
SUIT_MATERIALS = [
    ('shirt', 'FAB-RAW-SILK', 3.0),
    ('dupatta', 'FAB-CHIFFON', 2.5),
    ('trouser', 'FAB-RAW-SILK', 2.0),
]


def demo_email(role: str) -> str:
    return f"{role.lower().replace('_', '.')}@{DEMO_DOMAIN}"


def ensure_users(session, password: str = DEFAULT_PASSWORD) -> int:
    created = 0
    for role in ROLE_TEMPLATES:
        if role == 'CUSTOM':
            continue
        email = demo_email(role)
        if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
            continue
        user = User(
            name=ROLE_TEMPLATES[role]['label'],
            email=email,
            role=role,
            permissions=validate_permission_keys(get_template_permissions(role)),
            is_active=True,
        )
        user.set_password(password)
        session.add(user)
        created += 1
    session.flush()
    return created


def ensure_inventory(session) -> Dict[str, InventoryItem]:
    existing = {i.sku: i for i in session.execute(select(InventoryItem)).scalars()}
    for spec in DEMO_INVENTORY:
        if spec['sku'] not in existing:
            inv = InventoryItem(**spec)
            session.add(inv)
            existing[spec['sku']] = inv
    session.flush()
    return existing


def _suit_item(stock: Dict[str, InventoryItem], section_status: str, packet_creator: User = None) -> OrderItem:
    item = OrderItem(product_name='Embroidered Raw Silk Suit', product_sku='SUIT-RS-01', size='M', quantity=1)
    for piece, sku, qty in SUIT_MATERIALS:
        inv = stock[sku]
        item.sections.append(ItemSection(
            name=piece,
            status=section_status,
            packet_created_by=packet_creator.id if packet_creator else None,
            packet_created_by_name=packet_creator.name if packet_creator else None,
        ))
        item.materials.append(MaterialRequirement(
            piece=piece, inventory_item_id=inv.id, inventory_item_name=inv.name, required_qty=qty, unit=inv.unit,
        ))
    return item


def ensure_orders(session, stock: Dict[str, InventoryItem]) -> int:
    creator = session.execute(select(User).where(User.email == demo_email('PACKET_CREATOR'))).scalar_one_or_none()
    today = date.today()
    plans: List[dict] = [
        {'order_number': 'ORD-1001', 'customer_name': 'Ayesha Khan', 'priority': Priority.URGENT,
         'fwd_date': today + timedelta(days=3), 'status': OrderStatus.IN_PROGRESS,
         'section_status': SectionStatus.READY_FOR_DYEING, 'item_status': OrderItemStatus.READY_FOR_DYEING},
        {'order_number': 'ORD-1002', 'customer_name': 'Sara Malik', 'priority': Priority.NORMAL,
         'fwd_date': today + timedelta(days=10), 'status': OrderStatus.IN_PROGRESS,
         'section_status': SectionStatus.READY_FOR_DYEING, 'item_status': OrderItemStatus.READY_FOR_DYEING},
        {'order_number': 'ORD-1003', 'customer_name': 'Hina Raza', 'priority': Priority.HIGH,
         'fwd_date': today + timedelta(days=1), 'status': OrderStatus.READY_FOR_DISPATCH,
         'section_status': SectionStatus.COMPLETED, 'item_status': OrderItemStatus.READY_FOR_DISPATCH},
    ]
    created = 0
    for plan in plans:
        if session.execute(select(Order).where(Order.order_number == plan['order_number'])).scalar_one_or_none():
            continue
        order = Order(
            order_number=plan['order_number'],
            customer_name=plan['customer_name'],
            customer_email=f"{plan['customer_name'].split()[0].lower()}@example.com",
            destination='Lahore',
            priority=plan['priority'],
            fwd_date=plan['fwd_date'],
            status=plan['status'],
        )
        item = _suit_item(stock, plan['section_status'], creator)
        item.status = plan['item_status']
        item.timeline.append(TimelineEntry(action='Order item created', user='System'))
        order.items.append(item)
        session.add(order)
        session.flush()
        if plan['section_status'] == SectionStatus.READY_FOR_DYEING:
            session.add(Packet(
                order_item_id=item.id,
                status=PacketStatus.APPROVED,
                assigned_to=creator.id if creator else None,
                assigned_to_name=creator.name if creator else None,
                sections_included=[piece for piece, _sku, _qty in SUIT_MATERIALS],
            ))
        created += 1
    session.flush()
    return created


def seed_demo(session, password: str = DEFAULT_PASSWORD) -> Dict[str, int]:
    users = ensure_users(session, password)
    stock = ensure_inventory(session)
    orders = ensure_orders(session, stock)
    log.info('seeded %d users, %d orders', users, orders)
    return {'users': users, 'inventory': len(stock), 'orders': orders}


def role_summary(session) -> List[tuple]:
    rows = []
    for user in session.execute(select(User).order_by(User.id.asc())).scalars():
        perms = sorted(user.permissions or [])
        rows.append((user.role, user.email, len(perms)))
    return rows


__all__ = ['seed_demo', 'ensure_users', 'ensure_inventory', 'ensure_orders', 'role_summary', 'demo_email']
