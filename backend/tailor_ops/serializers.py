"""JSON shapes shared by the blueprints.

Keys are camelCase for the client, except inventory stock fields which keep their
stored snake_case names.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from tailor_ops.utils.timeutils import iso


def section_label(name: str) -> str:
    return name[:1].upper() + name[1:]


def material_json(m) -> Dict[str, Any]:
    return {
        'id': m.id,
        'piece': m.piece,
        'inventoryItemId': m.inventory_item_id,
        'inventoryItemName': m.inventory_item_name,
        'requiredQty': m.required_qty,
        'unit': m.unit,
    }


def timeline_json(t) -> Dict[str, Any]:
    body = {'id': t.id, 'action': t.action, 'user': t.user, 'timestamp': iso(t.timestamp)}
    if t.details:
        body['details'] = t.details
    return body


def section_json(s, materials: Optional[Iterable] = None) -> Dict[str, Any]:
    body = {
        'name': section_label(s.name),
        'status': s.status,
        'round': s.dyeing_round,
        'dyeingAcceptedAt': iso(s.dyeing_accepted_at),
        'dyeingAcceptedBy': s.dyeing_accepted_by,
        'dyeingAcceptedByName': s.dyeing_accepted_by_name,
        'dyeingStartedAt': iso(s.dyeing_started_at),
        'dyeingCompletedAt': iso(s.dyeing_completed_at),
        'dyeingRejectedAt': iso(s.dyeing_rejected_at),
        'dyeingRejectedBy': s.dyeing_rejected_by,
        'dyeingRejectedByName': s.dyeing_rejected_by_name,
        'dyeingRejectionReasonCode': s.dyeing_rejection_reason_code,
        'dyeingRejectionReason': s.dyeing_rejection_reason,
        'dyeingRejectionNotes': s.dyeing_rejection_notes,
        'previousFabricationUserId': s.previous_fabrication_user_id,
        'previousFabricationUserName': s.previous_fabrication_user_name,
    }
    if materials is not None:
        body['materials'] = [material_json(m) for m in materials]
    return body


def section_statuses_json(item) -> Dict[str, Dict[str, Any]]:
    return {s.name: {'status': s.status, 'dyeingRound': s.dyeing_round} for s in item.sections}


def packet_json(p) -> Dict[str, Any]:
    return {
        'id': p.id,
        'orderItemId': p.order_item_id,
        'status': p.status,
        'assignedTo': p.assigned_to,
        'assignedToName': p.assigned_to_name,
        'sectionsIncluded': list(p.sections_included or []),
        'invalidatedSections': list(p.invalidated_sections or []),
        'updatedAt': iso(p.updated_at),
    }


def order_item_json(item, detail: bool = False) -> Dict[str, Any]:
    body = {
        'id': item.id,
        'orderId': item.order_id,
        'productName': item.product_name,
        'productSku': item.product_sku,
        'size': item.size,
        'quantity': item.quantity,
        'status': item.status,
        'sectionStatuses': section_statuses_json(item),
        'updatedAt': iso(item.updated_at),
    }
    if detail:
        body['sections'] = [section_json(s, item.materials_for(s.name)) for s in item.sections]
        body['materialRequirements'] = [material_json(m) for m in item.materials]
        body['timeline'] = [timeline_json(t) for t in item.timeline]
        body['packets'] = [packet_json(p) for p in item.packets]
    return body


def order_summary(order) -> Dict[str, Any]:
    return {
        'orderId': order.id,
        'orderNumber': order.order_number,
        'customerName': order.customer_name,
        'fwdDate': iso(order.fwd_date),
        'priority': order.priority,
    }


def order_json(order, with_items: bool = False) -> Dict[str, Any]:
    body = {
        'id': order.id,
        'orderNumber': order.order_number,
        'customerName': order.customer_name,
        'customerEmail': order.customer_email,
        'customerPhone': order.customer_phone,
        'destination': order.destination,
        'priority': order.priority,
        'fwdDate': iso(order.fwd_date),
        'status': order.status,
        'dispatchData': order.dispatch_data,
        'completedAt': iso(order.completed_at),
        'completedBy': order.completed_by,
        'createdAt': iso(order.created_at),
        'updatedAt': iso(order.updated_at),
    }
    if with_items:
        body['items'] = [order_item_json(i) for i in order.items]
        body['itemCount'] = len(order.items)
    return body


def inventory_json(inv) -> Dict[str, Any]:
    return {
        'id': inv.id,
        'name': inv.name,
        'sku': inv.sku,
        'category': inv.category,
        'unit': inv.unit,
        'remaining_stock': inv.remaining_stock,
        'reorder_level': inv.reorder_level,
        'isLowStock': inv.is_low_stock,
        'updatedAt': iso(inv.updated_at),
    }


def user_json(u) -> Dict[str, Any]:
    return {
        'id': u.id,
        'name': u.name,
        'email': u.email,
        'phone': u.phone,
        'role': u.role,
        'permissions': list(u.permissions or []),
        'isActive': u.is_active,
    }


def labels(names: List[str]) -> str:
    return ', '.join(section_label(n) for n in names)
