"""Status vocabularies for orders, order items, garment sections and packets.

Values are stored verbatim in the database; class attributes mirror the stored strings so
call sites read `SectionStatus.READY_FOR_DYEING` instead of bare literals.
"""
from __future__ import annotations


class OrderStatus:
    RECEIVED = 'RECEIVED'
    IN_PROGRESS = 'IN_PROGRESS'
    READY_FOR_DISPATCH = 'READY_FOR_DISPATCH'
    DISPATCHED = 'DISPATCHED'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'

    ALL = (RECEIVED, IN_PROGRESS, READY_FOR_DISPATCH, DISPATCHED, COMPLETED, CANCELLED)


class OrderItemStatus:
    RECEIVED = 'RECEIVED'
    AWAITING_CUSTOMER_FORM_APPROVAL = 'AWAITING_CUSTOMER_FORM_APPROVAL'
    FABRICATION_BESPOKE = 'FABRICATION_BESPOKE'
    INVENTORY_CHECK = 'INVENTORY_CHECK'
    AWAITING_MATERIAL = 'AWAITING_MATERIAL'
    CREATE_PACKET = 'CREATE_PACKET'
    PARTIAL_CREATE_PACKET = 'PARTIAL_CREATE_PACKET'
    PACKET_CHECK = 'PACKET_CHECK'
    PARTIAL_PACKET_CHECK = 'PARTIAL_PACKET_CHECK'
    READY_FOR_DYEING = 'READY_FOR_DYEING'
    PARTIALLY_IN_DYEING = 'PARTIALLY_IN_DYEING'
    IN_DYEING = 'IN_DYEING'
    DYEING_COMPLETED = 'DYEING_COMPLETED'
    READY_FOR_PRODUCTION = 'READY_FOR_PRODUCTION'
    IN_PRODUCTION = 'IN_PRODUCTION'
    PARTIAL_IN_PRODUCTION = 'PARTIAL_IN_PRODUCTION'
    PRODUCTION_COMPLETED = 'PRODUCTION_COMPLETED'
    QUALITY_ASSURANCE = 'QUALITY_ASSURANCE'
    READY_FOR_CLIENT_APPROVAL = 'READY_FOR_CLIENT_APPROVAL'
    AWAITING_CLIENT_APPROVAL = 'AWAITING_CLIENT_APPROVAL'
    REWORK_REQUIRED = 'REWORK_REQUIRED'
    CLIENT_APPROVED = 'CLIENT_APPROVED'
    READY_FOR_DISPATCH = 'READY_FOR_DISPATCH'
    DISPATCHED = 'DISPATCHED'
    COMPLETED = 'COMPLETED'

    ALL = (
        RECEIVED, AWAITING_CUSTOMER_FORM_APPROVAL, FABRICATION_BESPOKE, INVENTORY_CHECK, AWAITING_MATERIAL,
        CREATE_PACKET, PARTIAL_CREATE_PACKET, PACKET_CHECK, PARTIAL_PACKET_CHECK, READY_FOR_DYEING,
        PARTIALLY_IN_DYEING, IN_DYEING, DYEING_COMPLETED, READY_FOR_PRODUCTION, IN_PRODUCTION,
        PARTIAL_IN_PRODUCTION, PRODUCTION_COMPLETED, QUALITY_ASSURANCE, READY_FOR_CLIENT_APPROVAL,
        AWAITING_CLIENT_APPROVAL, REWORK_REQUIRED, CLIENT_APPROVED, READY_FOR_DISPATCH, DISPATCHED, COMPLETED,
    )


class SectionStatus:
    PENDING_INVENTORY_CHECK = 'PENDING_INVENTORY_CHECK'
    INVENTORY_PASSED = 'INVENTORY_PASSED'
    AWAITING_MATERIAL = 'AWAITING_MATERIAL'
    CREATE_PACKET = 'CREATE_PACKET'
    PACKET_CREATED = 'PACKET_CREATED'
    PACKET_VERIFIED = 'PACKET_VERIFIED'
    READY_FOR_DYEING = 'READY_FOR_DYEING'
    DYEING_ACCEPTED = 'DYEING_ACCEPTED'
    DYEING_IN_PROGRESS = 'DYEING_IN_PROGRESS'
    DYEING_COMPLETED = 'DYEING_COMPLETED'
    READY_FOR_PRODUCTION = 'READY_FOR_PRODUCTION'
    IN_PRODUCTION = 'IN_PRODUCTION'
    PRODUCTION_COMPLETED = 'PRODUCTION_COMPLETED'
    QA_PENDING = 'QA_PENDING'
    QA_APPROVED = 'QA_APPROVED'
    QA_REJECTED = 'QA_REJECTED'
    READY_FOR_CLIENT_APPROVAL = 'READY_FOR_CLIENT_APPROVAL'
    AWAITING_CLIENT_APPROVAL = 'AWAITING_CLIENT_APPROVAL'
    CLIENT_APPROVED = 'CLIENT_APPROVED'
    COMPLETED = 'COMPLETED'

    ALL = (
        PENDING_INVENTORY_CHECK, INVENTORY_PASSED, AWAITING_MATERIAL, CREATE_PACKET, PACKET_CREATED,
        PACKET_VERIFIED, READY_FOR_DYEING, DYEING_ACCEPTED, DYEING_IN_PROGRESS, DYEING_COMPLETED,
        READY_FOR_PRODUCTION, IN_PRODUCTION, PRODUCTION_COMPLETED, QA_PENDING, QA_APPROVED, QA_REJECTED,
        READY_FOR_CLIENT_APPROVAL, AWAITING_CLIENT_APPROVAL, CLIENT_APPROVED, COMPLETED,
    )

    # groupings used by the item status reducer
    ACTIVE_DYEING = frozenset({READY_FOR_DYEING, DYEING_ACCEPTED, DYEING_IN_PROGRESS})
    HELD_BY_DYER = frozenset({DYEING_ACCEPTED, DYEING_IN_PROGRESS})
    REJECTABLE = ACTIVE_DYEING
    IN_DYEING_AFTER_REJECT = frozenset({DYEING_ACCEPTED, DYEING_IN_PROGRESS, DYEING_COMPLETED})
    PACKET_FLOW = frozenset({PENDING_INVENTORY_CHECK, AWAITING_MATERIAL, CREATE_PACKET, PACKET_CREATED, PACKET_VERIFIED})


class PacketStatus:
    PENDING = 'PENDING'
    ASSIGNED = 'ASSIGNED'
    IN_PROGRESS = 'IN_PROGRESS'
    COMPLETED = 'COMPLETED'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'
    INVALIDATED = 'INVALIDATED'

    ALL = (PENDING, ASSIGNED, IN_PROGRESS, COMPLETED, APPROVED, REJECTED, INVALIDATED)


class Priority:
    URGENT = 'URGENT'
    HIGH = 'HIGH'
    NORMAL = 'NORMAL'
    LOW = 'LOW'

    ALL = (URGENT, HIGH, NORMAL, LOW)
    RANK = {URGENT: 0, HIGH: 1, NORMAL: 2, LOW: 3}


DYEING_REJECTION_REASONS = {
    'COLOR_MISMATCH': {'label': 'Color does not match the approved shade'},
    'FABRIC_DAMAGE': {'label': 'Fabric damaged or defective'},
    'WRONG_MATERIAL': {'label': 'Wrong material supplied in packet'},
    'INSUFFICIENT_MATERIAL': {'label': 'Insufficient material for dyeing'},
    'MEASUREMENT_ISSUE': {'label': 'Cut pieces do not match measurements'},
    'OTHER': {'label': 'Other'},
}

UNSPECIFIED_REASON = 'Unspecified reason'


def rejection_reason_label(code) -> str:
    if code and code in DYEING_REJECTION_REASONS:
        return DYEING_REJECTION_REASONS[code]['label']
    return UNSPECIFIED_REASON


__all__ = [
    'OrderStatus', 'OrderItemStatus', 'SectionStatus', 'PacketStatus', 'Priority',
    'DYEING_REJECTION_REASONS', 'UNSPECIFIED_REASON', 'rejection_reason_label',
]
