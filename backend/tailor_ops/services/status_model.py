"""Aggregate order item status from the statuses of its sections.

Every handler that changes a section calls one of these reducers and persists the
result in the same commit, so list queries can filter on the stored item status.
"""
from __future__ import annotations
from typing import Iterable, Optional

from tailor_ops.constants.statuses import SectionStatus, OrderItemStatus


def derive_item_status(section_statuses: Iterable[str], current_status: Optional[str]) -> Optional[str]:
    statuses = list(section_statuses)
    if not statuses:
        return current_status
    if all(s == SectionStatus.DYEING_COMPLETED for s in statuses):
        return OrderItemStatus.DYEING_COMPLETED
    if all(s == SectionStatus.READY_FOR_PRODUCTION for s in statuses):
        return OrderItemStatus.READY_FOR_PRODUCTION
    # checked before the active-dyeing rule, which would otherwise shadow it
    if all(s == SectionStatus.READY_FOR_DYEING for s in statuses):
        return OrderItemStatus.READY_FOR_DYEING
    if all(s in SectionStatus.ACTIVE_DYEING for s in statuses):
        return OrderItemStatus.IN_DYEING
    if any(s in SectionStatus.ACTIVE_DYEING or s == SectionStatus.DYEING_COMPLETED for s in statuses):
        return OrderItemStatus.PARTIALLY_IN_DYEING
    return current_status


def derive_after_rejection(section_statuses: Iterable[str], current_status: Optional[str]) -> Optional[str]:
    """Reducer plus the re-routing applied once sections have been sent back to inventory check."""
    statuses = list(section_statuses)
    status = derive_item_status(statuses, current_status)
    in_dyeing = any(s in SectionStatus.IN_DYEING_AFTER_REJECT for s in statuses)
    in_packet_flow = any(s in SectionStatus.PACKET_FLOW for s in statuses)
    if in_dyeing and in_packet_flow:
        return OrderItemStatus.PARTIALLY_IN_DYEING
    if in_packet_flow and not in_dyeing:
        if SectionStatus.PENDING_INVENTORY_CHECK in statuses:
            return OrderItemStatus.INVENTORY_CHECK
        if SectionStatus.AWAITING_MATERIAL in statuses:
            return OrderItemStatus.AWAITING_MATERIAL
    return status


def all_sections_in(section_statuses: Iterable[str], status: str) -> bool:
    statuses = list(section_statuses)
    return bool(statuses) and all(s == status for s in statuses)


__all__ = ['derive_item_status', 'derive_after_rejection', 'all_sections_in']
