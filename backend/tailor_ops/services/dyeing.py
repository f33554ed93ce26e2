"""Section transitions of the dyeing stage.

Each operation validates every requested section before touching any of them, then
applies the changes, recomputes the item status and appends to the item timeline inside
a single unit of work. Section names are matched case-insensitively.

    READY_FOR_DYEING -> DYEING_ACCEPTED -> DYEING_IN_PROGRESS -> READY_FOR_PRODUCTION
    (complete is also allowed straight from DYEING_ACCEPTED)
    reject: READY_FOR_DYEING | DYEING_ACCEPTED | DYEING_IN_PROGRESS -> PENDING_INVENTORY_CHECK
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from flask import abort
from sqlalchemy import select

from tailor_ops.constants.statuses import SectionStatus, OrderItemStatus, PacketStatus, rejection_reason_label
from tailor_ops.errors import SectionStateError
from tailor_ops.models.inventory import InventoryItem
from tailor_ops.models.order import OrderItem, ItemSection, TimelineEntry
from tailor_ops.models.packet import Packet
from tailor_ops.serializers import labels
from tailor_ops.services.session import SessionUser
from tailor_ops.services.status_model import derive_item_status, derive_after_rejection, all_sections_in
from tailor_ops.utils.fsm import TransitionValidator
from tailor_ops.utils.timeutils import utcnow, iso
from tailor_ops.utils.uow import unit_of_work
from tailor_ops.utils.validation import normalize_section_names

log = logging.getLogger(__name__)

SYSTEM_USER = 'System'

DYEING_FSM = TransitionValidator({
    SectionStatus.READY_FOR_DYEING: {SectionStatus.DYEING_ACCEPTED, SectionStatus.PENDING_INVENTORY_CHECK},
    SectionStatus.DYEING_ACCEPTED: {
        SectionStatus.DYEING_IN_PROGRESS, SectionStatus.READY_FOR_PRODUCTION, SectionStatus.PENDING_INVENTORY_CHECK,
    },
    SectionStatus.DYEING_IN_PROGRESS: {SectionStatus.READY_FOR_PRODUCTION, SectionStatus.PENDING_INVENTORY_CHECK},
    SectionStatus.DYEING_COMPLETED: {SectionStatus.READY_FOR_PRODUCTION},
}, field_name='section status')


def load_item(db, item_id: int) -> OrderItem:
    item = db.get(OrderItem, item_id)
    if item is None:
        abort(404, description='Order item not found')
    return item


def _requested(sections) -> List[str]:
    names = normalize_section_names(sections if sections is not None else [])
    if not names:
        abort(400, description='sections are required')
    return names


def _invalid(item: OrderItem, names: Sequence[str], ok) -> List[str]:
    smap = item.section_map()
    return [n for n in names if n not in smap or not ok(smap[n])]


def _owned_by(section: ItemSection, user: SessionUser) -> bool:
    return section.dyeing_accepted_by is not None and section.dyeing_accepted_by == user.id


def _move(section: ItemSection, target: str, now: datetime):
    DYEING_FSM.assert_can_transition(section.status, target)
    section.status = target
    section.updated_at = now


def _log(item: OrderItem, action: str, user_name: str, now: datetime, details=None):
    item.timeline.append(TimelineEntry(action=action, user=user_name, timestamp=now, details=details))


def _touch(item: OrderItem, status: Optional[str], now: datetime):
    item.status = status
    item.updated_at = now


def accept_sections(db, item_id: int, user: SessionUser, sections) -> OrderItem:
    names = _requested(sections)
    item = load_item(db, item_id)
    invalid = _invalid(item, names, lambda s: s.status == SectionStatus.READY_FOR_DYEING)
    if invalid:
        log.warning('accept rejected on item %s: %s', item_id, invalid)
        raise SectionStateError(f'Sections not ready for dyeing: {labels(invalid)}', invalid)
    # one dyer per item while any of its sections is held
    held_by_other = [
        s for s in item.sections
        if s.status in SectionStatus.HELD_BY_DYER and s.dyeing_accepted_by not in (None, user.id)
    ]
    if held_by_other:
        abort(400, description='Another user has already accepted tasks for this order item')

    now = utcnow()
    smap = item.section_map()
    with unit_of_work(db):
        for name in names:
            section = smap[name]
            _move(section, SectionStatus.DYEING_ACCEPTED, now)
            section.dyeing_accepted_at = now
            section.dyeing_accepted_by = user.id
            section.dyeing_accepted_by_name = user.name
        _touch(item, derive_item_status(item.section_statuses(), item.status), now)
        _log(item, f'Dyeing accepted for sections: {labels(names)}', user.name, now)
    log.info('user %s accepted %s on item %s', user.id, names, item_id)
    return item


def start_sections(db, item_id: int, user: SessionUser, sections) -> OrderItem:
    names = _requested(sections)
    item = load_item(db, item_id)
    invalid = _invalid(item, names, lambda s: s.status == SectionStatus.DYEING_ACCEPTED and _owned_by(s, user))
    if invalid:
        log.warning('start rejected on item %s: %s', item_id, invalid)
        raise SectionStateError(f'Invalid sections: {labels(invalid)}', invalid)

    now = utcnow()
    smap = item.section_map()
    with unit_of_work(db):
        for name in names:
            section = smap[name]
            _move(section, SectionStatus.DYEING_IN_PROGRESS, now)
            section.dyeing_started_at = now
        _touch(item, derive_item_status(item.section_statuses(), item.status), now)
        _log(item, f'Dyeing started for sections: {labels(names)}', user.name, now)
    log.info('user %s started %s on item %s', user.id, names, item_id)
    return item


def complete_sections(db, item_id: int, user: SessionUser, sections) -> Tuple[OrderItem, bool]:
    """Move sections to READY_FOR_PRODUCTION; returns (item, all_sections_ready)."""
    names = _requested(sections)
    item = load_item(db, item_id)
    invalid = _invalid(item, names, lambda s: s.status in SectionStatus.HELD_BY_DYER and _owned_by(s, user))
    if invalid:
        log.warning('complete rejected on item %s: %s', item_id, invalid)
        raise SectionStateError(f'Invalid sections: {labels(invalid)}', invalid)

    now = utcnow()
    smap = item.section_map()
    with unit_of_work(db):
        for name in names:
            section = smap[name]
            _move(section, SectionStatus.READY_FOR_PRODUCTION, now)
            section.dyeing_completed_at = now
            section.dyeing_completed_by = user.id
        status = derive_item_status(item.section_statuses(), item.status)
        all_ready = all_sections_in(item.section_statuses(), SectionStatus.READY_FOR_PRODUCTION)
        if all_ready:
            status = OrderItemStatus.READY_FOR_PRODUCTION
        _touch(item, status, now)
        action = f'Dyeing completed for sections: {labels(names)}.'
        if all_ready:
            action += ' All sections ready for production.'
        _log(item, action, user.name, now)
    log.info('user %s completed %s on item %s (all ready: %s)', user.id, names, item_id, all_ready)
    return item, all_ready


@dataclass
class RejectionPlan:
    """Validated rejection of dyeing sections, applied as one unit of work.

    `build` performs every check and resolves every row the rejection will touch
    without mutating anything; `apply` then resets the sections, releases reserved
    stock, invalidates packet sections, re-derives the item status and writes the
    timeline entries.
    """
    item: OrderItem
    user: SessionUser
    sections: List[ItemSection]
    notes: str
    reason_code: Optional[str]
    reason: str
    stock: Dict[int, InventoryItem]
    packets: List[Packet]
    rejected: List[Dict[str, Any]] = field(default_factory=list)
    inventory_released: List[Dict[str, Any]] = field(default_factory=list)
    packets_invalidated: List[Dict[str, Any]] = field(default_factory=list)
    applied: bool = False

    @classmethod
    def build(cls, db, item_id: int, user: SessionUser, sections, notes: Optional[str],
              reason_code: Optional[str] = None) -> 'RejectionPlan':
        names = _requested(sections)
        notes = notes.strip() if isinstance(notes, str) else ''
        if not notes:
            abort(400, description='notes are required to reject sections')
        item = load_item(db, item_id)
        invalid = _invalid(item, names, lambda s: s.status in SectionStatus.REJECTABLE)
        if invalid:
            log.warning('reject refused on item %s: %s', item_id, invalid)
            raise SectionStateError(f'Cannot reject sections: {labels(invalid)}', invalid)

        smap = item.section_map()
        targets = [smap[n] for n in names]
        material_ids = {m.inventory_item_id for s in targets for m in item.materials_for(s.name)}
        stock = {}
        if material_ids:
            rows = db.execute(select(InventoryItem).where(InventoryItem.id.in_(sorted(material_ids)))).scalars()
            stock = {inv.id: inv for inv in rows}
        packets = sorted(item.packets, key=lambda p: p.id, reverse=True)
        return cls(item=item, user=user, sections=targets, notes=notes, reason_code=reason_code or None,
                   reason=rejection_reason_label(reason_code), stock=stock, packets=packets)

    def _packet_for(self, section_name: str) -> Optional[Packet]:
        for packet in self.packets:
            if packet.status != PacketStatus.INVALIDATED and packet.includes_section(section_name):
                return packet
        return None

    def _reset_section(self, section: ItemSection, now: datetime):
        _move(section, SectionStatus.PENDING_INVENTORY_CHECK, now)
        section.previous_fabrication_user_id = section.packet_created_by
        section.previous_fabrication_user_name = section.packet_created_by_name
        section.dyeing_accepted_at = None
        section.dyeing_accepted_by = None
        section.dyeing_accepted_by_name = None
        section.dyeing_started_at = None
        section.dyeing_completed_at = None
        section.dyeing_completed_by = None
        section.dyeing_rejected_at = now
        section.dyeing_rejected_by = self.user.id
        section.dyeing_rejected_by_name = self.user.name
        section.dyeing_rejection_reason_code = self.reason_code
        section.dyeing_rejection_reason = self.reason
        section.dyeing_rejection_notes = self.notes
        section.dyeing_round = (section.dyeing_round or 1) + 1
        section.inventory_check_result = None
        self.rejected.append({
            'name': section.display_name,
            'round': section.dyeing_round,
            'previousFabricationUser': section.previous_fabrication_user_name,
        })

    def _release_stock(self, section: ItemSection, now: datetime):
        for material in self.item.materials_for(section.name):
            inv = self.stock.get(material.inventory_item_id)
            if inv is None:
                log.warning('material %s references missing inventory item %s', material.id, material.inventory_item_id)
                continue
            inv.remaining_stock = (inv.remaining_stock or 0) + material.required_qty
            inv.updated_at = now
            self.inventory_released.append({
                'inventoryItemId': inv.id,
                'name': material.inventory_item_name or inv.name,
                'quantity': material.required_qty,
                'section': section.display_name,
            })

    def _invalidate_packet(self, section: ItemSection, now: datetime):
        packet = self._packet_for(section.name)
        if packet is None:
            return
        packet.sections_included = [s for s in (packet.sections_included or []) if s.lower() != section.name]
        packet.invalidated_sections = list(packet.invalidated_sections or []) + [{
            'section': section.display_name,
            'invalidatedAt': iso(now),
            'reason': f'Dyeing rejection: {self.reason}',
        }]
        if not packet.sections_included:
            packet.status = PacketStatus.INVALIDATED
        packet.updated_at = now
        self.packets_invalidated.append({'packetId': packet.id, 'section': section.display_name})

    def apply(self, now: Optional[datetime] = None) -> 'RejectionPlan':
        if self.applied:
            raise RuntimeError('rejection plan already applied')
        now = now or utcnow()
        for section in self.sections:
            self._reset_section(section, now)
            self._release_stock(section, now)
            self._invalidate_packet(section, now)
        _touch(self.item, derive_after_rejection(self.item.section_statuses(), self.item.status), now)
        names = labels([s.name for s in self.sections])
        _log(self.item, f'Dyeing rejected for sections: {names}. Reason: {self.reason}. Notes: {self.notes}',
             self.user.name, now)
        if self.inventory_released:
            _log(self.item, 'Inventory released back to stock for rejected sections', SYSTEM_USER, now,
                 details=list(self.inventory_released))
        self.applied = True
        return self


def reject_sections(db, item_id: int, user: SessionUser, sections, notes: Optional[str],
                    reason_code: Optional[str] = None) -> RejectionPlan:
    plan = RejectionPlan.build(db, item_id, user, sections, notes, reason_code)
    with unit_of_work(db):
        plan.apply()
    log.info('user %s rejected %s on item %s (released %d materials, %d packet sections invalidated)',
             user.id, [s.name for s in plan.sections], item_id, len(plan.inventory_released),
             len(plan.packets_invalidated))
    return plan


__all__ = [
    'DYEING_FSM', 'accept_sections', 'start_sections', 'complete_sections', 'reject_sections', 'RejectionPlan',
    'load_item',
]
