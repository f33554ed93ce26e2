"""Read-side views of the dyeing queue: available work, a dyer's own tasks, history and
dashboard counters."""
from __future__ import annotations
from datetime import datetime, date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func

from tailor_ops.constants.statuses import SectionStatus, Priority
from tailor_ops.models.order import Order, OrderItem, ItemSection
from tailor_ops.serializers import material_json, section_json, section_label, timeline_json, order_summary, packet_json
from tailor_ops.utils.sorting import sort_records
from tailor_ops.utils.timeutils import iso, utcnow

FAR_FUTURE = date(2099, 12, 31)
COMPLETED_SECTION_STATUSES = (SectionStatus.DYEING_COMPLETED, SectionStatus.READY_FOR_PRODUCTION)


def _items_with_sections(db, *criteria, priority: Optional[str] = None) -> List[OrderItem]:
    q = (
        select(OrderItem)
        .join(ItemSection, ItemSection.order_item_id == OrderItem.id)
        .join(Order, Order.id == OrderItem.order_id)
        .where(*criteria)
        .distinct()
        .order_by(OrderItem.id.asc())
    )
    if priority:
        q = q.where(Order.priority == priority)
    return list(db.execute(q).scalars())


def _brief(section: ItemSection) -> Dict[str, Any]:
    return {'name': section_label(section.name), 'status': section.status}


def _task_base(item: OrderItem) -> Dict[str, Any]:
    body = order_summary(item.order)
    body.update({
        'orderItemId': item.id,
        'productName': item.product_name,
        'productSku': item.product_sku,
        'size': item.size,
        'quantity': item.quantity,
        'status': item.status,
    })
    return body


def _priority_rank(task) -> int:
    return Priority.RANK.get(task.get('priority'), len(Priority.RANK))


def _fwd_date(task) -> date:
    raw = task.get('fwdDate')
    return date.fromisoformat(raw) if raw else FAR_FUTURE


AVAILABLE_SORT = {
    'fwdDate': _fwd_date,
    'priority': _priority_rank,
    'createdAt': lambda t: t['createdAt'] or '',
}


def available_tasks(db, priority: Optional[str] = None, sort_by: str = 'fwdDate', sort_order: str = 'asc') -> List[Dict[str, Any]]:
    """Items with at least one section waiting for a dyer."""
    items = _items_with_sections(db, ItemSection.status == SectionStatus.READY_FOR_DYEING, priority=priority)
    tasks = []
    for item in items:
        task = _task_base(item)
        task['readyForDyeingSections'] = [
            {
                'name': section_label(s.name),
                'status': s.status,
                'round': s.dyeing_round,
                'materials': [material_json(m) for m in item.materials_for(s.name)],
            }
            for s in item.sections if s.status == SectionStatus.READY_FOR_DYEING
        ]
        task['otherSections'] = [_brief(s) for s in item.sections if s.status != SectionStatus.READY_FOR_DYEING]
        task['createdAt'] = iso(item.created_at)
        tasks.append(task)
    return sort_records(tasks, AVAILABLE_SORT, sort_by, sort_order)


MY_SORT = {
    'fwdDate': _fwd_date,
    'priority': _priority_rank,
    'acceptedAt': lambda t: t['acceptedAt'] or '',
}


def my_tasks(db, user_id: int, sort_by: str = 'fwdDate', sort_order: str = 'asc') -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    items = _items_with_sections(
        db,
        ItemSection.dyeing_accepted_by == user_id,
        ItemSection.status.in_(tuple(SectionStatus.HELD_BY_DYER)),
    )
    mine_statuses = SectionStatus.HELD_BY_DYER | {SectionStatus.DYEING_COMPLETED}
    tasks = []
    for item in items:
        mine = [s for s in item.sections if s.dyeing_accepted_by == user_id and s.status in mine_statuses]
        task = _task_base(item)
        task['mySections'] = [
            {
                'name': section_label(s.name),
                'status': s.status,
                'round': s.dyeing_round,
                'acceptedAt': iso(s.dyeing_accepted_at),
                'startedAt': iso(s.dyeing_started_at),
                'completedAt': iso(s.dyeing_completed_at),
                'materials': [material_json(m) for m in item.materials_for(s.name)],
            }
            for s in mine
        ]
        task['otherSections'] = [_brief(s) for s in item.sections if s.dyeing_accepted_by != user_id]
        accepted = [s.dyeing_accepted_at for s in mine if s.dyeing_accepted_at]
        task['acceptedAt'] = iso(min(accepted)) if accepted else None
        tasks.append(task)
    tasks = sort_records(tasks, MY_SORT, sort_by, sort_order)
    meta = {
        'total': len(tasks),
        'inProgress': sum(1 for t in tasks if any(s['status'] == SectionStatus.DYEING_IN_PROGRESS for s in t['mySections'])),
        'accepted': sum(1 for t in tasks if any(s['status'] == SectionStatus.DYEING_ACCEPTED for s in t['mySections'])),
    }
    return tasks, meta


def completed_tasks(db, user_id: Optional[int] = None, page: int = 1, limit: int = 10,
                    start: Optional[datetime] = None, end: Optional[datetime] = None) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Dyeing history, newest completion first, filtered on each item's latest completion."""
    criteria = [ItemSection.status.in_(COMPLETED_SECTION_STATUSES), ItemSection.dyeing_completed_at.isnot(None)]
    if user_id is not None:
        criteria.append(ItemSection.dyeing_completed_by == user_id)
    rows = []
    for item in _items_with_sections(db, *criteria):
        done = [
            s for s in item.sections
            if s.dyeing_completed_at is not None and (user_id is None or s.dyeing_completed_by == user_id)
        ]
        latest = max(s.dyeing_completed_at for s in done)
        if start and latest < start:
            continue
        if end and latest > end:
            continue
        rows.append((latest, item, done))
    rows.sort(key=lambda r: r[0], reverse=True)
    total = len(rows)
    offset = (page - 1) * limit
    data = []
    for latest, item, done in rows[offset:offset + limit]:
        body = order_summary(item.order)
        body.update({
            'orderItemId': item.id,
            'productName': item.product_name,
            'completedSections': [
                {
                    'name': section_label(s.name),
                    'completedAt': iso(s.dyeing_completed_at),
                    'durationSeconds': (
                        int((s.dyeing_completed_at - s.dyeing_started_at).total_seconds())
                        if s.dyeing_started_at else None
                    ),
                }
                for s in done
            ],
            'completedAt': iso(latest),
        })
        data.append(body)
    meta = {'total': total, 'page': page, 'limit': limit, 'totalPages': (total + limit - 1) // limit}
    return data, meta


def task_detail(item: OrderItem) -> Dict[str, Any]:
    body = _task_base(item)
    body['sections'] = [section_json(s, item.materials_for(s.name)) for s in item.sections]
    body['timeline'] = [timeline_json(t) for t in item.timeline]
    body['packets'] = [packet_json(p) for p in item.packets]
    return body


def dyeing_stats(db, user_id: int, today: Optional[date] = None) -> Dict[str, int]:
    """Dashboard counters as aggregate queries over item sections."""
    today = today or utcnow().date()
    day_start = datetime.combine(today, datetime.min.time())
    day_end = day_start + timedelta(days=1)

    def count(*criteria) -> int:
        return db.execute(select(func.count(ItemSection.id)).where(*criteria)).scalar_one()

    return {
        'availableCount': count(ItemSection.status == SectionStatus.READY_FOR_DYEING,
                                ItemSection.dyeing_accepted_by.is_(None)),
        'acceptedCount': count(ItemSection.status == SectionStatus.DYEING_ACCEPTED,
                               ItemSection.dyeing_accepted_by == user_id),
        'inProgressCount': count(ItemSection.status == SectionStatus.DYEING_IN_PROGRESS,
                                 ItemSection.dyeing_accepted_by == user_id),
        'completedTodayCount': count(ItemSection.status.in_(COMPLETED_SECTION_STATUSES),
                                     ItemSection.dyeing_completed_by == user_id,
                                     ItemSection.dyeing_completed_at >= day_start,
                                     ItemSection.dyeing_completed_at < day_end),
    }


__all__ = ['available_tasks', 'my_tasks', 'completed_tasks', 'task_detail', 'dyeing_stats']
