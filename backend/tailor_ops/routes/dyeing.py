from flask import Blueprint, request, abort
from tailor_ops import get_db
from tailor_ops.config.pagination import normalize_page
from tailor_ops.constants.statuses import Priority
from tailor_ops.decorators.auth import require_permissions
from tailor_ops.serializers import order_item_json, section_label
from tailor_ops.services import dyeing, dyeing_tasks
from tailor_ops.services.policy import acting_user, current_principal
from tailor_ops.utils.listing import envelope
from tailor_ops.utils.timeutils import parse_datetime
from tailor_ops.utils.validation import normalize_section_names

dyeing_bp = Blueprint('dyeing', __name__)


def _sort_args(default: str = 'fwdDate'):
    return request.args.get('sortBy') or default, request.args.get('sortOrder') or 'asc'


@dyeing_bp.get('/available-tasks')
@require_permissions('dyeing.view')
def available_tasks():
    """Items with sections waiting to be accepted."""
    priority = request.args.get('priority')
    if priority and priority not in Priority.ALL:
        abort(400, description='priority invalid')
    sort_by, sort_order = _sort_args()
    tasks = dyeing_tasks.available_tasks(get_db(), priority=priority, sort_by=sort_by, sort_order=sort_order)
    return envelope(tasks, total=len(tasks))


@dyeing_bp.get('/my-tasks')
@require_permissions('dyeing.view')
def my_tasks():
    """Items where the caller holds accepted or in-progress sections."""
    sort_by, sort_order = _sort_args()
    tasks, meta = dyeing_tasks.my_tasks(get_db(), current_principal().id, sort_by=sort_by, sort_order=sort_order)
    return envelope(tasks, **meta)


@dyeing_bp.get('/completed-tasks')
@require_permissions('dyeing.view')
def completed_tasks():
    """Dyeing history, newest first; `mine=true` limits it to the caller."""
    try:
        page, limit, _offset = normalize_page(request.args.get('page'), request.args.get('limit'))
    except ValueError as e:
        abort(400, description=str(e))
    try:
        start = parse_datetime(request.args['startDate']) if request.args.get('startDate') else None
        end = parse_datetime(request.args['endDate']) if request.args.get('endDate') else None
    except ValueError:
        abort(400, description='startDate/endDate must be ISO dates')
    user_id = current_principal().id if request.args.get('mine', '').lower() in ('1', 'true') else None
    data, meta = dyeing_tasks.completed_tasks(get_db(), user_id=user_id, page=page, limit=limit, start=start, end=end)
    return envelope(data, **meta)


@dyeing_bp.get('/task/<int:item_id>')
@require_permissions('dyeing.view')
def task_detail(item_id: int):
    """Sections, materials, packets and timeline of one order item."""
    item = dyeing.load_item(get_db(), item_id)
    return envelope(dyeing_tasks.task_detail(item))


@dyeing_bp.get('/stats')
@require_permissions('dyeing.view')
def stats():
    """Dashboard counters for the caller."""
    return envelope(dyeing_tasks.dyeing_stats(get_db(), current_principal().id))


@dyeing_bp.post('/task/<int:item_id>/accept')
@require_permissions('dyeing.manage')
def accept(item_id: int):
    """Claim READY_FOR_DYEING sections."""
    data = request.json or {}
    user = acting_user(data)
    sections = normalize_section_names(data.get('sections') or [])
    item = dyeing.accept_sections(get_db(), item_id, user, sections)
    return envelope(
        {'orderItem': order_item_json(item, detail=True), 'acceptedSections': [section_label(n) for n in sections]},
        f'Accepted {len(sections)} section(s) for dyeing',
    )


@dyeing_bp.post('/task/<int:item_id>/start')
@require_permissions('dyeing.manage')
def start(item_id: int):
    """Begin dyeing sections the caller accepted."""
    data = request.json or {}
    user = acting_user(data)
    sections = normalize_section_names(data.get('sections') or [])
    item = dyeing.start_sections(get_db(), item_id, user, sections)
    return envelope({'orderItem': order_item_json(item, detail=True)}, f'Started dyeing for {len(sections)} section(s)')


@dyeing_bp.post('/task/<int:item_id>/complete')
@require_permissions('dyeing.manage')
def complete(item_id: int):
    """Finish dyeing; sections move on to production."""
    data = request.json or {}
    user = acting_user(data)
    sections = normalize_section_names(data.get('sections') or [])
    item, all_ready = dyeing.complete_sections(get_db(), item_id, user, sections)
    message = f'Dyeing completed for {len(sections)} section(s)'
    if all_ready:
        message += '. Order item ready for production!'
    return envelope({'orderItem': order_item_json(item, detail=True), 'allSectionsReady': all_ready}, message)


@dyeing_bp.post('/task/<int:item_id>/reject')
@require_permissions('dyeing.reject', 'dyeing.manage')
def reject(item_id: int):
    """Send sections back to inventory check, releasing stock and packet sections."""
    data = request.json or {}
    user = acting_user(data)
    sections = normalize_section_names(data.get('sections') or [])
    plan = dyeing.reject_sections(get_db(), item_id, user, sections, data.get('notes'), data.get('reasonCode'))
    return envelope(
        {
            'orderItem': order_item_json(plan.item, detail=True),
            'rejectedSections': plan.rejected,
            'inventoryReleased': plan.inventory_released,
            'packetsInvalidated': plan.packets_invalidated,
        },
        f'Rejected {len(plan.sections)} section(s). Inventory released, sections sent back to inventory check.',
    )
