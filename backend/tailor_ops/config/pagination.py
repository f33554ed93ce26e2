DEFAULT_LIMIT = 50
MAX_LIMIT = 200
DEFAULT_PAGE_SIZE = 10


def normalize_pagination(limit_raw, offset_raw):
    try:
        limit = int(limit_raw) if limit_raw is not None else DEFAULT_LIMIT
        offset = int(offset_raw) if offset_raw is not None else 0
    except ValueError:
        raise ValueError('limit/offset must be int')
    limit = max(1, min(limit, MAX_LIMIT))
    offset = max(0, offset)
    return limit, offset


def normalize_page(page_raw, limit_raw):
    """Page-number variant used by history views; returns (page, limit, offset)."""
    try:
        page = int(page_raw) if page_raw is not None else 1
        limit = int(limit_raw) if limit_raw is not None else DEFAULT_PAGE_SIZE
    except ValueError:
        raise ValueError('page/limit must be int')
    page = max(1, page)
    limit = max(1, min(limit, MAX_LIMIT))
    return page, limit, (page - 1) * limit
