import pytest
from datetime import date, datetime
from werkzeug.exceptions import BadRequest

from tailor_ops.config.pagination import normalize_page, normalize_pagination, MAX_LIMIT
from tailor_ops.utils.filters import parse_bool
from tailor_ops.utils.timeutils import iso, parse_datetime, parse_date
from tailor_ops.utils.validation import normalize_section_names, parse_number, require_fields


def test_section_names_are_normalized(app_ctx):
    assert normalize_section_names([' Shirt', 'shirt', 'DUPATTA']) == ['shirt', 'dupatta']
    with pytest.raises(BadRequest):
        normalize_section_names('shirt')
    with pytest.raises(BadRequest):
        normalize_section_names(['shirt', ''])


def test_parse_number(app_ctx):
    assert parse_number('2.5', 'quantity') == 2.5
    assert parse_number(0, 'quantity') == 0
    with pytest.raises(BadRequest):
        parse_number(0, 'quantity', positive=True)
    with pytest.raises(BadRequest):
        parse_number(-1, 'quantity')
    with pytest.raises(BadRequest):
        parse_number(None, 'quantity')
    for raw in ('nan', 'inf', '-inf', float('nan')):
        with pytest.raises(BadRequest):
            parse_number(raw, 'quantity', positive=True)


def test_require_fields(app_ctx):
    assert require_fields({'a': 1, 'b': 'x'}, 'a', 'b') == [1, 'x']
    with pytest.raises(BadRequest) as exc:
        require_fields({'a': ''}, 'a', 'b')
    assert exc.value.description == 'a, b required'


def test_pagination_bounds():
    assert normalize_pagination(None, None) == (50, 0)
    assert normalize_pagination('5000', '-3') == (MAX_LIMIT, 0)
    assert normalize_page('3', '20') == (3, 20, 40)
    assert normalize_page('0', None) == (1, 10, 0)
    with pytest.raises(ValueError):
        normalize_page('x', None)


def test_parse_bool():
    assert parse_bool('TRUE') is True
    assert parse_bool('0') is False
    with pytest.raises(ValueError):
        parse_bool('perhaps')


def test_time_helpers():
    assert iso(None) is None
    assert iso(date(2026, 3, 1)) == '2026-03-01'
    assert iso(datetime(2026, 3, 1, 8, 30, 5, 999)) == '2026-03-01T08:30:05Z'
    assert parse_datetime('2026-03-01T10:00:00+02:00') == datetime(2026, 3, 1, 8, 0, 0)
    assert parse_datetime('2026-03-01T10:00:00Z') == datetime(2026, 3, 1, 10, 0, 0)
    assert parse_date('2026-03-01T23:59:00') == date(2026, 3, 1)
