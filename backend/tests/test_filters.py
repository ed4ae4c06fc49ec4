import pytest
from werkzeug.exceptions import BadRequest
from powerdesk.utils.filters import apply_filters, text_search, equals

ROWS = [
    {'id': 'INV-1', 'company_name': 'Acme Power', 'status': 'Paid'},
    {'id': 'INV-2', 'company_name': 'Beta Ltd', 'status': 'Pending'},
    {'id': 'ACME-3', 'company_name': 'Gamma', 'status': 'Pending'},
]
SPECS = {
    'search': {'op': text_search(('id', 'company_name'))},
    'status': {'op': equals('status'), 'validate': lambda v: v in ('Paid', 'Pending', 'Overdue')},
}


def test_text_search_matches_any_field_case_insensitively():
    out = apply_filters(ROWS, SPECS, {'search': 'acme'})
    assert [r['id'] for r in out] == ['INV-1', 'ACME-3']


def test_filters_combine():
    out = apply_filters(ROWS, SPECS, {'search': 'acme', 'status': 'Pending'})
    assert [r['id'] for r in out] == ['ACME-3']


def test_empty_params_are_ignored():
    assert apply_filters(ROWS, SPECS, {'search': '', 'status': ''}) == ROWS


def test_invalid_value_aborts():
    with pytest.raises(BadRequest):
        apply_filters(ROWS, SPECS, {'status': 'Void'})


def test_coerce_failure_aborts():
    specs = {'limit': {'coerce': int, 'op': lambda rows, v: rows[:v]}}
    assert len(apply_filters(ROWS, specs, {'limit': '2'})) == 2
    with pytest.raises(BadRequest):
        apply_filters(ROWS, specs, {'limit': 'two'})
