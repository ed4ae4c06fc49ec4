import pytest
from powerdesk.models.invoice import LineItem, InvoiceStatus, compute_line_total, from_input_date
from powerdesk.services.invoice_editor import (
    InvoiceEditor, MODE_EDIT, DUPLICATE, VALIDATION, STORE, BUSY, READ_ONLY, WRONG_MODE,
    DUPLICATE_ID_MESSAGE, STATE_SUBMITTING, editor_for_record,
)
from powerdesk.services.store import StoreError, PERMISSION_DENIED, PERMISSION_DENIED_MESSAGE
from tests.test_utils_seed import MemoryStore

T0 = 1704067200000  # 2024-01-01T00:00:00Z


class Clock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


def filled_editor(store, **kwargs):
    kwargs.setdefault('clock', Clock())
    editor = InvoiceEditor(store, **kwargs)
    editor.id = 'INV-0001'
    editor.company_name = 'Acme Power'
    editor.date = '2024-02-01'
    editor.update_row('1', 'description', 'Generator Maintenance')
    editor.update_row('1', 'qty', '2')
    editor.update_row('1', 'unit_price', '15000')
    return editor


# ---------------- line totals ---------------- #

def test_line_total_uses_quantity_times_price():
    assert compute_line_total(LineItem('1', 'x', qty=3, unit_price=100)) == 300


def test_amount_override_takes_priority():
    assert compute_line_total(LineItem('1', 'x', qty=3, unit_price=100, amount=50)) == 50


def test_line_total_never_negative():
    assert compute_line_total(LineItem('1', 'x', qty=-2, unit_price=100)) == 0
    assert compute_line_total(LineItem('1', 'x', amount=-5)) == 0
    assert compute_line_total(LineItem('1', 'x')) == 0


def test_totals_sum_line_totals():
    editor = InvoiceEditor(MemoryStore(), clock=Clock())
    editor.update_row('1', 'qty', 3)
    editor.update_row('1', 'unitPrice', 100)
    row = editor.add_row()
    editor.update_row(row.id, 'amount', '50')
    assert editor.compute_totals() == {'subtotal': 350, 'total': 350}


# ---------------- rows ---------------- #

def test_new_row_defaults():
    editor = InvoiceEditor(MemoryStore(), clock=Clock())
    row = editor.add_row()
    assert (row.description, row.qty, row.unit_price, row.amount) == ('', 1, 0, None)
    assert row.id != '1'
    assert editor.add_row().id != row.id


def test_remove_last_row_is_noop():
    editor = InvoiceEditor(MemoryStore(), clock=Clock())
    editor.remove_row('1')
    assert [r.id for r in editor.items] == ['1']
    row = editor.add_row()
    editor.remove_row('1')
    assert [r.id for r in editor.items] == [row.id]


@pytest.mark.parametrize('value,expected', [('12', 12.0), (7, 7.0), ('', None), ('abc', None), (None, None)])
def test_numeric_fields_are_coerced(value, expected):
    editor = InvoiceEditor(MemoryStore(), clock=Clock())
    editor.update_row('1', 'amount', value)
    assert editor.items[0].amount == expected


def test_description_is_stored_as_is():
    editor = InvoiceEditor(MemoryStore(), clock=Clock())
    editor.update_row('1', 'description', '  spaced  ')
    assert editor.items[0].description == '  spaced  '


def test_unknown_field_rejected():
    editor = InvoiceEditor(MemoryStore(), clock=Clock())
    with pytest.raises(ValueError):
        editor.update_row('1', 'colour', 'red')


def test_quick_service_adds_preset_row():
    editor = InvoiceEditor(MemoryStore(), clock=Clock())
    row = editor.add_quick_service('Battery Replacement')
    assert (row.description, row.qty, row.unit_price) == ('Battery Replacement', 1, 8000)


# ---------------- validation ---------------- #

def test_validation_reports_first_failure_only():
    editor = InvoiceEditor(MemoryStore(), clock=Clock())
    assert editor.validate() == 'Invoice ID is required.'
    editor.id = '  '
    assert editor.validate() == 'Invoice ID is required.'
    editor.id = 'INV-1'
    assert editor.validate() == 'Company name is required.'
    editor.company_name = 'Acme'
    assert editor.validate() == 'Line 1: description is required.'


@pytest.mark.parametrize('field,value,message', [
    ('qty', 0, 'Line 2: quantity must be > 0.'),
    ('unit_price', -1, 'Line 2: unit price must be >= 0.'),
    ('amount', -10, 'Line 2: amount must be >= 0.'),
])
def test_line_rules_are_indexed(field, value, message):
    editor = filled_editor(MemoryStore())
    row = editor.add_row()
    editor.update_row(row.id, 'description', 'Extra')
    editor.update_row(row.id, field, value)
    assert editor.validate() == message


def test_amount_override_skips_quantity_rules():
    editor = filled_editor(MemoryStore())
    editor.update_row('1', 'qty', 0)
    editor.update_row('1', 'amount', 500)
    assert editor.validate() is None


def test_due_date_before_invoice_date_blocks_write():
    store = MemoryStore()
    editor = filled_editor(store)
    editor.date = '2024-02-01'
    editor.due_date = '2024-01-01'
    result = editor.submit()
    assert result.ok is False
    assert result.reason == VALIDATION
    assert result.error == 'Due date must be on or after invoice date.'
    assert editor.error == result.error
    assert store.calls == []


def test_due_date_equal_to_invoice_date_passes():
    editor = filled_editor(MemoryStore())
    editor.due_date = editor.date
    assert editor.validate() is None


# ---------------- create ---------------- #

def test_create_writes_full_record_and_notifies():
    store = MemoryStore()
    seen = []
    editor = filled_editor(store, actor_uid='admin-1', on_success=seen.append, on_close=lambda: seen.append('closed'))
    result = editor.submit()
    assert result.ok and result.invoice_id == 'INV-0001'
    record = store.docs['invoices/INV-0001']
    assert record['amount'] == 30000
    assert record['date'] == from_input_date('2024-02-01')
    assert record['due_date'] is None
    assert record['status'] == 'Pending'
    assert record['updatedAt'] == T0
    assert record['line_items'] == [{'id': '1', 'description': 'Generator Maintenance', 'qty': 2, 'unit_price': 15000}]
    notes = store.get('notifications/admin-1')
    assert [n['type'] for n in notes.values()] == ['invoice-created']
    assert seen == ['INV-0001', 'closed']
    assert editor.banner.msg == 'Invoice created successfully'
    assert editor.busy is False


def test_override_rows_persist_amount_only():
    store = MemoryStore()
    editor = filled_editor(store)
    editor.update_row('1', 'amount', 1200)
    editor.submit()
    assert store.docs['invoices/INV-0001']['line_items'] == [
        {'id': '1', 'description': 'Generator Maintenance', 'amount': 1200},
    ]
    assert store.docs['invoices/INV-0001']['amount'] == 1200


def test_duplicate_id_fails_without_writing():
    store = MemoryStore({'invoices/INV-0001': {'id': 'INV-0001', 'company_name': 'Other'}})
    editor = filled_editor(store, actor_uid='admin-1')
    result = editor.submit()
    assert result.reason == DUPLICATE
    assert result.error == DUPLICATE_ID_MESSAGE
    assert store.writes() == []
    assert store.docs['invoices/INV-0001']['company_name'] == 'Other'


def test_back_callback_used_without_close():
    calls = []
    editor = filled_editor(MemoryStore(), on_back=lambda: calls.append('back'))
    editor.submit()
    assert calls == ['back']


def test_notification_failure_does_not_fail_submit():
    def fail(op, path):
        return RuntimeError('notifications offline') if path.startswith('notifications/') and op == 'set' else None

    store = MemoryStore(fail_when=fail)
    result = filled_editor(store, actor_uid='admin-1').submit()
    assert result.ok is True
    assert 'invoices/INV-0001' in store.docs


def test_permission_denied_surfaces_fixed_message():
    store = MemoryStore(fail_when=lambda op, path: StoreError(PERMISSION_DENIED, 'rules') if op == 'set' else None)
    editor = filled_editor(store)
    result = editor.submit()
    assert result.reason == STORE
    assert result.store_code == PERMISSION_DENIED
    assert result.error == PERMISSION_DENIED_MESSAGE
    assert editor.banner.type == 'error'
    assert editor.busy is False


def test_generic_store_failure_passes_message_through():
    store = MemoryStore(fail_when=lambda op, path: RuntimeError('disk full') if op == 'set' else None)
    result = filled_editor(store).submit()
    assert result.error == 'Error: disk full'


def test_busy_editor_rejects_second_submit():
    store = MemoryStore()
    editor = filled_editor(store)
    editor.state = STATE_SUBMITTING
    assert editor.submit().reason == BUSY
    assert store.calls == []


def test_reentrant_submit_is_rejected_while_writing():
    nested = []

    class ReentrantStore(MemoryStore):
        def set(self, path, value):
            if path.startswith('invoices/'):
                nested.append(editor.submit())
            super().set(path, value)

    editor = filled_editor(ReentrantStore())
    assert editor.submit().ok is True
    assert [r.reason for r in nested] == [BUSY]


def test_banner_expires():
    clock = Clock()
    editor = filled_editor(MemoryStore(), clock=clock)
    editor.submit()
    clock.now += 3499
    assert editor.banner is not None
    clock.now += 1
    assert editor.banner is None


# ---------------- edit ---------------- #

STORED = {
    'id': 'INV-9',
    'company_name': 'Beta Ltd',
    'date': T0,
    'due_date': None,
    'status': 'pending',
    'line_items': [{'description': 'Oil Change Service', 'qty': 1, 'unit_price': 3500}, {'description': 'Call-out', 'amount': 500}],
    'amount': 4000,
    'updatedAt': T0,
}


def test_hydration_normalises_stored_record():
    editor = editor_for_record(MemoryStore(), 'INV-9', STORED, clock=Clock())
    assert editor.mode == MODE_EDIT
    assert editor.read_only is False
    assert editor.date == '2024-01-01'
    assert [r.id for r in editor.items] == ['1', '2']
    assert editor.items[1].amount == 500
    assert editor.status is InvoiceStatus.PENDING


def test_paid_invoice_opens_read_only():
    editor = editor_for_record(MemoryStore(), 'INV-9', dict(STORED, status='Paid'), clock=Clock())
    assert editor.read_only is True
    assert editor.add_row() is None
    editor.update_row('1', 'qty', 5)
    assert editor.items[0].qty == 1
    assert editor.submit().reason == READ_ONLY


def test_edit_submit_updates_and_notifies():
    store = MemoryStore({'invoices/INV-9': STORED})
    editor = editor_for_record(store, 'INV-9', STORED, actor_uid='admin-2', clock=Clock())
    editor.load_form({'id': 'INV-OTHER', 'company_name': 'Beta Holdings'})
    result = editor.submit()
    assert result.ok and result.invoice_id == 'INV-9'
    assert [c[:2] for c in store.writes('invoices/')] == [('update', 'invoices/INV-9')]
    assert store.docs['invoices/INV-9']['company_name'] == 'Beta Holdings'
    notes = store.get('notifications/admin-2')
    assert [n['type'] for n in notes.values()] == ['invoice-updated']
    assert editor.banner.msg == 'Invoice updated successfully'


def test_mark_paid_writes_only_status_and_timestamp():
    store = MemoryStore({'invoices/INV-9': STORED})
    clock = Clock(T0 + 5000)
    editor = editor_for_record(store, 'INV-9', STORED, actor_uid='admin-3', clock=clock)
    result = editor.update_status('Paid')
    assert result.ok is True
    assert store.writes('invoices/') == [('update', 'invoices/INV-9', {'status': 'Paid', 'updatedAt': T0 + 5000})]
    paid = [c for c in store.writes('notifications/') if c[2]['type'] == 'invoice-paid']
    assert len(paid) == 1
    assert len(store.writes('notifications/')) == 1
    assert editor.banner.msg == 'Status updated successfully'


def test_non_paid_status_sends_no_notification():
    store = MemoryStore({'invoices/INV-9': STORED})
    editor = editor_for_record(store, 'INV-9', STORED, actor_uid='admin-3', clock=Clock())
    editor.update_status('Overdue')
    assert store.writes('notifications/') == []
    assert store.docs['invoices/INV-9']['status'] == 'Overdue'


def test_status_update_allowed_on_read_only_invoice():
    store = MemoryStore({'invoices/INV-9': dict(STORED, status='Paid')})
    editor = editor_for_record(store, 'INV-9', dict(STORED, status='Paid'), clock=Clock())
    assert editor.update_status('Pending').ok is True


def test_status_update_requires_edit_mode():
    editor = filled_editor(MemoryStore())
    assert editor.update_status('Paid').reason == WRONG_MODE


def test_status_update_failure_uses_fallback():
    store = MemoryStore(fail_when=lambda op, path: StoreError('UNAVAILABLE') if op == 'update' else None)
    editor = editor_for_record(store, 'INV-9', STORED, clock=Clock())
    result = editor.update_status('Paid')
    assert result.ok is False
    assert result.error == 'Failed to update status'
    assert editor.saving_status is False


# ---------------- ids and stored dates ---------------- #

@pytest.mark.parametrize('bad_id', ['INV/0001', 'INV.1', 'INV#1', 'INV$1', 'INV[1]'])
def test_id_with_key_separator_rejected(bad_id):
    store = MemoryStore()
    editor = filled_editor(store)
    editor.id = bad_id
    result = editor.submit()
    assert result.ok is False
    assert result.reason == VALIDATION
    assert result.error == 'Invoice ID cannot contain / . # $ [ or ].'
    assert store.writes('invoices') == []


@pytest.mark.parametrize('stored,expected', [
    ('2024-01-05T10:00:00Z', '2024-01-05'),
    ('2024-01-05T23:30:00-02:00', '2024-01-06'),
    ('2024-01-05T10:00:00.250000', '2024-01-05'),
    ('2024-01-05', '2024-01-05'),
])
def test_hydration_reads_iso_datetimes(stored, expected):
    editor = InvoiceEditor(MemoryStore(), mode=MODE_EDIT, initial_id='INV-ISO', clock=Clock(),
                           initial_data={'company_name': 'Acme', 'date': stored, 'due_date': stored})
    assert editor.date == expected
    assert editor.due_date == expected


def test_hydration_falls_back_to_today_for_unreadable_dates():
    editor = InvoiceEditor(MemoryStore(), mode=MODE_EDIT, initial_id='INV-BAD', clock=Clock(),
                           initial_data={'company_name': 'Acme', 'date': 'next tuesday', 'due_date': 'soon'})
    assert editor.date == '2024-01-01'
    assert editor.due_date == '2024-01-01'
