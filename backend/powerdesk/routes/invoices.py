from __future__ import annotations
from flask import Blueprint, request, abort
from powerdesk import get_store
from powerdesk.config.ui import CURRENCY, QUICK_ADD_SERVICES
from powerdesk.constants.roles import Role
from powerdesk.decorators.auth import load_session, require_roles
from powerdesk.models.invoice import ALL_STATUSES
from powerdesk.services.invoice_editor import (
    InvoiceEditor, SubmitResult, MODE_CREATE, VALIDATION, DUPLICATE, BUSY, READ_ONLY, WRONG_MODE, STORE,
    editor_for_record,
)
from powerdesk.services.invoices import all_invoices, invoice_sums, load_invoice, delete_invoice
from powerdesk.services.store import store_error_status
from powerdesk.utils.filters import apply_filters, text_search, equals
from powerdesk.utils.listing import apply_pagination, build_list_payload
from powerdesk.utils.sorting import apply_multi_sort
from powerdesk.utils.validation import require_json_object, validate_status

invoices_bp = Blueprint('invoices', __name__)

RESULT_STATUS = {VALIDATION: 400, DUPLICATE: 409, BUSY: 409, READ_ONLY: 409, WRONG_MODE: 409}


def _fail(result: SubmitResult):
    if result.reason == STORE:
        abort(store_error_status(result.store_code), description=result.error)
    abort(RESULT_STATUS.get(result.reason, 400), description=result.error)


def _existing(invoice_id: str, **kwargs) -> InvoiceEditor:
    record = load_invoice(get_store(), invoice_id)
    if record is None:
        abort(404, description='Invoice not found')
    return editor_for_record(get_store(), invoice_id, record, actor_uid=load_session().uid, **kwargs)


def _apply_form(editor: InvoiceEditor, data: dict) -> None:
    if 'status' in data:
        validate_status(data['status'], ALL_STATUSES)
    try:
        editor.load_form(data)
    except (TypeError, AttributeError):
        abort(400, description='line_items invalid')


@invoices_bp.get('')
@require_roles(Role.ADMIN)
def list_invoices():
    rows = all_invoices(get_store())
    sums = invoice_sums(rows)
    filter_specs = {
        'search': {'op': text_search(('id', 'company_name'))},
        'status': {'op': equals('status'), 'validate': lambda v: v in ALL_STATUSES},
    }
    rows = apply_filters(rows, filter_specs, request.args)
    allowed = {'date', 'due_date', 'amount', 'company_name', 'status', 'id', 'updated_at'}
    rows = apply_multi_sort(rows, request.args.get('sort'), allowed, 'id', default='-date')
    page, total, limit, offset = apply_pagination(rows)
    return build_list_payload(page, total, limit, offset, sums=sums, currency=CURRENCY)


@invoices_bp.get('/quick-services')
@require_roles(Role.ADMIN)
def quick_services():
    return {'data': QUICK_ADD_SERVICES, 'currency': CURRENCY}


@invoices_bp.get('/<invoice_id>')
@require_roles(Role.ADMIN)
def get_invoice(invoice_id: str):
    # view mode opens any invoice read-only
    kwargs = {'read_only': True} if request.args.get('view') in ('1', 'true') else {}
    return _existing(invoice_id, **kwargs).to_dict()


@invoices_bp.post('')
@require_roles(Role.ADMIN)
def create_invoice():
    data = require_json_object()
    editor = InvoiceEditor(get_store(), mode=MODE_CREATE, actor_uid=load_session().uid)
    _apply_form(editor, data)
    result = editor.submit()
    if not result.ok:
        _fail(result)
    return editor.to_dict(), 201


@invoices_bp.put('/<invoice_id>')
@require_roles(Role.ADMIN)
def update_invoice(invoice_id: str):
    data = require_json_object()
    editor = _existing(invoice_id)
    _apply_form(editor, data)
    result = editor.submit()
    if not result.ok:
        _fail(result)
    return editor.to_dict()


@invoices_bp.post('/<invoice_id>/status')
@require_roles(Role.ADMIN)
def update_invoice_status(invoice_id: str):
    data = require_json_object()
    status = validate_status(data.get('status'), ALL_STATUSES)
    editor = _existing(invoice_id)
    result = editor.update_status(status)
    if not result.ok:
        _fail(result)
    return editor.to_dict()


@invoices_bp.delete('/<invoice_id>')
@require_roles(Role.ADMIN)
def remove_invoice(invoice_id: str):
    if load_invoice(get_store(), invoice_id) is None:
        abort(404, description='Invoice not found')
    delete_invoice(get_store(), invoice_id)
    return {'status': 'deleted'}
