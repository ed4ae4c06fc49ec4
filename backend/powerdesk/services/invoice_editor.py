from __future__ import annotations
"""Invoice editor: line-item rows, derived totals, validation and persistence.

One editor instance owns one draft for one edit session. Nothing is written until
``submit()`` (or ``update_status()`` in edit mode). Notification records attached to a
write are best effort: their failures are logged and never fail the write.

Submission lifecycle (guarded by ``SUBMIT_FSM``):

    idle -> submitting -> idle

The busy check relies on handlers running one at a time; it is advisory, not a lock.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from powerdesk.config.ui import BANNER_SECONDS, QUICK_ADD_SERVICES
from powerdesk.models.invoice import (
    InvoiceStatus, LineItem, compute_line_total, from_input_date, parse_input_date, to_input_date,
    to_number, to_optional_number, to_status,
)
from powerdesk.services.notifications import create_invoice_notification, now_ms
from powerdesk.services.store import describe_store_error
from powerdesk.utils.fsm import TransitionValidator

log = logging.getLogger(__name__)

MODE_CREATE = 'create'
MODE_EDIT = 'edit'

STATE_IDLE = 'idle'
STATE_SUBMITTING = 'submitting'

SUBMIT_FSM = TransitionValidator({
    STATE_IDLE: {STATE_SUBMITTING},
    STATE_SUBMITTING: {STATE_IDLE},
}, field_name='submission')

# Failure reasons reported by SubmitResult
VALIDATION = 'validation'
DUPLICATE = 'duplicate'
STORE = 'store'
BUSY = 'busy'
READ_ONLY = 'read_only'
WRONG_MODE = 'mode'

NUMERIC_FIELDS = {'qty', 'unit_price', 'amount'}
FIELD_ALIASES = {'unitPrice': 'unit_price', 'quantity': 'qty'}

DUPLICATE_ID_MESSAGE = 'An invoice with this ID already exists. Please use a different ID.'
SAVE_FAILED_MESSAGE = 'Failed to save invoice. Please try again.'
STATUS_FAILED_MESSAGE = 'Failed to update status'

# characters the document store does not allow in a key
FORBIDDEN_KEY_CHARS = '/.#$[]'
INVALID_ID_MESSAGE = 'Invoice ID cannot contain / . # $ [ or ].'


@dataclass
class Banner:
    type: str
    msg: str
    raised_at: int

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.type, 'msg': self.msg}


@dataclass
class SubmitResult:
    ok: bool
    invoice_id: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None
    store_code: Optional[str] = None


class InvoiceEditor:
    def __init__(
        self,
        store,
        mode: str = MODE_CREATE,
        initial_id: Optional[str] = None,
        initial_data: Optional[Dict[str, Any]] = None,
        read_only: bool = False,
        actor_uid: Optional[str] = None,
        on_success: Optional[Callable[[str], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
        on_back: Optional[Callable[[], None]] = None,
        clock: Callable[[], int] = now_ms,
        banner_seconds: float = BANNER_SECONDS,
    ):
        if mode not in (MODE_CREATE, MODE_EDIT):
            raise ValueError(f'Unknown editor mode {mode}')
        self.store = store
        self.mode = mode
        self.read_only = read_only
        self.actor_uid = actor_uid
        self.on_success = on_success
        self.on_close = on_close
        self.on_back = on_back
        self.clock = clock
        self.banner_seconds = banner_seconds

        data = initial_data or {}
        self.id: str = str(initial_id or data.get('id') or '')
        self.company_name: str = data.get('company_name') or ''
        self.description: str = data.get('description') or ''
        self.date: str = to_input_date(data.get('date') or clock(), clock())
        self.due_date: str = to_input_date(data['due_date'], clock()) if data.get('due_date') else ''
        self.status: InvoiceStatus = to_status(data.get('status'))
        self.items: List[LineItem] = [
            LineItem(
                id=str(it.get('id') or idx + 1),
                description=it.get('description') or '',
                qty=to_number(it.get('qty'), 0),
                unit_price=to_number(it.get('unit_price'), 0),
                amount=to_optional_number(it.get('amount')),
            )
            for idx, it in enumerate(data.get('line_items') or [])
            if isinstance(it, dict)
        ] or [LineItem(id='1', description='', qty=1, unit_price=0)]

        self.state = STATE_IDLE
        self.saving_status = False
        self.error: Optional[str] = None
        self._banner: Optional[Banner] = None

    # ---------------- rows ---------------- #

    def _fresh_row_id(self) -> str:
        base = str(self.clock())
        taken = {r.id for r in self.items}
        candidate, n = base, 1
        while candidate in taken:
            candidate = f'{base}-{n}'
            n += 1
        return candidate

    def add_row(self) -> Optional[LineItem]:
        if self.read_only:
            return None
        row = LineItem(id=self._fresh_row_id(), description='', qty=1, unit_price=0)
        self.items.append(row)
        return row

    def add_quick_service(self, name: str) -> Optional[LineItem]:
        if self.read_only:
            return None
        preset = next((s for s in QUICK_ADD_SERVICES if s['name'] == name), None)
        if preset is None:
            raise ValueError(f'Unknown quick service {name}')
        row = LineItem(id=self._fresh_row_id(), description=preset['name'], qty=1, unit_price=preset['price'])
        self.items.append(row)
        return row

    def remove_row(self, row_id: str) -> None:
        """Remove a row; the last remaining row is never removed."""
        if self.read_only or len(self.items) <= 1:
            return
        self.items = [r for r in self.items if r.id != row_id]

    def update_row(self, row_id: str, field: str, value: Any) -> None:
        if self.read_only:
            return
        field = FIELD_ALIASES.get(field, field)
        if field not in NUMERIC_FIELDS and field != 'description':
            raise ValueError(f'Unknown line item field {field}')
        for row in self.items:
            if row.id == row_id:
                if field in NUMERIC_FIELDS:
                    setattr(row, field, to_optional_number(value))
                else:
                    row.description = '' if value is None else str(value)

    def load_form(self, data: Dict[str, Any]) -> None:
        """Apply a submitted form (header fields and full row list) to the draft."""
        if self.read_only:
            return
        if self.mode == MODE_CREATE and 'id' in data:
            self.id = str(data.get('id') or '')
        for key in ('company_name', 'description'):
            if key in data:
                setattr(self, key, str(data.get(key) or ''))
        if 'date' in data:
            self.date = _form_date(data.get('date'))
        if 'due_date' in data:
            self.due_date = _form_date(data.get('due_date')) if data.get('due_date') else ''
        if 'status' in data:
            self.status = InvoiceStatus(data['status'])
        if 'line_items' in data:
            rows = [
                LineItem(
                    id=str(it.get('id') or idx + 1),
                    description='' if it.get('description') is None else str(it.get('description')),
                    qty=to_optional_number(it.get('qty', it.get('quantity'))),
                    unit_price=to_optional_number(it.get('unit_price', it.get('unitPrice'))),
                    amount=to_optional_number(it.get('amount')),
                )
                for idx, it in enumerate(data.get('line_items') or [])
                if isinstance(it, dict)
            ]
            self.items = rows or [LineItem(id='1', description='', qty=1, unit_price=0)]

    # ---------------- derived values ---------------- #

    def compute_totals(self) -> Dict[str, float]:
        subtotal = sum(compute_line_total(r) for r in self.items)
        return {'subtotal': subtotal, 'total': subtotal}

    def validate(self) -> Optional[str]:
        """First failing rule, in fixed order, or None."""
        if not self.id.strip():
            return 'Invoice ID is required.'
        if any(ch in self.id for ch in FORBIDDEN_KEY_CHARS):
            return INVALID_ID_MESSAGE
        if not self.company_name.strip():
            return 'Company name is required.'
        try:
            date_ms = from_input_date(self.date)
        except ValueError:
            return 'Invoice date must be a valid date (YYYY-MM-DD).'
        if self.due_date:
            try:
                due_ms = from_input_date(self.due_date)
            except ValueError:
                return 'Due date must be a valid date (YYYY-MM-DD).'
            if due_ms < date_ms:
                return 'Due date must be on or after invoice date.'
        for idx, it in enumerate(self.items, start=1):
            if not (it.description or '').strip():
                return f'Line {idx}: description is required.'
            if it.has_amount:
                if to_number(it.amount, 0) < 0:
                    return f'Line {idx}: amount must be >= 0.'
            else:
                if to_number(it.qty, 0) <= 0:
                    return f'Line {idx}: quantity must be > 0.'
                if to_number(it.unit_price, 0) < 0:
                    return f'Line {idx}: unit price must be >= 0.'
        return None

    def build_payload(self) -> Dict[str, Any]:
        return {
            'id': self.id.strip(),
            'company_name': self.company_name.strip(),
            'description': (self.description or '').strip(),
            'date': from_input_date(self.date),
            'due_date': from_input_date(self.due_date) if self.due_date else None,
            'status': self.status.value,
            'line_items': [it.to_record() for it in self.items],
            'amount': self.compute_totals()['total'],
            'updatedAt': self.clock(),
        }

    # ---------------- banner ---------------- #

    def _raise_banner(self, kind: str, msg: str) -> None:
        self._banner = Banner(kind, msg, self.clock())

    @property
    def banner(self) -> Optional[Banner]:
        if self._banner is None:
            return None
        if self.clock() - self._banner.raised_at >= self.banner_seconds * 1000:
            self._banner = None
        return self._banner

    # ---------------- persistence ---------------- #

    @property
    def busy(self) -> bool:
        return self.state == STATE_SUBMITTING

    def submit(self) -> SubmitResult:
        if self.read_only:
            return SubmitResult(False, reason=READ_ONLY, error='This invoice is read-only.')
        if self.busy:
            return SubmitResult(False, reason=BUSY, error='A save is already in progress.')
        self.error = None
        message = self.validate()
        if message:
            self.error = message
            return SubmitResult(False, error=message, reason=VALIDATION)

        payload = self.build_payload()
        path = f"invoices/{payload['id']}"
        SUBMIT_FSM.assert_can_transition(self.state, STATE_SUBMITTING)
        self.state = STATE_SUBMITTING
        try:
            if self.mode == MODE_EDIT:
                self.store.update(path, payload)
                self._raise_banner('success', 'Invoice updated successfully')
                self._notify('updated', payload['id'], payload['company_name'])
            else:
                if self.store.exists(path):
                    self.error = DUPLICATE_ID_MESSAGE
                    return SubmitResult(False, error=DUPLICATE_ID_MESSAGE, reason=DUPLICATE)
                self.store.set(path, payload)
                self._raise_banner('success', 'Invoice created successfully')
                self._notify('created', payload['id'], payload['company_name'])
        except Exception as exc:
            log.error('Invoice save error: %s', exc, exc_info=True)
            message = describe_store_error(exc, SAVE_FAILED_MESSAGE)
            self.error = message
            self._raise_banner('error', message)
            return SubmitResult(False, error=message, reason=STORE, store_code=getattr(exc, 'code', None))
        finally:
            SUBMIT_FSM.assert_can_transition(self.state, STATE_IDLE)
            self.state = STATE_IDLE

        if self.on_success:
            self.on_success(payload['id'])
        if self.on_close:
            self.on_close()
        elif self.on_back:
            self.on_back()
        return SubmitResult(True, invoice_id=payload['id'])

    def update_status(self, status: Optional[Any] = None) -> SubmitResult:
        """Status-only write for an existing invoice; no full validation."""
        if self.mode != MODE_EDIT or not self.id:
            return SubmitResult(False, reason=WRONG_MODE, error='Only existing invoices have a status to update.')
        if self.saving_status:
            return SubmitResult(False, reason=BUSY, error='A status update is already in progress.')
        if status is not None:
            self.status = InvoiceStatus(status)
        self.saving_status = True
        try:
            self.store.update(f'invoices/{self.id}', {'status': self.status.value, 'updatedAt': self.clock()})
            self._raise_banner('success', 'Status updated successfully')
            if self.status is InvoiceStatus.PAID:
                self._notify('paid', self.id, self.company_name)
        except Exception as exc:
            log.error('Status update error: %s', exc, exc_info=True)
            message = describe_store_error(exc, STATUS_FAILED_MESSAGE)
            self._raise_banner('error', message)
            return SubmitResult(False, error=message, reason=STORE, store_code=getattr(exc, 'code', None))
        finally:
            self.saving_status = False
        return SubmitResult(True, invoice_id=self.id)

    def _notify(self, action: str, invoice_id: str, company_name: str) -> None:
        if not self.actor_uid:
            return
        try:
            create_invoice_notification(self.store, self.actor_uid, action, invoice_id, company_name)
        except Exception:
            log.error('Failed to create notification for invoice %s', invoice_id, exc_info=True)

    def to_dict(self) -> Dict[str, Any]:
        banner = self.banner
        return {
            'mode': self.mode,
            'read_only': self.read_only,
            'id': self.id,
            'company_name': self.company_name,
            'description': self.description,
            'date': self.date,
            'due_date': self.due_date or None,
            'status': self.status.value,
            'line_items': [dict(r.to_dict(), line_total=compute_line_total(r)) for r in self.items],
            'totals': self.compute_totals(),
            'error': self.error,
            'banner': banner.to_dict() if banner else None,
        }


def _form_date(value: Any) -> str:
    """Form date as given; epoch milliseconds are converted, bad text is kept for validation."""
    if value is None:
        return ''
    try:
        return parse_input_date(value).isoformat()
    except (TypeError, ValueError, OverflowError, OSError):
        return str(value)


def editor_for_record(store, key: str, record: Dict[str, Any], **kwargs) -> InvoiceEditor:
    """Edit-mode editor hydrated from a stored invoice; paid invoices open read-only."""
    status = to_status(record.get('status'))
    kwargs.setdefault('read_only', status is InvoiceStatus.PAID)
    return InvoiceEditor(store, mode=MODE_EDIT, initial_id=str(record.get('id') or key), initial_data=record, **kwargs)


__all__ = [
    'InvoiceEditor', 'SubmitResult', 'Banner', 'SUBMIT_FSM', 'MODE_CREATE', 'MODE_EDIT',
    'VALIDATION', 'DUPLICATE', 'STORE', 'BUSY', 'READ_ONLY', 'WRONG_MODE',
    'DUPLICATE_ID_MESSAGE', 'editor_for_record',
]
