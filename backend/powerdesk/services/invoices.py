from __future__ import annotations
"""Invoice list rows and aggregate sums read from ``invoices``."""
from typing import Any, Dict, List, Optional

from powerdesk.models.invoice import ALL_STATUSES, stored_date_ms, to_number, to_status


def invoice_row(key: str, data: Dict[str, Any]) -> Dict[str, Any]:
    due = data.get('due_date')
    return {
        'id': str(data.get('id') or key),
        'company_name': data.get('company_name') or '',
        'amount': to_number(data.get('amount'), 0),
        'date': stored_date_ms(data.get('date')) or 0,
        'due_date': stored_date_ms(due) if due is not None else None,
        'status': to_status(data.get('status')).value,
        'updated_at': int(to_number(data.get('updatedAt'), 0)) or None,
    }


def all_invoices(store) -> List[Dict[str, Any]]:
    """Every invoice row, newest invoice date first."""
    raw = store.get('invoices') or {}
    rows = [invoice_row(key, data) for key, data in raw.items() if isinstance(data, dict)]
    rows.sort(key=lambda r: r['date'] or 0, reverse=True)
    return rows


def invoice_sums(rows: List[Dict[str, Any]]) -> Dict[str, float]:
    sums = {'total': sum(r['amount'] for r in rows)}
    for status in ALL_STATUSES:
        sums[status.lower()] = sum(r['amount'] for r in rows if r['status'] == status)
    return sums


def load_invoice(store, invoice_id: str) -> Optional[Dict[str, Any]]:
    """Stored record for ``invoice_id`` or None."""
    data = store.get(f'invoices/{invoice_id}')
    if not isinstance(data, dict) or 'company_name' not in data:
        return None
    return data


def delete_invoice(store, invoice_id: str) -> None:
    store.remove(f'invoices/{invoice_id}')


__all__ = ['invoice_row', 'all_invoices', 'invoice_sums', 'load_invoice', 'delete_invoice']
