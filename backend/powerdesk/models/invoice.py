from __future__ import annotations
"""Invoice draft types and the value coercions shared by the editor and listings.

Invoices live in the document store (``invoices/{id}``), not in SQL tables, so these
are plain dataclasses. Stored records use the keys ``company_name``, ``due_date``,
``line_items``, ``unit_price`` and ``updatedAt``.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone, date as date_cls
from enum import Enum
from typing import Any, Dict, Optional


class InvoiceStatus(str, Enum):
    PENDING = 'Pending'
    PAID = 'Paid'
    OVERDUE = 'Overdue'


ALL_STATUSES = tuple(s.value for s in InvoiceStatus)


def to_status(value: Any) -> InvoiceStatus:
    """Lenient status parse used when reading stored records."""
    v = str(value or 'Pending').lower()
    if 'paid' in v:
        return InvoiceStatus.PAID
    if 'overdue' in v:
        return InvoiceStatus.OVERDUE
    return InvoiceStatus.PENDING


def to_optional_number(value: Any) -> Optional[float]:
    """Numeric value, or None for empty / non-numeric input."""
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def to_number(value: Any, fallback: float) -> float:
    n = to_optional_number(value)
    return fallback if n is None else n


def from_input_date(value: str) -> int:
    """``YYYY-MM-DD`` -> epoch milliseconds at UTC midnight. Raises ValueError."""
    d = date_cls.fromisoformat(str(value).strip())
    return int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp() * 1000)


def parse_input_date(value: Any) -> date_cls:
    """Epoch milliseconds, ``YYYY-MM-DD`` or a full ISO datetime -> UTC calendar date.

    Raises ValueError (or TypeError/OverflowError/OSError) for anything else.
    """
    if isinstance(value, str) and not value.strip().lstrip('-').isdigit():
        text = value.strip()
        if len(text) == 10:
            return date_cls.fromisoformat(text)
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()
    ms = int(float(value))
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).date()


def to_input_date(value: Any, fallback_ms: Optional[int] = None) -> str:
    """Stored date -> ``YYYY-MM-DD``; unreadable values become the fallback day (today)."""
    try:
        return parse_input_date(value).isoformat()
    except (TypeError, ValueError, OverflowError, OSError):
        if fallback_ms is None:
            return datetime.now(timezone.utc).date().isoformat()
        return datetime.fromtimestamp(fallback_ms / 1000, tz=timezone.utc).date().isoformat()


def stored_date_ms(value: Any) -> Optional[int]:
    """Stored date as epoch milliseconds; ISO strings written by other clients are read too."""
    n = to_optional_number(value)
    if n is not None:
        return int(n)
    try:
        d = parse_input_date(value)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
    return from_input_date(d.isoformat())


@dataclass
class LineItem:
    id: str
    description: str = ''
    qty: Optional[float] = None
    unit_price: Optional[float] = None
    amount: Optional[float] = None

    @property
    def has_amount(self) -> bool:
        return self.amount is not None

    def to_record(self) -> Dict[str, Any]:
        """Stored shape: the override amount, or quantity and unit price."""
        record: Dict[str, Any] = {'id': self.id, 'description': self.description}
        if self.has_amount:
            record['amount'] = self.amount
        else:
            record['qty'] = to_number(self.qty, 0)
            record['unit_price'] = to_number(self.unit_price, 0)
        return record

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'description': self.description,
            'qty': self.qty,
            'unit_price': self.unit_price,
            'amount': self.amount,
        }


def compute_line_total(row: LineItem) -> float:
    """Override amount when set, else quantity x unit price; never negative."""
    if row.has_amount:
        return max(0.0, to_number(row.amount, 0))
    return max(0.0, to_number(row.qty, 0) * to_number(row.unit_price, 0))


__all__ = [
    'InvoiceStatus', 'ALL_STATUSES', 'LineItem', 'compute_line_total', 'to_status', 'to_number',
    'to_optional_number', 'from_input_date', 'parse_input_date', 'to_input_date', 'stored_date_ms',
]
