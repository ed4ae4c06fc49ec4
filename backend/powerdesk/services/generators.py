from __future__ import annotations
"""Generator records (``generators/{key}``) and their assigned shops.

A record's ``id`` normally equals its store key, but records written by other
clients may carry a different ``id``; lookups accept either.
"""
import calendar
from datetime import date as date_cls
from typing import Any, Dict, List, Optional, Tuple

from powerdesk.models.invoice import from_input_date, parse_input_date, stored_date_ms
from powerdesk.services.notifications import now_ms

ACTIVE = 'Active'
UNDER_REPAIR = 'Under Repair'
UNUSABLE = 'Unusable'
GENERATOR_STATUSES = (ACTIVE, UNDER_REPAIR, UNUSABLE)
LOCATIONS = ('Up', 'Down')

REQUIRED_MESSAGE = 'Brand, Serial Number and Assigned Shop are required.'


class GeneratorValidationError(ValueError):
    pass


def normalize_status(value: Any) -> str:
    v = str(value or '').lower().replace('_', ' ')
    if 'unusable' in v:
        return UNUSABLE
    if 'under' in v or 'repair' in v:
        return UNDER_REPAIR
    return ACTIVE


def status_color(status: str) -> str:
    return {UNUSABLE: 'red', UNDER_REPAIR: 'yellow'}.get(normalize_status(status), 'green')


def _title(value: Any) -> str:
    v = str(value or '').strip()
    return v[:1].upper() + v[1:].lower() if v else ''


def _form_day(value: Any) -> Optional[date_cls]:
    if value in (None, ''):
        return None
    try:
        return parse_input_date(value)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def months_between(start: Optional[date_cls], end: Optional[date_cls]) -> Optional[int]:
    """Whole months from ``start`` to ``end``; never negative."""
    if start is None or end is None:
        return None
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def add_months(start: date_cls, months: int) -> date_cls:
    index = start.month - 1 + months
    year, month = start.year + index // 12, index % 12 + 1
    return date_cls(year, month, min(start.day, calendar.monthrange(year, month)[1]))


def clean_generator_form(data: Dict[str, Any], editing: bool = False) -> Dict[str, Any]:
    """Stored fields for a create/edit form; raises GeneratorValidationError."""
    brand = str(data.get('brand') or '').strip()
    serial_no = str(data.get('serial_no') or '').strip()
    shop_id = str(data.get('shop_id') or '').strip()
    if not brand or not serial_no or not shop_id:
        raise GeneratorValidationError(REQUIRED_MESSAGE)

    status = ACTIVE
    if editing and data.get('status') is not None:
        if data['status'] not in GENERATOR_STATUSES:
            raise GeneratorValidationError('status invalid')
        status = data['status']

    parts = data.get('extracted_parts') or []
    if not isinstance(parts, list):
        raise GeneratorValidationError('extracted_parts invalid')

    installed = _form_day(data.get('installed_date'))
    issued = _form_day(data.get('issued_date'))
    return {
        'brand': brand,
        'size': str(data.get('size') or '').strip() or None,
        'serial_no': serial_no,
        'issued_date': from_input_date(issued.isoformat()) if issued else None,
        'installed_date': from_input_date(installed.isoformat()) if installed else None,
        'shop_id': shop_id,
        'location': 'Down' if str(data.get('location') or '').lower() == 'down' else 'Up',
        'hasAutoStart': bool(data.get('has_auto_start')),
        'hasBatteryCharger': bool(data.get('has_battery_charger')),
        'warranty': months_between(installed, _form_day(data.get('warranty_expire'))),
        # parts pulled from a unit are only kept once it is written off
        'extracted_parts': [str(p) for p in parts] if editing and status == UNUSABLE else [],
        'status': status,
    }


def shop_names(store) -> Dict[str, str]:
    """Shop key -> display name, with city or district when known."""
    names = {}
    for key, data in (store.get('shops') or {}).items():
        if not isinstance(data, dict):
            continue
        label = data.get('name') or data.get('code') or key
        where = data.get('city') or data.get('district')
        names[key] = f'{label} ({where})' if where else label
    return names


def generator_json(key: str, data: Dict[str, Any], names: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    status = normalize_status(data.get('status'))
    installed_ms = stored_date_ms(data.get('installed_date'))
    warranty = data.get('warranty')
    expires = None
    if installed_ms is not None and isinstance(warranty, (int, float)) and warranty > 0:
        expires = add_months(parse_input_date(installed_ms), int(warranty)).isoformat()
    shop_id = data.get('shop_id') or ''
    return {
        'id': str(data.get('id') or key),
        'db_key': key,
        'brand': str(data.get('brand') or ''),
        'size': data.get('size') or '',
        'serial_no': str(data.get('serialNumber') or data.get('serial_no') or ''),
        'issued_date': stored_date_ms(data.get('issued_date')),
        'installed_date': installed_ms,
        'status': status,
        'status_color': status_color(status),
        'location': _title(data.get('location')),
        'shop_id': shop_id,
        'shop': (names or {}).get(shop_id, shop_id) if shop_id else '',
        'has_auto_start': bool(data.get('hasAutoStart')),
        'has_battery_charger': bool(data.get('hasBatteryCharger')),
        'warranty': warranty,
        'warranty_expires': expires,
        'extracted_parts': [str(p) for p in data.get('extracted_parts') or []],
        'created_at': data.get('createdAt'),
        'updated_at': data.get('updatedAt'),
    }


def all_generators(store) -> List[Dict[str, Any]]:
    """Every generator row, ordered by id."""
    names = shop_names(store)
    raw = store.get('generators') or {}
    rows = [generator_json(key, data, names) for key, data in raw.items() if isinstance(data, dict)]
    rows.sort(key=lambda r: r['id'])
    return rows


def find_generator(store, generator_id: str) -> Optional[Tuple[str, Dict[str, Any]]]:
    """``(key, record)`` by store key, else by the record's ``id`` field; None when absent."""
    if not generator_id:
        return None
    data = store.get(f'generators/{generator_id}')
    if isinstance(data, dict):
        return generator_id, data
    raw = store.get('generators') or {}
    for key in sorted(raw):
        if isinstance(raw[key], dict) and str(raw[key].get('id')) == generator_id:
            return key, raw[key]
    return None


def get_generator(store, generator_id: str) -> Optional[Dict[str, Any]]:
    found = find_generator(store, generator_id)
    if found is None:
        return None
    return generator_json(found[0], found[1], shop_names(store))


def create_generator(store, data: Dict[str, Any]) -> Dict[str, Any]:
    record = clean_generator_form(data)
    ts = now_ms()
    record.update({'createdAt': ts, 'updatedAt': ts})
    key = store.push('generators', record)
    store.update(f'generators/{key}', {'id': key})
    record['id'] = key
    return generator_json(key, record, shop_names(store))


def update_generator(store, key: str, record: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    updates = clean_generator_form(data, editing=True)
    updates['id'] = str(record.get('id') or key)
    updates['updatedAt'] = now_ms()
    store.update(f'generators/{key}', updates)
    return generator_json(key, store.get(f'generators/{key}') or updates, shop_names(store))


def delete_generator(store, key: str) -> None:
    store.remove(f'generators/{key}')


def generator_counts(rows: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {'total': len(rows)}
    for status in GENERATOR_STATUSES:
        counts[status.lower().replace(' ', '_')] = sum(1 for r in rows if r['status'] == status)
    return counts


__all__ = [
    'GENERATOR_STATUSES', 'LOCATIONS', 'REQUIRED_MESSAGE', 'GeneratorValidationError', 'normalize_status',
    'status_color', 'months_between', 'add_months', 'clean_generator_form', 'shop_names', 'generator_json',
    'all_generators', 'find_generator', 'get_generator', 'create_generator', 'update_generator',
    'delete_generator', 'generator_counts',
]
