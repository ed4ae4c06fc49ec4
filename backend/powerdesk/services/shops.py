from __future__ import annotations
"""Generator service centers (``shops/{id}``) and the operators assigned to them."""
from typing import Any, Dict, List, Optional

from powerdesk.services.notifications import now_ms

SHOP_STATUSES = ('active', 'suspended', 'maintenance')
TEXT_FIELDS = ('name', 'code', 'address', 'city', 'district', 'contact_number', 'notes')

# API field -> stored key
STORED_KEYS = {
    'name': 'name',
    'code': 'code',
    'address': 'address',
    'city': 'city',
    'district': 'district',
    'contact_number': 'contactNumber',
    'operator_id': 'operatorId',
    'status': 'status',
    'notes': 'notes',
}


class ShopValidationError(ValueError):
    pass


def list_operators(store) -> List[Dict[str, str]]:
    """Users whose stored role is ``operator`` (any case)."""
    users = store.get('users') or {}
    options = []
    for uid, data in users.items():
        if not isinstance(data, dict):
            continue
        if str(data.get('role') or '').lower() != 'operator':
            continue
        options.append({
            'uid': uid,
            'name': data.get('name') or data.get('email') or 'Operator',
            'email': data.get('email') or '',
            'contact_number': data.get('contactNumber') or '',
        })
    return options


def clean_shop_form(data: Dict[str, Any]) -> Dict[str, Any]:
    """Trimmed form values; raises ShopValidationError with the form's message."""
    values = {f: str(data.get(f) or '').strip() for f in TEXT_FIELDS}
    values['operator_id'] = str(data.get('operator_id') or '')
    values['status'] = data.get('status') or 'active'
    if not values['name'] or not values['code']:
        raise ShopValidationError('Please provide both shop name and code.')
    if not values['operator_id']:
        raise ShopValidationError('Please select an operator for the shop.')
    if values['status'] not in SHOP_STATUSES:
        raise ShopValidationError('status invalid')
    return values


def _record_fields(store, values: Dict[str, Any]) -> Dict[str, Any]:
    operator = {o['uid']: o for o in list_operators(store)}.get(values['operator_id'])
    record = {STORED_KEYS[k]: v for k, v in values.items()}
    record['operatorName'] = operator['name'] if operator else ''
    record['operatorEmail'] = operator['email'] if operator else ''
    record['operatorContact'] = operator['contact_number'] if operator else ''
    return record


def create_shop(store, data: Dict[str, Any]) -> Dict[str, Any]:
    values = clean_shop_form(data)
    record = _record_fields(store, values)
    ts = now_ms()
    record.update({'createdAt': ts, 'updatedAt': ts})
    key = store.push('shops', record)
    store.update(f'shops/{key}', {'id': key})
    record['id'] = key
    return shop_json(key, record)


def update_shop(store, shop_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    values = clean_shop_form(data)
    updates = _record_fields(store, values)
    updates['updatedAt'] = now_ms()
    store.update(f'shops/{shop_id}', updates)
    return shop_json(shop_id, store.get(f'shops/{shop_id}') or updates)


def delete_shop(store, shop_id: str) -> None:
    store.remove(f'shops/{shop_id}')


def get_shop(store, shop_id: str) -> Optional[Dict[str, Any]]:
    data = store.get(f'shops/{shop_id}')
    if not isinstance(data, dict) or 'name' not in data:
        return None
    return shop_json(shop_id, data)


def shop_json(key: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'id': key,
        'name': data.get('name') or '',
        'code': data.get('code') or key,
        'address': data.get('address') or '',
        'city': data.get('city') or '',
        'district': data.get('district') or '',
        'contact_number': data.get('contactNumber') or '',
        'operator_id': data.get('operatorId') or '',
        'operator_name': data.get('operatorName') or '',
        'operator_email': data.get('operatorEmail') or '',
        'operator_contact': data.get('operatorContact') or '',
        'status': data.get('status') or 'active',
        'notes': data.get('notes') or '',
        'created_at': data.get('createdAt'),
        'updated_at': data.get('updatedAt'),
    }


def all_shops(store) -> List[Dict[str, Any]]:
    raw = store.get('shops') or {}
    return [shop_json(key, data) for key, data in raw.items() if isinstance(data, dict)]


def shop_counts(rows: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {'total': len(rows)}
    for status in SHOP_STATUSES:
        counts[status] = sum(1 for r in rows if r['status'] == status)
    return counts


__all__ = [
    'SHOP_STATUSES', 'ShopValidationError', 'list_operators', 'clean_shop_form', 'create_shop',
    'update_shop', 'delete_shop', 'get_shop', 'shop_json', 'all_shops', 'shop_counts',
]
