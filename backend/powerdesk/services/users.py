from __future__ import annotations
"""User accounts: an identity-provider account plus a ``users/{uid}`` profile.

The profile's ``role`` is the stored (long) role name read back by session role
resolution.
"""
import logging
from typing import Any, Dict, List

from powerdesk.constants.roles import STORED_ROLE_VALUES
from powerdesk.services.identity import AuthError, MIN_PASSWORD_LENGTH
from powerdesk.services.notifications import now_ms

log = logging.getLogger(__name__)

ROLE_LABELS = {'admin': 'Admin', 'technician': 'Technician', 'operator': 'Operator', 'inventory': 'Inventory'}
EMAIL_IN_USE_MESSAGE = 'That email address is already in use.'


class UserValidationError(ValueError):
    pass


def validate_new_user(data: Dict[str, Any]) -> Dict[str, Any]:
    name = str(data.get('name') or '').strip()
    email = str(data.get('email') or '').strip()
    password = data.get('password') or ''
    role = data.get('role') or 'operator'
    if not name:
        raise UserValidationError('Full name is required.')
    if not email:
        raise UserValidationError('Email address is required.')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise UserValidationError(f'Please enter a password with at least {MIN_PASSWORD_LENGTH} characters.')
    if role not in STORED_ROLE_VALUES:
        raise UserValidationError('role invalid')
    return {
        'name': name,
        'email': email.lower(),
        'password': password,
        'role': role,
        'active': bool(data.get('active', True)),
    }


def create_user(provider, store, data: Dict[str, Any]) -> Dict[str, Any]:
    """Create the account, then its profile; the account is removed again if the profile write fails."""
    values = validate_new_user(data)
    user = provider.create_account(values['email'], values['password'])
    profile = {
        'id': user.uid,
        'email': values['email'],
        'name': values['name'],
        'role': values['role'],
        'status': 'active' if values['active'] else 'disabled',
        'createdAt': now_ms(),
    }
    try:
        store.set(f'users/{user.uid}', profile)
    except Exception:
        log.error('Profile write failed for %s; removing account', user.uid, exc_info=True)
        try:
            provider.delete_account(user.uid)
        except Exception:
            log.error('Account rollback failed for %s', user.uid, exc_info=True)
        raise
    return user_json(user.uid, profile)


def update_user(store, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
    role = data.get('role')
    if role is not None and role not in STORED_ROLE_VALUES:
        raise UserValidationError('role invalid')
    updates: Dict[str, Any] = {'updatedAt': now_ms()}
    if 'name' in data:
        updates['name'] = str(data.get('name') or '').strip()
    if 'email' in data:
        updates['email'] = str(data.get('email') or '').strip().lower()
    if role is not None:
        updates['role'] = role
    if 'disabled' in data:
        updates['status'] = 'disabled' if data.get('disabled') else 'active'
    store.update(f'users/{uid}', updates)
    return user_json(uid, store.get(f'users/{uid}') or updates)


def delete_user(store, uid: str) -> None:
    store.remove(f'users/{uid}')


def user_json(uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
    raw_role = data.get('role') or 'admin'
    status = 'disabled' if data.get('status') == 'disabled' else 'active'
    return {
        'id': data.get('id') or uid,
        'name': data.get('name') or '',
        'email': data.get('email') or '',
        'role': raw_role,
        'role_label': ROLE_LABELS.get(raw_role, 'Admin'),
        'status': status,
        'status_label': 'Inactive' if status == 'disabled' else 'Active',
        'created_at': data.get('createdAt'),
    }


def list_users(store) -> List[Dict[str, Any]]:
    raw = store.get('users') or {}
    rows = [user_json(uid, data) for uid, data in raw.items() if isinstance(data, dict)]
    rows.sort(key=lambda r: r['email'])
    return rows


def role_counts(rows: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {'total': len(rows)}
    for value, label in ROLE_LABELS.items():
        counts[value] = sum(1 for r in rows if r['role_label'] == label)
    return counts


__all__ = [
    'UserValidationError', 'validate_new_user', 'create_user', 'update_user', 'delete_user',
    'user_json', 'list_users', 'role_counts', 'EMAIL_IN_USE_MESSAGE', 'AuthError',
]
