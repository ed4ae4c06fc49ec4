from __future__ import annotations
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

log = logging.getLogger(__name__)

NOTIFICATION_TYPES = (
    'service-due', 'battery-return', 'task-reminder', 'repair-completed', 'service-overdue',
    'new-task', 'invoice-created', 'invoice-updated', 'invoice-paid',
)
PRIORITIES = ('high', 'medium', 'low')

INVOICE_NOTIFICATIONS = {
    'created': {
        'type': 'invoice-created',
        'title': 'Invoice Created',
        'message': 'Invoice {invoice_id} for {company_name} has been created successfully.',
        'priority': 'medium',
    },
    'updated': {
        'type': 'invoice-updated',
        'title': 'Invoice Updated',
        'message': 'Invoice {invoice_id} for {company_name} has been updated.',
        'priority': 'medium',
    },
    'paid': {
        'type': 'invoice-paid',
        'title': 'Invoice Paid',
        'message': 'Invoice {invoice_id} for {company_name} has been marked as paid.',
        'priority': 'high',
    },
}


def now_ms() -> int:
    return int(time.time() * 1000)


def create_notification(store, user_id: str, notification: Dict[str, Any]) -> str:
    """Append a notification record under ``notifications/{user_id}``; returns its key.

    Failures are logged and re-raised; callers attached to a primary write catch them.
    """
    if notification['type'] not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type {notification['type']}")
    if notification['priority'] not in PRIORITIES:
        raise ValueError(f"Unknown notification priority {notification['priority']}")
    record = {
        'type': notification['type'],
        'title': notification['title'],
        'message': notification['message'],
        'priority': notification['priority'],
        'createdAt': now_ms(),
        'read': notification.get('read', False),
        'hasIndicator': notification.get('hasIndicator', False),
    }
    try:
        return store.push(f'notifications/{user_id}', record)
    except Exception:
        log.error('Failed to create notification for %s', user_id, exc_info=True)
        raise


def create_invoice_notification(store, user_id: str, action: str, invoice_id: str, company_name: str) -> str:
    template = INVOICE_NOTIFICATIONS[action]
    return create_notification(store, user_id, {
        'type': template['type'],
        'title': template['title'],
        'message': template['message'].format(invoice_id=invoice_id, company_name=company_name),
        'priority': template['priority'],
    })


def notify_multiple_users(store, user_ids: Iterable[str], notification: Dict[str, Any]) -> List[str]:
    return [create_notification(store, uid, notification) for uid in user_ids]


def list_notifications(store, user_id: str, view: str = 'all') -> Dict[str, Any]:
    """Newest-first notifications of one user, filtered by all/unread/read."""
    raw = store.get(f'notifications/{user_id}') or {}
    rows = []
    for key, data in raw.items():
        if not isinstance(data, dict):
            continue
        rows.append({
            'id': key,
            'type': data.get('type', ''),
            'title': data.get('title', ''),
            'message': data.get('message', ''),
            'priority': data.get('priority', 'low'),
            'created_at': data.get('createdAt'),
            'is_read': bool(data.get('read', False)),
            'has_indicator': bool(data.get('hasIndicator', False)),
        })
    rows.sort(key=lambda r: (r['created_at'] or 0, r['id']), reverse=True)
    unread = sum(1 for r in rows if not r['is_read'])
    if view == 'unread':
        rows = [r for r in rows if not r['is_read']]
    elif view == 'read':
        rows = [r for r in rows if r['is_read']]
    return {'data': rows, 'unread_count': unread}


def mark_read(store, user_id: str, notification_id: str) -> None:
    store.update(f'notifications/{user_id}/{notification_id}', {'read': True})


def mark_all_read(store, user_id: str) -> int:
    unread = list_notifications(store, user_id, 'unread')['data']
    for row in unread:
        mark_read(store, user_id, row['id'])
    return len(unread)


def delete_notification(store, user_id: str, notification_id: str) -> None:
    store.remove(f'notifications/{user_id}/{notification_id}')


def notification_exists(store, user_id: str, notification_id: Optional[str]) -> bool:
    return bool(notification_id) and store.exists(f'notifications/{user_id}/{notification_id}')


__all__ = [
    'NOTIFICATION_TYPES', 'PRIORITIES', 'INVOICE_NOTIFICATIONS', 'create_notification',
    'create_invoice_notification', 'notify_multiple_users', 'list_notifications', 'mark_read',
    'mark_all_read', 'delete_notification', 'notification_exists', 'now_ms',
]
