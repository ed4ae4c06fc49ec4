import pytest
from powerdesk import get_store
from powerdesk.services.notifications import (
    create_notification, create_invoice_notification, notify_multiple_users, list_notifications,
    mark_all_read,
)
from tests.test_utils_seed import MemoryStore, ensure_account
from tests.test_lifecycle_helpers import login_headers


def test_create_notification_record_shape():
    store = MemoryStore()
    key = create_notification(store, 'u1', {'type': 'new-task', 'title': 'New Task', 'message': 'Check GEN-1', 'priority': 'low'})
    record = store.docs[f'notifications/u1/{key}']
    assert record['read'] is False
    assert record['hasIndicator'] is False
    assert isinstance(record['createdAt'], int)


def test_invoice_notification_templates():
    store = MemoryStore()
    create_invoice_notification(store, 'u1', 'paid', 'INV-7', 'Acme')
    (record,) = store.get('notifications/u1').values()
    assert record['type'] == 'invoice-paid'
    assert record['title'] == 'Invoice Paid'
    assert record['message'] == 'Invoice INV-7 for Acme has been marked as paid.'
    assert record['priority'] == 'high'


def test_failures_are_raised_to_the_caller():
    store = MemoryStore(fail_when=lambda op, path: RuntimeError('down'))
    with pytest.raises(RuntimeError):
        create_invoice_notification(store, 'u1', 'created', 'INV-1', 'Acme')


@pytest.mark.parametrize('field,value', [('type', 'birthday'), ('priority', 'urgent')])
def test_unknown_type_or_priority_rejected(field, value):
    store = MemoryStore()
    payload = {'type': 'new-task', 'title': 'New Task', 'message': 'm', 'priority': 'low'}
    payload[field] = value
    with pytest.raises(ValueError):
        create_notification(store, 'u1', payload)
    assert store.calls == []


def test_notify_multiple_users():
    store = MemoryStore()
    keys = notify_multiple_users(store, ['a', 'b'], {'type': 'service-due', 'title': 'Service Due', 'message': 'm', 'priority': 'medium'})
    assert len(keys) == 2
    assert store.get('notifications/a') and store.get('notifications/b')


def test_listing_views_and_unread_count():
    store = MemoryStore({
        'notifications/u1/k1': {'type': 'new-task', 'title': 't1', 'message': 'm', 'priority': 'low', 'createdAt': 1, 'read': True},
        'notifications/u1/k2': {'type': 'new-task', 'title': 't2', 'message': 'm', 'priority': 'low', 'createdAt': 2, 'read': False},
    })
    listed = list_notifications(store, 'u1')
    assert [n['id'] for n in listed['data']] == ['k2', 'k1']
    assert listed['unread_count'] == 1
    assert [n['id'] for n in list_notifications(store, 'u1', 'read')['data']] == ['k1']
    assert mark_all_read(store, 'u1') == 1
    assert list_notifications(store, 'u1')['unread_count'] == 0


def test_notification_routes_are_per_user(client):
    headers = login_headers(client, 'notes.owner@example.com', role='operator')
    owner_uid = ensure_account('notes.owner@example.com', role='operator')
    other_uid = ensure_account('notes.other@example.com', role='operator')
    store = get_store()
    mine = create_notification(store, owner_uid, {'type': 'service-due', 'title': 'Due', 'message': 'GEN-2', 'priority': 'medium'})
    theirs = create_notification(store, other_uid, {'type': 'service-due', 'title': 'Due', 'message': 'GEN-3', 'priority': 'medium'})

    listed = client.get('/notifications', headers=headers).get_json()
    assert [n['id'] for n in listed['data']] == [mine]
    assert listed['unread_count'] == 1

    assert client.post(f'/notifications/{theirs}/read', headers=headers).status_code == 404
    assert client.post(f'/notifications/{mine}/read', headers=headers).status_code == 200
    assert client.get('/notifications?view=unread', headers=headers).get_json()['data'] == []
    assert client.get('/notifications?view=archived', headers=headers).status_code == 400

    assert client.post('/notifications/read-all', headers=headers).get_json() == {'updated': 0}
    assert client.delete(f'/notifications/{mine}', headers=headers).get_json() == {'status': 'deleted'}
    assert client.get('/notifications', headers=headers).get_json()['data'] == []
    assert store.get(f'notifications/{other_uid}/{theirs}') is not None


def test_notifications_require_sign_in(client):
    assert client.get('/notifications').status_code == 401
