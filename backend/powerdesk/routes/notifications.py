from __future__ import annotations
from flask import Blueprint, request, abort
from powerdesk import get_store
from powerdesk.decorators.auth import load_session, require_session
from powerdesk.services.notifications import (
    list_notifications, mark_read, mark_all_read, delete_notification, notification_exists,
)
from powerdesk.utils.validation import validate_status

notif_bp = Blueprint('notifications', __name__)

VIEWS = ('all', 'unread', 'read')


def _owned(notification_id: str) -> str:
    uid = load_session().uid
    if not notification_exists(get_store(), uid, notification_id):
        abort(404, description='Notification not found')
    return uid


@notif_bp.get('')
@require_session
def list_own():
    view = validate_status(request.args.get('view') or 'all', VIEWS, field_name='view')
    return list_notifications(get_store(), load_session().uid, view)


@notif_bp.post('/read-all')
@require_session
def read_all():
    return {'updated': mark_all_read(get_store(), load_session().uid)}


@notif_bp.post('/<notification_id>/read')
@require_session
def read_one(notification_id: str):
    mark_read(get_store(), _owned(notification_id), notification_id)
    return {'id': notification_id, 'is_read': True}


@notif_bp.delete('/<notification_id>')
@require_session
def delete_one(notification_id: str):
    delete_notification(get_store(), _owned(notification_id), notification_id)
    return {'status': 'deleted'}
