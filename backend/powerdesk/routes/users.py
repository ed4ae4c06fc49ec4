from __future__ import annotations
from flask import Blueprint, request, abort
from powerdesk import get_db, get_store
from powerdesk.constants.roles import Role, STORED_ROLES
from powerdesk.decorators.auth import require_roles
from powerdesk.services.identity import IdentityProvider, AuthError
from powerdesk.services.users import (
    UserValidationError, EMAIL_IN_USE_MESSAGE, create_user, delete_user, list_users, role_counts, update_user,
)
from powerdesk.utils.filters import apply_filters, text_search, equals
from powerdesk.utils.listing import apply_pagination, build_list_payload
from powerdesk.utils.validation import require_json_object

users_bp = Blueprint('users', __name__)


@users_bp.get('')
@require_roles(Role.ADMIN)
def list_all():
    rows = list_users(get_store())
    counts = role_counts(rows)
    filter_specs = {
        'search': {'op': text_search(('name', 'email'))},
        'role': {'op': equals('role')},
        'status': {'op': equals('status'), 'validate': lambda v: v in ('active', 'disabled')},
    }
    rows = apply_filters(rows, filter_specs, request.args)
    page, total, limit, offset = apply_pagination(rows)
    return build_list_payload(page, total, limit, offset, counts=counts)


@users_bp.get('/roles')
@require_roles(Role.ADMIN)
def assignable_roles():
    return {'data': STORED_ROLES}


@users_bp.post('')
@require_roles(Role.ADMIN)
def create():
    # a separate provider, so the caller's own session is left untouched
    provider = IdentityProvider(get_db)
    try:
        user = create_user(provider, get_store(), require_json_object())
    except UserValidationError as e:
        abort(400, description=str(e))
    except AuthError as e:
        if e.code == 'auth/email-already-in-use':
            abort(409, description=EMAIL_IN_USE_MESSAGE)
        abort(400, description=e.message)
    return user, 201


@users_bp.put('/<uid>')
@require_roles(Role.ADMIN)
def update(uid: str):
    if not get_store().exists(f'users/{uid}'):
        abort(404, description='User not found')
    try:
        return update_user(get_store(), uid, require_json_object())
    except UserValidationError as e:
        abort(400, description=str(e))


@users_bp.delete('/<uid>')
@require_roles(Role.ADMIN)
def delete(uid: str):
    if not get_store().exists(f'users/{uid}'):
        abort(404, description='User not found')
    delete_user(get_store(), uid)
    return {'status': 'deleted'}
