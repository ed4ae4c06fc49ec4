from __future__ import annotations
from flask import Blueprint, request, abort
from powerdesk import get_store
from powerdesk.constants.roles import Role
from powerdesk.decorators.auth import require_roles
from powerdesk.services.shops import (
    SHOP_STATUSES, ShopValidationError, all_shops, create_shop, delete_shop, get_shop, list_operators,
    shop_counts, update_shop,
)
from powerdesk.utils.filters import apply_filters, text_search, equals
from powerdesk.utils.listing import apply_pagination, build_list_payload
from powerdesk.utils.sorting import apply_multi_sort
from powerdesk.utils.validation import require_json_object

shops_bp = Blueprint('shops', __name__)


@shops_bp.get('')
@require_roles(Role.ADMIN)
def list_shops():
    rows = all_shops(get_store())
    counts = shop_counts(rows)
    filter_specs = {
        'search': {'op': text_search(('name', 'code', 'city', 'district'))},
        'status': {'op': equals('status'), 'validate': lambda v: v in SHOP_STATUSES},
    }
    rows = apply_filters(rows, filter_specs, request.args)
    allowed = {'name', 'code', 'city', 'district', 'status', 'created_at', 'updated_at'}
    rows = apply_multi_sort(rows, request.args.get('sort'), allowed, 'id', default='name')
    page, total, limit, offset = apply_pagination(rows)
    return build_list_payload(page, total, limit, offset, counts=counts)


@shops_bp.get('/operators')
@require_roles(Role.ADMIN)
def operators():
    return {'data': list_operators(get_store())}


@shops_bp.post('')
@require_roles(Role.ADMIN)
def create():
    try:
        shop = create_shop(get_store(), require_json_object())
    except ShopValidationError as e:
        abort(400, description=str(e))
    return shop, 201


@shops_bp.put('/<shop_id>')
@require_roles(Role.ADMIN)
def update(shop_id: str):
    if get_shop(get_store(), shop_id) is None:
        abort(404, description='Shop not found')
    try:
        return update_shop(get_store(), shop_id, require_json_object())
    except ShopValidationError as e:
        abort(400, description=str(e))


@shops_bp.delete('/<shop_id>')
@require_roles(Role.ADMIN)
def delete(shop_id: str):
    if get_shop(get_store(), shop_id) is None:
        abort(404, description='Shop not found')
    delete_shop(get_store(), shop_id)
    return {'status': 'deleted'}
