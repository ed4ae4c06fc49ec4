from __future__ import annotations
from flask import Blueprint, request, abort
from powerdesk import get_store
from powerdesk.constants.roles import Role
from powerdesk.decorators.auth import require_roles, require_session
from powerdesk.services.generators import (
    GENERATOR_STATUSES, LOCATIONS, GeneratorValidationError, all_generators, create_generator,
    delete_generator, find_generator, generator_counts, update_generator,
)
from powerdesk.utils.filters import apply_filters, text_search, equals
from powerdesk.utils.listing import apply_pagination, build_list_payload
from powerdesk.utils.sorting import apply_multi_sort
from powerdesk.utils.validation import require_json_object

generators_bp = Blueprint('generators', __name__)


@generators_bp.get('')
@require_session
def list_generators():
    rows = all_generators(get_store())
    counts = generator_counts(rows)
    filter_specs = {
        'search': {'op': text_search(('id', 'brand', 'serial_no'))},
        'status': {'op': equals('status'), 'validate': lambda v: v in GENERATOR_STATUSES},
        'brand': {'op': equals('brand')},
        'location': {'op': equals('location'), 'validate': lambda v: v in LOCATIONS},
        'shop_id': {'op': equals('shop_id')},
    }
    rows = apply_filters(rows, filter_specs, request.args)
    allowed = {'id', 'brand', 'serial_no', 'status', 'installed_date', 'location', 'updated_at'}
    rows = apply_multi_sort(rows, request.args.get('sort'), allowed, 'db_key', default='id')
    page, total, limit, offset = apply_pagination(rows)
    return build_list_payload(page, total, limit, offset, counts=counts)


@generators_bp.post('')
@require_roles(Role.ADMIN)
def create():
    try:
        generator = create_generator(get_store(), require_json_object())
    except GeneratorValidationError as e:
        abort(400, description=str(e))
    return generator, 201


@generators_bp.put('/<generator_id>')
@require_roles(Role.ADMIN)
def update(generator_id: str):
    found = find_generator(get_store(), generator_id)
    if found is None:
        abort(404, description='Generator not found')
    key, record = found
    try:
        return update_generator(get_store(), key, record, require_json_object())
    except GeneratorValidationError as e:
        abort(400, description=str(e))


@generators_bp.delete('/<generator_id>')
@require_roles(Role.ADMIN)
def delete(generator_id: str):
    found = find_generator(get_store(), generator_id)
    if found is None:
        abort(404, description='Generator not found')
    delete_generator(get_store(), found[0])
    return {'status': 'deleted'}
