from __future__ import annotations
from typing import List, Tuple
from flask import request, abort
from powerdesk.config.pagination import normalize_pagination


def apply_pagination(rows: List[dict]) -> Tuple[List[dict], int, int, int]:
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = len(rows)
    return rows[offset:offset + limit], total, limit, offset


def build_list_payload(rows: list, total: int, limit: int, offset: int, **extra):
    payload = {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }
    payload.update(extra)
    return payload
