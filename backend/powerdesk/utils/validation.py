from __future__ import annotations
"""Reusable validation helpers for request payloads.

Centralises enum-like field checks so routes share one 400 error shape.
"""
from typing import Iterable
from flask import abort


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or aborts with 400.
    """
    if new_status not in allowed:
        abort(400, description=f"{field_name} invalid")
    return new_status


def require_json_object():
    """Return the request JSON body as a dict or abort with 400."""
    from flask import request
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        abort(400, description='JSON object body required')
    return data

__all__ = ['validate_status', 'require_json_object']
