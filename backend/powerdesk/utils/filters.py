from __future__ import annotations
from typing import Any, Dict, List
from flask import abort

def apply_filters(rows: List[dict], specs: Dict[str, Dict[str, Any]], params: Dict[str, Any]) -> List[dict]:
    """Generic filter builder over store records.

    specs: { param_name: { 'op': callable(rows, value)->rows, 'coerce': type/func, 'validate': callable(optional) } }
    Empty parameters are ignored, like absent ones.
    """
    for name, meta in specs.items():
        if name not in params or params[name] in (None, ''):
            continue
        val = params[name]
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except Exception:
                abort(400, description=f'{name} invalid')
        if 'validate' in meta and not meta['validate'](val):
            abort(400, description=f'{name} invalid')
        rows = meta['op'](rows, val)
    return rows


def text_search(fields):
    """Filter op matching a case-insensitive substring in any of ``fields``."""
    def op(rows, value):
        needle = str(value).strip().lower()
        if not needle:
            return rows
        return [r for r in rows if any(needle in str(r.get(f) or '').lower() for f in fields)]
    return op


def equals(field):
    def op(rows, value):
        return [r for r in rows if r.get(field) == value]
    return op
