from __future__ import annotations
from flask import abort


def _sort_key(value):
    # None sorts before any value; strings compare case-insensitively
    if value is None:
        return (0, '')
    if isinstance(value, str):
        return (1, value.lower())
    return (1, value)


def apply_multi_sort(rows: list, sort_expr: str | None, allowed: set, tie_breaker: str, default: str | None = None):
    """Apply multi-field sort to a list of dict records.
    sort_expr: comma-separated tokens, each optionally prefixed with '-'.
    allowed: set of sortable field keys.
    tie_breaker: key appended (ascending) for deterministic ordering.
    default: sort expression used when sort_expr is empty.
    """
    sort_expr = sort_expr or default
    tokens = []
    for raw in (sort_expr or '').split(','):
        token = raw.strip()
        if not token:
            continue
        desc = token.startswith('-')
        key = token[1:] if desc else token
        if key not in allowed:
            abort(400, description=f'Invalid sort field {key}')
        tokens.append((key, desc))
    out = sorted(rows, key=lambda r: _sort_key(r.get(tie_breaker)))
    # Stable sorts applied from the least significant key
    for key, desc in reversed(tokens):
        out = sorted(out, key=lambda r: _sort_key(r.get(key)), reverse=desc)
    return out
