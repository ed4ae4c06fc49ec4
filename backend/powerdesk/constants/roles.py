"""Role definitions shared by session resolution, panel routing and user management.

Stored roles (``users/{uid}.role``) use the long names offered by the user form;
the dashboard works with the short client tags of :class:`Role`.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List


class Role(str, Enum):
    ADMIN = 'admin'
    OPERATE = 'operate'
    TECH = 'tech'
    INVENT = 'invent'


STORED_ROLE_TO_CLIENT: Dict[str, Role] = {
    'operator': Role.OPERATE,
    'technician': Role.TECH,
    'inventory': Role.INVENT,
}

# Roles an administrator can assign, in form order
STORED_ROLES: List[Dict[str, str]] = [
    {'value': 'admin', 'label': 'Admin', 'description': 'Full system access to manage the platform'},
    {'value': 'technician', 'label': 'Technician', 'description': 'Maintains and services generators'},
    {'value': 'operator', 'label': 'Operator', 'description': 'Assigned to a generator center'},
    {'value': 'inventory', 'label': 'Inventory', 'description': 'Manages spare parts and inventory records'},
]
STORED_ROLE_VALUES = tuple(r['value'] for r in STORED_ROLES)


def map_role_to_client(raw: Any) -> Role:
    """Map a stored role string to its client tag.

    Total: anything other than operator/technician/inventory (any case), including
    missing or unknown values, maps to ``Role.ADMIN``.
    """
    return STORED_ROLE_TO_CLIENT.get(str(raw or '').lower(), Role.ADMIN)


def coerce_role(value: Any) -> Role:
    """Accept a Role or its tag; unknown tags fall back to admin like the mapper."""
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value))
    except ValueError:
        return Role.ADMIN


__all__ = ['Role', 'STORED_ROLE_TO_CLIENT', 'STORED_ROLES', 'STORED_ROLE_VALUES', 'map_role_to_client', 'coerce_role']
