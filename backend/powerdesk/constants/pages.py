"""Panel and page definitions.

Each panel shell owns a fixed page set; page values are the names used in the
``?page=`` URL parameter of the admin, operator and inventory panels. Pages outside
a panel's set are still navigable and render the panel placeholder.
"""
from __future__ import annotations
from enum import Enum
from typing import Dict, Optional, Type

from powerdesk.constants.roles import Role, coerce_role


class Panel(str, Enum):
    ADMIN = 'admin'
    OPERATOR = 'operator'
    TECHNICIAN = 'technician'
    INVENTORY = 'inventory'


class AdminPage(str, Enum):
    DASHBOARD = 'Dashboard'
    GENERATORS = 'Generators'
    BATTERIES = 'Batteries'
    TASKS = 'Tasks'
    SERVICES = 'Services'
    SHOPS = 'Shops'
    INVOICES = 'Invoices'
    CREATE_INVOICE = 'CreateInvoice'
    REPORTS = 'Reports'
    USERS = 'Users'
    NOTIFICATIONS = 'Notifications'
    GENERATOR_DETAILS = 'GeneratorDetails'


class OperatorPage(str, Enum):
    DASHBOARD = 'Dashboard'
    GENERATORS = 'Generators'
    BATTERIES = 'Batteries'
    REPORTS = 'Reports'
    NOTIFICATIONS = 'Notifications'


class TechnicianPage(str, Enum):
    DASHBOARD = 'Dashboard'
    REPORTS = 'Reports'
    TASKS = 'Tasks'
    SERVICES = 'Services'
    GENERATORS = 'Generators'
    NOTIFICATIONS = 'Notifications'


class InventoryPage(str, Enum):
    DASHBOARD = 'Dashboard'
    BATTERY_MANAGEMENT = 'Battery Management'
    GATE_PASS_MANAGEMENT = 'Gate Pass Management'
    CHARGER_MANAGEMENT = 'Charger Management'
    ISSUE_TRIAGE = 'Issue Triage'
    INVENTORY_REPORTS = 'Inventory Reports'
    NOTIFICATIONS = 'Notifications'


PANEL_PAGES: Dict[Panel, Type[Enum]] = {
    Panel.ADMIN: AdminPage,
    Panel.OPERATOR: OperatorPage,
    Panel.TECHNICIAN: TechnicianPage,
    Panel.INVENTORY: InventoryPage,
}

DEFAULT_PAGE = 'Dashboard'

ROLE_PANELS: Dict[Role, Panel] = {
    Role.ADMIN: Panel.ADMIN,
    Role.OPERATE: Panel.OPERATOR,
    Role.TECH: Panel.TECHNICIAN,
    Role.INVENT: Panel.INVENTORY,
}


def panel_for_role(role) -> Panel:
    """Shell wrapping a role's content; unknown roles get the admin shell."""
    return ROLE_PANELS.get(coerce_role(role), Panel.ADMIN)


def parse_page(panel: Panel, value: Optional[str]) -> Optional[Enum]:
    """Case-sensitive lookup of ``value`` in the panel's page set."""
    if not value:
        return None
    pages = PANEL_PAGES[panel]
    for page in pages:
        if page.value == value:
            return page
    return None


__all__ = [
    'Panel', 'AdminPage', 'OperatorPage', 'TechnicianPage', 'InventoryPage', 'PANEL_PAGES',
    'DEFAULT_PAGE', 'ROLE_PANELS', 'panel_for_role', 'parse_page',
]
