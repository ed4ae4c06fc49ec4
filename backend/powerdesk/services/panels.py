from __future__ import annotations
"""Role shell selection and page -> content component dispatch."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from powerdesk.constants.pages import (
    Panel, AdminPage, OperatorPage, TechnicianPage, InventoryPage, panel_for_role, parse_page,
)
from powerdesk.constants.roles import coerce_role
from powerdesk.services.navigation import NavigationState

COMING_SOON = 'ComingSoon'


@dataclass(frozen=True)
class ContentComponent:
    name: str
    page: str
    props: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'page': self.page, 'props': dict(self.props)}


PANEL_CONTENT = {
    Panel.ADMIN: {
        AdminPage.DASHBOARD: 'Dashboard',
        AdminPage.GENERATORS: 'Generators',
        AdminPage.BATTERIES: 'Batteries',
        AdminPage.TASKS: 'Tasks',
        AdminPage.SERVICES: 'Services',
        AdminPage.SHOPS: 'Shops',
        AdminPage.INVOICES: 'Invoices',
        AdminPage.CREATE_INVOICE: 'CreateInvoice',
        AdminPage.REPORTS: 'Reports',
        AdminPage.USERS: 'Users',
        AdminPage.NOTIFICATIONS: 'NotificationCenter',
        AdminPage.GENERATOR_DETAILS: 'GeneratorDetails',
    },
    Panel.OPERATOR: {
        OperatorPage.DASHBOARD: 'OperatorIssueReporting',
        OperatorPage.GENERATORS: 'OperatorGenerators',
        OperatorPage.BATTERIES: 'OperatorBatteries',
        OperatorPage.REPORTS: 'OperatorReports',
        OperatorPage.NOTIFICATIONS: 'OperatorNotifications',
    },
    Panel.TECHNICIAN: {
        # Dashboard has no technician content yet and renders the placeholder
        TechnicianPage.REPORTS: 'TechnicianIssuesReporting',
        TechnicianPage.TASKS: 'TechnicianTasks',
        TechnicianPage.SERVICES: 'TechnicianServicesLogging',
        TechnicianPage.GENERATORS: 'TechnicianAssignedGenerators',
        TechnicianPage.NOTIFICATIONS: 'TechnicianNotifications',
    },
    Panel.INVENTORY: {
        InventoryPage.DASHBOARD: 'InventoryDashboard',
        InventoryPage.BATTERY_MANAGEMENT: 'InventoryBatteryManagement',
        InventoryPage.GATE_PASS_MANAGEMENT: 'InventoryGatePassManagement',
        InventoryPage.CHARGER_MANAGEMENT: 'InventoryChargerManagement',
        InventoryPage.ISSUE_TRIAGE: 'InventoryIssueTriage',
        InventoryPage.INVENTORY_REPORTS: 'InventoryInventoryReports',
        InventoryPage.NOTIFICATIONS: 'InventoryNotifications',
    },
}

PLACEHOLDERS = {
    Panel.ADMIN: ('Coming Soon', '{page} page content will be implemented here.'),
    Panel.OPERATOR: ('Operator Panel', 'Operator {page} page content will be implemented here.'),
    Panel.TECHNICIAN: ('Technician Panel', 'Technician {page} page content will be implemented here.'),
    Panel.INVENTORY: ('Inventory Panel', 'Inventory {page} page content will be implemented here.'),
}


class PanelRouter:
    """Pure mapping (role, page) -> content component."""

    def shell_for_role(self, role) -> Panel:
        return panel_for_role(role)

    def route(self, role, page: str, selected_generator_id: Optional[str] = None) -> ContentComponent:
        panel = self.shell_for_role(role)
        found = parse_page(panel, page)
        name = PANEL_CONTENT[panel].get(found) if found is not None else None
        if name is None:
            return self._placeholder(panel, page)
        props: Dict[str, Any] = {}
        if found is AdminPage.CREATE_INVOICE:
            props['back'] = AdminPage.INVOICES.value
        elif found is AdminPage.GENERATOR_DETAILS:
            props['generator_id'] = selected_generator_id or ''
        elif found is AdminPage.GENERATORS:
            props['selectable'] = True
        return ContentComponent(name, page, props)

    def _placeholder(self, panel: Panel, page: str) -> ContentComponent:
        title, message = PLACEHOLDERS[panel]
        return ContentComponent(COMING_SOON, page, {
            'heading': page,
            'title': title,
            'message': message.format(page=page),
            'detail': 'This section is under development.',
        })

    def render(self, role, nav: NavigationState) -> Dict[str, Any]:
        """Full view for a shell: which shell, which content, and the URL to show."""
        component = self.route(role, nav.current_page, nav.selected_generator_id)
        return {
            'role': coerce_role(role).value,
            'shell': self.shell_for_role(role).value,
            'navigation': nav.to_dict(),
            'content': component.to_dict(),
        }


router = PanelRouter()

__all__ = ['ContentComponent', 'PanelRouter', 'PANEL_CONTENT', 'PLACEHOLDERS', 'COMING_SOON', 'router']
