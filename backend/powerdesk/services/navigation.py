from __future__ import annotations
"""URL-synchronised navigation state for the panel shells.

Each panel has one adapter with two pure functions:

    page_from_query(args)        URL query -> page (None when absent/unknown)
    query_for_page(page, args)   page -> URL query (other parameters preserved)

``NavigationState`` holds the current page of one shell and serialises it back into
the URL after every navigation as a replace (no history entry).
"""
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from powerdesk.constants.pages import (
    Panel, DEFAULT_PAGE, TechnicianPage, parse_page,
)

PAGE_PARAM = 'page'
FROM_PARAM = 'from'


class NavigationAdapter:
    """Case-sensitive identity mapping: every navigation writes ``page=<Page>``."""

    def __init__(self, panel: Panel, sync_on_mount: bool = False):
        self.panel = panel
        self.sync_on_mount = sync_on_mount

    def param_for_page(self, page: str) -> Optional[str]:
        # any page name is written as-is; reading it back is what validates it
        return page or None

    def page_for_param(self, value: Optional[str]) -> Optional[str]:
        found = parse_page(self.panel, value)
        return found.value if found else None

    def page_from_query(self, args: Mapping[str, Any]) -> Optional[str]:
        return self.page_for_param(args.get(PAGE_PARAM))

    def query_for_page(self, page: str, args: Mapping[str, Any]) -> Dict[str, str]:
        query = {k: v for k, v in args.items()}
        value = self.param_for_page(page)
        if value:
            query[PAGE_PARAM] = value
        else:
            query.pop(PAGE_PARAM, None)
        return query


class TokenNavigationAdapter(NavigationAdapter):
    """Lowercase token mapping; pages outside the mapping clear the parameter."""

    def __init__(self, panel: Panel, page_to_param: Dict[str, str], sync_on_mount: bool = False):
        super().__init__(panel, sync_on_mount)
        self.page_to_param = dict(page_to_param)
        self.param_to_page = {param: page for page, param in self.page_to_param.items()}
        if len(self.param_to_page) != len(self.page_to_param):
            raise ValueError('page/param mapping must be one-to-one')

    def param_for_page(self, page: str) -> Optional[str]:
        return self.page_to_param.get(page)

    def page_for_param(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        return self.param_to_page.get(str(value).lower())


TECHNICIAN_PAGE_TO_PARAM = {
    TechnicianPage.REPORTS.value: 'reports',
    TechnicianPage.TASKS.value: 'tasks',
    TechnicianPage.SERVICES.value: 'services',
    TechnicianPage.GENERATORS.value: 'generators',
    TechnicianPage.NOTIFICATIONS.value: 'notifications',
}

ADAPTERS: Dict[Panel, NavigationAdapter] = {
    Panel.ADMIN: NavigationAdapter(Panel.ADMIN, sync_on_mount=True),
    Panel.OPERATOR: NavigationAdapter(Panel.OPERATOR),
    Panel.TECHNICIAN: TokenNavigationAdapter(Panel.TECHNICIAN, TECHNICIAN_PAGE_TO_PARAM),
    Panel.INVENTORY: NavigationAdapter(Panel.INVENTORY),
}


def panel_path(panel: Panel) -> str:
    return f'/{panel.value}'


def build_url(path: str, query: Mapping[str, Any]) -> str:
    qs = urlencode([(k, v) for k, v in query.items() if v is not None])
    return f'{path}?{qs}' if qs else path


class NavigationState:
    """Current page of one panel shell, mirrored into its URL."""

    def __init__(self, panel: Panel, query: Optional[Mapping[str, Any]] = None, path: Optional[str] = None):
        self.panel = panel
        self.adapter = ADAPTERS[panel]
        self.path = path or panel_path(panel)
        self.query: Dict[str, str] = {k: v for k, v in (query or {}).items()}
        self.current_page: str = self.adapter.page_from_query(self.query) or DEFAULT_PAGE
        self.selected_generator_id: Optional[str] = None
        self.replace = False
        if self.adapter.sync_on_mount:
            self.query = self.adapter.query_for_page(self.current_page, self.query)

    @property
    def url(self) -> str:
        return build_url(self.path, self.query)

    def navigate(self, page: str) -> str:
        """Switch page and rewrite the URL in place; returns the new URL."""
        self.current_page = page
        self.query = self.adapter.query_for_page(page, self.query)
        self.replace = True
        return self.url

    def select_generator(self, generator_id: Optional[str]) -> bool:
        # Only the admin shell has a generator detail sub-page
        if self.panel is not Panel.ADMIN:
            return False
        self.selected_generator_id = generator_id or None
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'panel': self.panel.value,
            'page': self.current_page,
            'url': self.url,
            'replace': self.replace,
            'selected_generator_id': self.selected_generator_id,
        }


def generator_back_target(from_value: Optional[str]) -> str:
    """Where the generator detail deep link returns to."""
    if (from_value or '').lower() == Panel.TECHNICIAN.value:
        return NavigationState(Panel.TECHNICIAN).navigate(TechnicianPage.GENERATORS.value)
    return NavigationState(Panel.ADMIN).navigate('Generators')


__all__ = [
    'PAGE_PARAM', 'FROM_PARAM', 'NavigationAdapter', 'TokenNavigationAdapter', 'TECHNICIAN_PAGE_TO_PARAM',
    'ADAPTERS', 'NavigationState', 'build_url', 'panel_path', 'generator_back_target',
]
