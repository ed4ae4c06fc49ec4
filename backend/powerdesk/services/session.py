from __future__ import annotations
"""Dashboard session: who is signed in and which role shell they get.

``AuthSession`` is an explicit, injected object with a subscribe/unsubscribe lifecycle
(use it as a context manager). It is the only writer of its state; every auth event
re-reads ``users/{uid}`` from the store, nothing is cached between events.
"""
import logging
from typing import Any, Callable, Dict, Optional

from powerdesk.constants.roles import Role, map_role_to_client, coerce_role
from powerdesk.services.identity import AuthUser

log = logging.getLogger(__name__)

ROOT_ROUTE = '/'


def resolve_role(store, uid: str) -> Role:
    """Role tag for ``uid``; missing records and lookup failures yield admin."""
    try:
        record = store.get(f'users/{uid}')
    except Exception:
        log.warning('Role lookup failed for %s; defaulting to admin', uid, exc_info=True)
        return Role.ADMIN
    raw = record.get('role') if isinstance(record, dict) else None
    return map_role_to_client(raw)


class AuthSession:
    def __init__(self, provider, store):
        self._provider = provider
        self._store = store
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.is_logged_in = False
        self.role = Role.ADMIN
        self.email = ''
        self.uid: Optional[str] = None
        self.is_loading = True

    def start(self) -> 'AuthSession':
        if self._unsubscribe is not None:
            return self
        try:
            self._unsubscribe = self._provider.on_auth_state_changed(self._on_auth_state)
        except Exception:
            log.exception('Auth initialization error')
            self.is_loading = False
        return self

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _on_auth_state(self, user: Optional[AuthUser]) -> None:
        if user and user.uid:
            self.role = resolve_role(self._store, user.uid)
            self.uid = user.uid
            self.email = user.email or ''
            self.is_logged_in = True
        else:
            self.is_logged_in = False
            self.role = Role.ADMIN
            self.uid = None
            self.email = ''
        self.is_loading = False

    def handle_login(self, role, email: str) -> None:
        """Optimistic update from the login form; the listener reconciles it."""
        self.is_logged_in = True
        self.role = coerce_role(role)
        self.email = email

    def snapshot(self) -> Dict[str, Any]:
        return {
            'is_logged_in': self.is_logged_in,
            'role': self.role.value,
            'email': self.email,
            'is_loading': self.is_loading,
        }


def perform_logout(provider) -> str:
    """Best-effort sign-out; always lands on the root route."""
    try:
        provider.sign_out()
    except Exception:
        log.exception('Logout error')
    return ROOT_ROUTE


__all__ = ['AuthSession', 'resolve_role', 'perform_logout', 'ROOT_ROUTE']
