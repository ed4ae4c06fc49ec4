from __future__ import annotations
"""Identity provider used by the dashboard session.

The provider exposes an auth-state stream: listeners registered through
``on_auth_state_changed`` receive the current user (or ``None``) right away and again
after every sign-in / sign-out. Credentials live in the ``accounts`` table.
"""
import secrets
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from powerdesk.models.authz import Account

MIN_PASSWORD_LENGTH = 6

_revoked_jtis: Set[str] = set()


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str = ''


class AuthError(Exception):
    def __init__(self, code: str, message: str = ''):
        super().__init__(message or code)
        self.code = code
        self.message = message or code


Listener = Callable[[Optional[AuthUser]], None]


class IdentityProvider:
    def __init__(self, session_factory, current_user: Optional[AuthUser] = None):
        self._session_factory = session_factory
        self._current = current_user
        self._listeners: List[Listener] = []

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current

    def on_auth_state_changed(self, listener: Listener) -> Callable[[], None]:
        """Subscribe; returns the unsubscribe callable."""
        self._listeners.append(listener)
        listener(self._current)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _emit(self):
        for listener in list(self._listeners):
            listener(self._current)

    def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        email = (email or '').strip().lower()
        if not email or not password:
            raise AuthError('auth/missing-credentials', 'email & password required')
        session = self._session_factory()
        account = session.execute(select(Account).where(Account.email == email)).scalar_one_or_none()
        if not account or not account.is_active or not account.verify_password(password):
            raise AuthError('auth/invalid-credential', 'invalid credentials')
        self._current = AuthUser(uid=account.uid, email=account.email)
        self._emit()
        return self._current

    def sign_out(self) -> None:
        self._current = None
        self._emit()

    def create_account(self, email: str, password: str) -> AuthUser:
        email = (email or '').strip().lower()
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError('auth/weak-password', f'Password should be at least {MIN_PASSWORD_LENGTH} characters')
        session = self._session_factory()
        if session.execute(select(Account).where(Account.email == email)).scalar_one_or_none():
            raise AuthError('auth/email-already-in-use', 'That email address is already in use.')
        account = Account(uid=secrets.token_hex(14), email=email, password_hash='', is_active=True)
        account.set_password(password)
        session.add(account)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise AuthError('auth/email-already-in-use', 'That email address is already in use.')
        return AuthUser(uid=account.uid, email=account.email)

    def delete_account(self, uid: str) -> None:
        session = self._session_factory()
        account = session.get(Account, uid)
        if account is not None:
            session.delete(account)
            session.commit()


class TokenIdentityProvider(IdentityProvider):
    """Provider for one HTTP request, seeded from its bearer token."""

    def __init__(self, session_factory, jwt_payload: Optional[dict] = None):
        user = None
        if jwt_payload and jwt_payload.get('sub'):
            user = AuthUser(uid=str(jwt_payload['sub']), email=jwt_payload.get('email') or '')
        super().__init__(session_factory, user)
        self._jwt_payload = jwt_payload

    def sign_out(self) -> None:
        if self._jwt_payload:
            revoke_token(self._jwt_payload)
        super().sign_out()


def revoke_token(jwt_payload: dict) -> None:
    jti = jwt_payload.get('jti')
    if jti:
        _revoked_jtis.add(jti)


def is_token_revoked(jwt_payload: dict) -> bool:
    return jwt_payload.get('jti') in _revoked_jtis


def request_identity_provider() -> TokenIdentityProvider:
    """Provider for the current request (logged out when no valid token is sent)."""
    from flask_jwt_extended import verify_jwt_in_request, get_jwt
    from powerdesk import get_db
    verify_jwt_in_request(optional=True)
    payload = get_jwt() or None
    return TokenIdentityProvider(get_db, payload)


__all__ = [
    'AuthUser', 'AuthError', 'IdentityProvider', 'TokenIdentityProvider', 'MIN_PASSWORD_LENGTH',
    'revoke_token', 'is_token_revoked', 'request_identity_provider',
]
