from functools import wraps
from flask import abort, g
from powerdesk import get_store
from powerdesk.services.identity import request_identity_provider
from powerdesk.services.session import AuthSession


def load_session() -> AuthSession:
    """AuthSession for the current request, kept on ``g`` for the rest of it."""
    session = g.get('auth_session')
    if session is None:
        provider = request_identity_provider()
        session = AuthSession(provider, get_store()).start()
        g.auth_provider = provider
        g.auth_session = session
    return session


def require_session(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not load_session().is_logged_in:
            abort(401, description='Sign in required')
        return fn(*args, **kwargs)
    return wrapper


def require_roles(*roles):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            session = load_session()
            if not session.is_logged_in:
                abort(401, description='Sign in required')
            if session.role not in roles:
                abort(403, description='Role not permitted')
            return fn(*args, **kwargs)
        return wrapper
    return outer
