from __future__ import annotations
from flask import Blueprint, request, abort, g
from flask_jwt_extended import create_access_token
from powerdesk import get_db, get_store
from powerdesk.constants.pages import panel_for_role
from powerdesk.decorators.auth import load_session
from powerdesk.services.identity import IdentityProvider, AuthError
from powerdesk.services.navigation import NavigationState
from powerdesk.services.session import AuthSession, perform_logout

auth_bp = Blueprint('auth', __name__)


def landing_url(role) -> str:
    """URL of the role's shell on its default page."""
    return NavigationState(panel_for_role(role)).url


@auth_bp.post('/login')
def login():
    data = request.get_json(silent=True) or {}
    provider = IdentityProvider(get_db)
    with AuthSession(provider, get_store()) as session:
        try:
            user = provider.sign_in_with_password(data.get('email'), data.get('password'))
        except AuthError as e:
            abort(400 if e.code == 'auth/missing-credentials' else 401, description=e.message)
        # the listener has already resolved the role; this mirrors the login form
        session.handle_login(session.role, user.email)
        snapshot = session.snapshot()
        role = session.role
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=user.uid, additional_claims={'email': user.email})
    return {'access_token': token, 'session': snapshot, 'redirect': landing_url(role)}


@auth_bp.get('/session')
def current_session():
    session = load_session()
    payload = {'session': session.snapshot()}
    if session.is_logged_in:
        payload['uid'] = session.uid
        payload['landing'] = landing_url(session.role)
    return payload


@auth_bp.post('/logout')
def logout():
    load_session()
    return {'redirect': perform_logout(g.auth_provider)}
