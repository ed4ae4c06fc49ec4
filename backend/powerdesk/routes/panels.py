from __future__ import annotations
from flask import Blueprint, request, abort
from powerdesk.constants.pages import Panel, AdminPage
from powerdesk.decorators.auth import load_session, require_session
from powerdesk import get_store
from powerdesk.routes.auth import landing_url
from powerdesk.services.generators import get_generator
from powerdesk.services.navigation import NavigationState, FROM_PARAM, generator_back_target
from powerdesk.services.panels import ContentComponent, router
from powerdesk.utils.validation import require_json_object

panels_bp = Blueprint('panels', __name__)


def _panel_for_caller(panel_name: str) -> Panel:
    try:
        panel = Panel(panel_name)
    except ValueError:
        abort(404, description=f'Unknown panel {panel_name}')
    session = load_session()
    if router.shell_for_role(session.role) is not panel:
        abort(403, description='Panel not available for this role')
    return panel


@panels_bp.get('/')
def root():
    session = load_session()
    if not session.is_logged_in:
        return {'view': 'Login', 'session': session.snapshot()}
    return {'redirect': landing_url(session.role), 'session': session.snapshot()}


@panels_bp.get('/panels/<panel_name>')
@require_session
def mount_panel(panel_name: str):
    panel = _panel_for_caller(panel_name)
    nav = NavigationState(panel, request.args.to_dict())
    return router.render(load_session().role, nav)


@panels_bp.post('/panels/<panel_name>/navigate')
@require_session
def navigate(panel_name: str):
    panel = _panel_for_caller(panel_name)
    data = require_json_object()
    page = data.get('page')
    if not page or not isinstance(page, str):
        abort(400, description='page required')
    query = data.get('query') or {}
    if not isinstance(query, dict):
        abort(400, description='query must be an object')
    nav = NavigationState(panel, {str(k): str(v) for k, v in query.items()})
    if data.get('generator_id') is not None and not nav.select_generator(str(data['generator_id'])):
        abort(400, description='generator selection is only available on the admin panel')
    nav.navigate(page)
    return router.render(load_session().role, nav)


@panels_bp.get('/generators/<generator_id>')
@require_session
def generator_deep_link(generator_id: str):
    generator = get_generator(get_store(), generator_id)
    if generator is None:
        abort(404, description='Generator not found')
    back = generator_back_target(request.args.get(FROM_PARAM))
    component = ContentComponent('GeneratorDetails', AdminPage.GENERATOR_DETAILS.value, {'generator_id': generator['id']})
    return {'content': component.to_dict(), 'back': back, 'generator': generator}
