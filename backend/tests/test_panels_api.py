from tests.test_utils_seed import seed_generator
from tests.test_lifecycle_helpers import login_headers


def test_mount_panel_from_url(client):
    headers = login_headers(client, 'panel.tech@example.com', role='technician')
    resp = client.get('/panels/technician?page=TASKS&tab=2', headers=headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['shell'] == 'technician'
    assert body['navigation']['page'] == 'Tasks'
    assert body['content']['name'] == 'TechnicianTasks'
    # no URL rewrite until the user navigates
    assert body['navigation']['replace'] is False


def test_navigate_rewrites_url(client):
    headers = login_headers(client, 'panel.tech2@example.com', role='technician')
    resp = client.post('/panels/technician/navigate', json={'page': 'Dashboard', 'query': {'page': 'reports', 'tab': '2'}}, headers=headers)
    assert resp.status_code == 200
    nav = resp.get_json()['navigation']
    assert nav['url'] == '/technician?tab=2'
    assert nav['replace'] is True
    assert resp.get_json()['content']['name'] == 'ComingSoon'


def test_admin_generator_selection(client):
    headers = login_headers(client, 'panel.admin@example.com', role='admin')
    resp = client.post('/panels/admin/navigate', json={'page': 'GeneratorDetails', 'generator_id': 'GEN-42'}, headers=headers)
    body = resp.get_json()
    assert body['navigation']['url'] == '/admin?page=GeneratorDetails'
    assert body['content']['props'] == {'generator_id': 'GEN-42'}


def test_generator_selection_rejected_outside_admin(client):
    headers = login_headers(client, 'panel.op@example.com', role='operator')
    resp = client.post('/panels/operator/navigate', json={'page': 'Generators', 'generator_id': 'GEN-1'}, headers=headers)
    assert resp.status_code == 400


def test_unknown_admin_page_renders_placeholder(client):
    headers = login_headers(client, 'panel.admin2@example.com', role='admin')
    resp = client.post('/panels/admin/navigate', json={'page': 'Payroll'}, headers=headers)
    body = resp.get_json()
    assert body['content']['name'] == 'ComingSoon'
    assert body['content']['props']['title'] == 'Coming Soon'
    assert body['navigation']['url'] == '/admin?page=Payroll'


def test_other_role_shell_is_forbidden(client):
    headers = login_headers(client, 'panel.inv@example.com', role='inventory')
    assert client.get('/panels/admin', headers=headers).status_code == 403
    assert client.get('/panels/inventory', headers=headers).status_code == 200
    assert client.get('/panels/payroll', headers=headers).status_code == 404


def test_panels_require_sign_in(client):
    assert client.get('/panels/admin').status_code == 401


def test_root_redirects_to_landing(client):
    assert client.get('/').get_json()['view'] == 'Login'
    headers = login_headers(client, 'panel.op2@example.com', role='operator')
    assert client.get('/', headers=headers).get_json()['redirect'] == '/operator'


def test_generator_deep_link_back_target(client):
    headers = login_headers(client, 'panel.tech3@example.com', role='technician')
    seed_generator('GEN-5')
    resp = client.get('/generators/GEN-5?from=technician', headers=headers)
    body = resp.get_json()
    assert body['back'] == '/technician?page=generators'
    assert body['content']['props']['generator_id'] == 'GEN-5'
    assert client.get('/generators/GEN-5', headers=headers).get_json()['back'] == '/admin?page=Generators'


def test_generator_deep_link_resolves_record_id(client):
    headers = login_headers(client, 'panel.admin@example.com', role='admin')
    seed_generator('-Nx01pushkey', generator_id='GEN-77', brand='Cummins')
    body = client.get('/generators/GEN-77', headers=headers).get_json()
    assert body['generator']['db_key'] == '-Nx01pushkey'
    assert body['generator']['brand'] == 'Cummins'
    assert body['content']['props'] == {'generator_id': 'GEN-77'}


def test_generator_deep_link_unknown_is_404(client):
    headers = login_headers(client, 'panel.admin@example.com', role='admin')
    resp = client.get('/generators/NO-SUCH-GEN', headers=headers)
    assert resp.status_code == 404
    assert resp.get_json()['error']['detail'] == 'Generator not found'
