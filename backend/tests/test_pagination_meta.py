import pytest
from powerdesk.config.pagination import normalize_pagination, DEFAULT_LIMIT, MAX_LIMIT
from tests.test_utils_seed import seed_invoice
from tests.test_lifecycle_helpers import login_headers


def test_normalize_defaults_and_caps():
    assert normalize_pagination(None, None) == (DEFAULT_LIMIT, 0)
    assert normalize_pagination('', '') == (DEFAULT_LIMIT, 0)
    assert normalize_pagination(str(MAX_LIMIT + 50), '3') == (MAX_LIMIT, 3)
    with pytest.raises(ValueError):
        normalize_pagination('abc', None)


def test_invoice_list_pagination_meta(client):
    headers = login_headers(client, 'page.admin@example.com')
    for i in range(3):
        seed_invoice(f'PAGE-{i}', company_name=f'Paging Co {i}')
    body = client.get('/invoices?search=paging&limit=2&offset=1&sort=id', headers=headers).get_json()
    assert body['pagination'] == {'total': 3, 'limit': 2, 'offset': 1, 'returned': 2}
    assert [r['id'] for r in body['data']] == ['PAGE-1', 'PAGE-2']
    assert client.get('/invoices?limit=lots', headers=headers).status_code == 400
