import pytest

from app import server


@pytest.fixture
def client():
    return server.test_client()


def test_generate_quotation_pdf_route(client, sample_quotation, sample_company):
    resp = client.post('/api/generate-quotation-pdf', json={
        'quotation': sample_quotation, 'companyData': sample_company, 'logoDataUrl': None,
    })
    assert resp.status_code == 200
    assert resp.headers['Content-Type'] == 'application/pdf'
    assert resp.headers['Content-Disposition'] == 'attachment; filename="QT-2024-0042.pdf"'
    assert resp.data.startswith(b'%PDF')


def test_generate_quotation_pdf_route_fallback_filename(client):
    resp = client.post('/api/generate-quotation-pdf', json={'quotation': {'id': 'abc'}})
    assert resp.status_code == 200
    assert 'filename="abc.pdf"' in resp.headers['Content-Disposition']


def test_generate_quotation_pdf_route_bad_body(client):
    resp = client.post('/api/generate-quotation-pdf', data='not json', content_type='application/json')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Failed to generate PDF'}


def test_calculate_route(client):
    resp = client.post('/api/quotations/calculate', json={
        'start_date': '2024-01-25',
        'end_date': '2024-02-05',
        'items': [{'id': 'a', 'name': 'Site A', 'price': 3000}],
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['duration_days'] == 11
    assert data['total_amount'] == pytest.approx(1100)
    assert data['duration_label'] == '11 days'
    assert data['prorated'][0]['total_lease'] == pytest.approx(3000 * (7 / 31) + 3000 * (5 / 29))


def test_calculate_route_validation(client):
    assert client.post('/api/quotations/calculate', data='x', content_type='text/plain').status_code == 400
    resp = client.post('/api/quotations/calculate', json={'items': 'nope'})
    assert resp.status_code == 400
    resp = client.post('/api/quotations/calculate', json={
        'start_date': '2024-01-01', 'end_date': '2024-01-31', 'items': [{'id': 'z', 'price': 'abc'}],
    })
    assert resp.status_code == 400


def test_health_ok(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json() == {'status': 'ok'}


def test_generate_cost_estimate_pdf_route(client, sample_cost_estimate, sample_ce_company):
    resp = client.post('/api/generate-cost-estimate-pdf', json={
        'costEstimate': sample_cost_estimate, 'companyData': sample_ce_company, 'logoDataUrl': None,
        'userData': {'first_name': 'Ana', 'last_name': 'Cruz'},
    })
    assert resp.status_code == 200
    assert resp.headers['Content-Type'] == 'application/pdf'
    assert resp.headers['Content-Disposition'] == 'inline; filename="CE-2024-0007.pdf"'
    assert resp.headers['Cache-Control'] == 'no-store'
    assert resp.data.startswith(b'%PDF')


def test_generate_cost_estimate_pdf_route_bad_body(client):
    resp = client.post('/api/generate-cost-estimate-pdf', data='not json', content_type='application/json')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Failed to generate PDF'}
