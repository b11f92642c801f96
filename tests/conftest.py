import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'billing' and 'config' resolve properly.
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def isolated_logo_cache(tmp_path, monkeypatch):
    """Keep cached logo thumbnails out of the working tree."""
    import billing.logo_cache as logo_cache
    cache = tmp_path / 'logo_cache'
    monkeypatch.setattr(logo_cache, 'LOGO_CACHE_DIR', cache)
    return cache


@pytest.fixture
def png_bytes():
    import io
    from PIL import Image
    buf = io.BytesIO()
    Image.new('RGB', (400, 100), (31, 78, 121)).save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def sample_quotation():
    return {
        'id': 'q-123',
        'quotation_number': 'QT-2024-0042',
        'client_name': 'Maria Santos Reyes',
        'client_designation': 'Brand Manager',
        'client_company_name': 'Acme Foods Corp.',
        'start_date': '2024-01-25',
        'end_date': '2024-02-05',
        'duration_days': 45,
        'items': {
            'name': 'EDSA Guadalupe LED',
            'type': 'LED Billboard',
            'price': 3000,
            'specs': {'height': 40, 'width': 60},
            'site_notes': 'Facing northbound traffic',
        },
    }


@pytest.fixture
def sample_company():
    return {
        'name': 'OH Plus Media',
        'address': {'street': '123 Ayala Ave', 'city': 'Makati', 'province': 'Metro Manila'},
        'zip': '1226',
        'phone': '+63 2 8888 0000',
        'email': 'sales@example.com',
    }


@pytest.fixture
def sample_cost_estimate():
    return {
        'id': 'ce-77',
        'costEstimateNumber': 'CE-2024-0007',
        'title': 'Guadalupe LED Cost Estimate',
        'client': {'name': 'Maria Santos Reyes', 'designation': 'Brand Manager', 'company': 'Acme Foods Corp.'},
        'startDate': '2024-01-31',
        'endDate': '2024-03-01',
        'durationDays': 30,
        'lineItems': [
            {'id': 'site1', 'description': 'EDSA Guadalupe LED', 'category': 'LED Billboard Rental',
             'unitPrice': 3000, 'total': 3000, 'content_type': 'Digital', 'specs': {'height': 40, 'width': 60}},
            {'id': 'site1_production', 'description': 'Production', 'category': 'Production',
             'unitPrice': 500, 'total': 500},
            {'id': 'misc', 'description': 'Permits', 'category': 'Other', 'unitPrice': 250, 'total': 250},
        ],
        'items': {'site_notes': 'Facing northbound traffic', 'price_notes': 'Rates valid this quarter'},
        'notes': 'Installation handled by partner',
    }


@pytest.fixture
def sample_ce_company():
    return {
        'name': 'OH Plus Media',
        'company_name': 'OH Plus Media Inc.',
        'company_location': {'street': '123 Ayala Ave', 'city': 'Makati', 'province': 'Metro Manila'},
        'zip': '1226',
        'phone': '+63 2 8888 0000',
        'email': 'sales@example.com',
    }
