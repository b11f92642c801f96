import pytest
from dash.exceptions import PreventUpdate

from app import download_quotation, update_calculator


def test_calculator_outputs():
    duration, lease, vat, total, period, rows = update_calculator(3000, '2024-03-01', '2024-03-31')
    assert duration == '1 month'
    assert lease == 'PHP 3,000.00'
    assert vat == 'PHP 360.00'
    assert total == 'PHP 3,360.00'
    assert period == 'March 1, 2024 - March 31, 2024'
    assert len(rows) == 1 and rows[0]['days_counted'] == 31
    assert rows[0]['amount'] == 'PHP 3,000.00'


def test_calculator_without_period():
    out = update_calculator(3000, None, '2024-03-31')
    assert out[0] == '0 days'
    assert out[5] == []


def test_download_requires_period():
    with pytest.raises(PreventUpdate):
        download_quotation(None, 'Site', 1000, '2024-01-01', '2024-01-31')
    data, status = download_quotation(1, 'Site', 1000, None, None)
    assert status is not None


def test_download_builds_pdf():
    data, status = download_quotation(1, 'EDSA LED', 1000, '2024-01-01', '2024-01-31')
    assert status is None
    assert data['type'] == 'application/pdf'
    assert data['filename'].startswith('QT-') and data['filename'].endswith('.pdf')
