from datetime import date

import pytest

from billing.calculations import (
    GRAND_TOTAL_MULTIPLIER, VAT_RATE, calculate_quotation_total, compute_lease_totals,
    duration_days_between, format_amount, prorated_price,
)


def test_lease_totals_apply_fixed_vat():
    totals = compute_lease_totals(3000, date(2024, 3, 1), date(2024, 3, 15))
    base = prorated_price(3000, date(2024, 3, 1), date(2024, 3, 15))
    assert totals['total_lease'] == base
    assert totals['vat'] == base * 0.12
    assert totals['grand_total'] == base * 1.12
    assert VAT_RATE == 0.12 and GRAND_TOTAL_MULTIPLIER == 1.12


def test_duration_days_rounds_up_with_minimum_one():
    assert duration_days_between('2024-01-01', '2024-01-31') == 30
    assert duration_days_between('2024-01-01T00:00:00', '2024-01-02T06:00:00') == 2
    assert duration_days_between('2024-01-01', '2024-01-01') == 1
    assert duration_days_between('2024-02-01', '2024-01-01') == 1
    assert duration_days_between('garbage', '2024-01-01') == 1


def test_calculate_quotation_total_flat_thirty_day_rate():
    items = [
        {'id': 'a', 'name': 'Site A', 'price': 30000},
        {'id': 'b', 'name': 'Site B', 'price': 15000},
        {'id': 'c', 'name': 'Site C'},
    ]
    result = calculate_quotation_total('2024-01-01', '2024-02-15', items)
    assert result['duration_days'] == 45
    assert result['items'][0]['item_total_amount'] == pytest.approx(45000)
    assert result['items'][1]['item_total_amount'] == pytest.approx(22500)
    assert result['items'][2]['item_total_amount'] == 0
    assert all(i['duration_days'] == 45 for i in result['items'])
    assert result['total_amount'] == pytest.approx(67500)
    # inputs are left untouched
    assert 'item_total_amount' not in items[0]


def test_calculate_quotation_total_no_items():
    result = calculate_quotation_total('2024-01-01', '2024-01-10', [])
    assert result == {'duration_days': 9, 'total_amount': 0.0, 'items': []}


def test_format_amount():
    assert format_amount(1234567.891) == 'PHP 1,234,567.89'
    assert format_amount(None) == 'PHP 0.00'
    assert format_amount(5, 'USD') == 'USD 5.00'
